"""
Weekly household meal plan generation.

Assigns recipes to cooking days under dietary, allergy and time constraints,
honors locks and free-text meal requests, then attaches sides and lunches.
"""

__version__ = "0.3.0"
