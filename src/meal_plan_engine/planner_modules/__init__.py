"""
Planner modules - the decision steps the meal plan generator runs per day.
"""

from .compatibility import (
    is_compatible,
    is_allergy_safe,
    filter_compatible,
    rejection_reason,
    score_recipe,
    pick_best,
)
from .keyword_resolver import resolve, extract_food_words, KeywordMatch
from .side_selector import (
    SideSelector,
    select_sides,
    rank_sides,
    pairing_score,
    determine_main_weight,
)
from .lunch_planner import plan_lunches, select_lunch_recipe, find_leftover_main

__all__ = [
    "is_compatible",
    "is_allergy_safe",
    "filter_compatible",
    "rejection_reason",
    "score_recipe",
    "pick_best",
    "resolve",
    "extract_food_words",
    "KeywordMatch",
    "SideSelector",
    "select_sides",
    "rank_sides",
    "pairing_score",
    "determine_main_weight",
    "plan_lunches",
    "select_lunch_recipe",
    "find_leftover_main",
]
