"""HTTP surface for the meal plan generator."""
