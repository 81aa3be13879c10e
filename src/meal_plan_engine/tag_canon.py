"""
Canonical vocabulary for meal plan generation.

This file provides the static lookup data used by the planner:
- Days of the week (weekday/weekend split, lunch weekdays)
- Meal modes and dietary styles
- Keyword resolver stop words and related-term table
- Main-dish weight markers for side pairing

All tables are plain constants; nothing here has behavior beyond normalization.
"""

from typing import Dict, List, Set

# =============================================================================
# DAYS
# =============================================================================
DAYS_OF_WEEK: List[str] = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
]

# Lunch planning only covers Monday-Friday; no wraparound to Sunday
LUNCH_WEEKDAYS: List[str] = DAYS_OF_WEEK[:5]

WEEKEND_DAYS: Set[str] = {"saturday", "sunday"}

DAY_ALIASES: Dict[str, str] = {
    "mon": "monday",
    "tue": "tuesday", "tues": "tuesday",
    "wed": "wednesday",
    "thu": "thursday", "thur": "thursday", "thurs": "thursday",
    "fri": "friday",
    "sat": "saturday",
    "sun": "sunday",
}

# =============================================================================
# MEAL MODES / TYPES
# =============================================================================
MEAL_MODE_ONE_MAIN = "one_main"
MEAL_MODE_CUSTOMIZE = "customize_mains"

# Wire aliases accepted for the two modes
MEAL_MODE_ALIASES: Dict[str, str] = {
    "one_main": MEAL_MODE_ONE_MAIN,
    "single-main": MEAL_MODE_ONE_MAIN,
    "single_main": MEAL_MODE_ONE_MAIN,
    "customize_mains": MEAL_MODE_CUSTOMIZE,
    "multi-main": MEAL_MODE_CUSTOMIZE,
    "multi_main": MEAL_MODE_CUSTOMIZE,
}

DEFAULT_NUM_MAINS = 2

# =============================================================================
# DIETARY STYLES
# =============================================================================
VEGAN_TAG = "vegan"
SPICY_TAG = "spicy"

# Standalone lunches must be quick
LUNCH_MAX_COOK_MINUTES = 20

LEFTOVERS_NOTE = "leftovers"

# =============================================================================
# KEYWORD RESOLVER TABLES
# =============================================================================
# Words stripped from a free-text request before matching. Covers articles,
# pronouns/possessive fragments, generic meal words, celebrity chef names and
# day names ("tacos on friday" -> "tacos").
STOP_WORDS: Set[str] = {
    "a", "an", "the", "and", "or", "with", "in", "on", "for", "of", "my",
    "her", "his", "their", "our", "your", "its", "from", "to", "at", "by",
    "style", "recipe", "dish", "homemade", "classic", "famous", "best",
    "easy", "quick", "simple", "favorite", "favourite", "night", "dinner",
    "lunch", "meal", "like", "type", "kind", "some", "good", "great",
    "really", "super", "ina", "garten", "giada", "julia", "child",
    "gordon", "ramsay", "jamie", "oliver", "bobby", "flay", "ree",
    "drummond", "alton", "brown", "martha", "stewart", "rachael", "ray",
    "barefoot", "contessa", "pioneer", "woman",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    "tonight",
}

# Food word -> related terms that count as a weaker hit
RELATED_TERMS: Dict[str, List[str]] = {
    "salmon": ["fish", "seafood"],
    "tuna": ["fish", "seafood"],
    "shrimp": ["shellfish", "seafood"],
    "steak": ["beef"],
    "burger": ["beef", "ground beef"],
    "tacos": ["taco", "mexican"],
    "taco": ["tacos", "mexican"],
    "pasta": ["noodles", "italian"],
    "pizza": ["italian"],
    "curry": ["indian", "thai"],
    "sushi": ["japanese", "fish"],
    "chicken": ["poultry"],
    "pork": ["pork chop", "pulled pork"],
    "mac": ["macaroni", "pasta"],
    "cheese": ["cheddar", "cheesy"],
    "macaroni": ["mac", "pasta"],
}

# Match scores
SCORE_EXACT_NAME = 200
SCORE_NAME_CONTAINS = 150
SCORE_MULTI_NAME = 140
SCORE_NAME_PLUS_INGREDIENT = 120
SCORE_SINGLE_NAME = 100
SCORE_PROTEIN = 80
SCORE_MULTI_INGREDIENT = 70
SCORE_TAG_OR_INGREDIENT = 60
SCORE_RELATED_ONLY = 40
EXTRA_WORD_BONUS = 5
EXTRA_WORD_BONUS_CAP = 3

# =============================================================================
# SIDE PAIRING
# =============================================================================
HEAVY_MAIN_MARKERS: List[str] = ["pasta", "rice", "potato", "bread"]
LIGHT_MAIN_MARKERS: List[str] = ["salad", "soup"]

# Ingredient marker -> main category used by avoid_with_main_types
MAIN_CATEGORY_MARKERS: Dict[str, str] = {
    "pasta": "pasta",
    "rice": "rice",
    "potato": "potatoes",
    "quinoa": "quinoa",
    "bread": "bread",
}


def normalize_day(day: str) -> str:
    """Lower-case a day name and expand abbreviations ("Tue" -> "tuesday")."""
    day_lower = (day or "").strip().lower()
    return DAY_ALIASES.get(day_lower, day_lower)


def normalize_meal_mode(mode: str) -> str:
    """Map a wire meal mode to its canonical name; unknown modes pass through."""
    mode_lower = (mode or MEAL_MODE_ONE_MAIN).strip().lower()
    return MEAL_MODE_ALIASES.get(mode_lower, mode_lower)


def is_weekend(day: str) -> bool:
    return normalize_day(day) in WEEKEND_DAYS
