"""
Hard compatibility filtering and preference scoring for recipe candidates.

The filter is the pass/fail gate every automatically selected main must clear.
Allergy and duplicate-use checks are the only parts that also apply to locked
or explicitly requested recipes.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Set

from ..data.models import HouseholdMember, Recipe
from ..tag_canon import SPICY_TAG, VEGAN_TAG

logger = logging.getLogger(__name__)

BASE_SCORE = 100
FAVORITE_BONUS = 50
DISLIKE_PENALTY = 30


def allergy_conflict(recipe: Recipe, members: Iterable[HouseholdMember]) -> Optional[str]:
    """
    Find the first member allergy present in the recipe.

    Returns:
        A "<member> has <allergy> allergy" reason, or None if the recipe is safe
    """
    for member in members:
        for allergy in member.allergies:
            if allergy in recipe.allergens:
                return f"{member.name or member.id} has {allergy} allergy"
    return None


def is_allergy_safe(recipe: Recipe, members: Iterable[HouseholdMember]) -> bool:
    """Unconditional safety check. Never waived, not even for locks."""
    return allergy_conflict(recipe, members) is None


def rejection_reason(
    recipe: Recipe,
    members: Sequence[HouseholdMember],
    max_cook_minutes: Optional[int] = None,
    used_recipe_ids: Optional[Set[int]] = None,
    vegetarian_only: bool = False,
) -> Optional[str]:
    """
    Explain why a recipe fails the compatibility gate.

    Args:
        recipe: Candidate recipe
        members: Members the recipe would be served to
        max_cook_minutes: Day's time budget (None = no limit)
        used_recipe_ids: Recipe IDs already placed in the plan being built
        vegetarian_only: Require a vegetarian recipe (vegetarian-day rule)

    Returns:
        Reason string, or None if the recipe is compatible
    """
    if max_cook_minutes is not None and recipe.cook_minutes > max_cook_minutes:
        return f"cook time {recipe.cook_minutes}min exceeds {max_cook_minutes}min"

    if used_recipe_ids and recipe.id in used_recipe_ids:
        return "already used"

    if vegetarian_only and not recipe.vegetarian:
        return "vegetarian day"

    for member in members:
        who = member.name or member.id
        if member.dietary_style == "vegan" and not recipe.has_tag(VEGAN_TAG):
            return f"{who} is vegan"
        if member.dietary_style == "vegetarian" and not recipe.vegetarian:
            return f"{who} is vegetarian"
        for allergy in member.allergies:
            if allergy in recipe.allergens:
                return f"{who} has {allergy} allergy"
        if member.no_spicy and recipe.has_tag(SPICY_TAG):
            return f"{who} avoids spicy food"

    return None


def is_compatible(
    recipe: Recipe,
    members: Sequence[HouseholdMember],
    max_cook_minutes: Optional[int] = None,
    used_recipe_ids: Optional[Set[int]] = None,
    vegetarian_only: bool = False,
) -> bool:
    """Pass/fail predicate: recipe x members (x day budget x plan state)."""
    return rejection_reason(
        recipe, members, max_cook_minutes, used_recipe_ids, vegetarian_only
    ) is None


def filter_compatible(
    recipes: Iterable[Recipe],
    members: Sequence[HouseholdMember],
    max_cook_minutes: Optional[int] = None,
    used_recipe_ids: Optional[Set[int]] = None,
    vegetarian_only: bool = False,
) -> List[Recipe]:
    """Keep compatible recipes, preserving catalog order."""
    return [
        r for r in recipes
        if is_compatible(r, members, max_cook_minutes, used_recipe_ids, vegetarian_only)
    ]


def score_recipe(recipe: Recipe, members: Iterable[HouseholdMember]) -> int:
    """
    Preference score for an already-compatible recipe. Higher is better.

    Base 100, +50 per member with a favorite keyword in the recipe name,
    -30 for each member dislike found in any ingredient name.
    """
    score = BASE_SCORE
    name_lower = recipe.name.lower()
    ingredient_names = recipe.ingredient_names()

    for member in members:
        if any(fav.lower() in name_lower for fav in member.favorites if fav):
            score += FAVORITE_BONUS

        for dislike in member.dislikes:
            if not dislike:
                continue
            if any(dislike.lower() in ing for ing in ingredient_names):
                score -= DISLIKE_PENALTY

    return score


def pick_best(recipes: Sequence[Recipe], members: Sequence[HouseholdMember]) -> Optional[Recipe]:
    """Highest-scoring recipe; ties go to the earliest in input order."""
    best = None
    best_score = None
    for recipe in recipes:
        score = score_recipe(recipe, members)
        if best_score is None or score > best_score:
            best, best_score = recipe, score
    if best is not None:
        logger.debug(f"[SCORE] Picked {best.name} (score={best_score}) from {len(recipes)} candidates")
    return best
