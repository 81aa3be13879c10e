"""
Lunch planning from leftovers or quick standalone recipes.

Runs after every dinner main for the week has been chosen.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from ..data.models import HouseholdMember, LunchNeed, PlannedMealItem, Recipe
from ..tag_canon import LUNCH_WEEKDAYS, LUNCH_MAX_COOK_MINUTES, LEFTOVERS_NOTE, VEGAN_TAG
from .compatibility import is_allergy_safe

logger = logging.getLogger(__name__)


def previous_weekday(day: str) -> Optional[str]:
    """Monday-Friday predecessor of a day. None for Monday and weekend days."""
    if day not in LUNCH_WEEKDAYS:
        return None
    index = LUNCH_WEEKDAYS.index(day)
    return LUNCH_WEEKDAYS[index - 1] if index > 0 else None


def find_leftover_main(
    day: str,
    planned: Sequence[PlannedMealItem],
    member: Optional[HouseholdMember] = None,
) -> Optional[PlannedMealItem]:
    """
    Locate the previous weekday's main to reuse for a leftovers lunch.

    Only mains with a concrete recipe qualify. When the member is known, the
    main must also be allergy-safe for them (multi-main days can serve dishes
    chosen for someone else).
    """
    prev_day = previous_weekday(day)
    if prev_day is None:
        return None

    for item in planned:
        if item.day != prev_day or item.meal_type != "main" or item.recipe_id is None:
            continue
        if member is not None and item.recipe is not None and not is_allergy_safe(item.recipe, [member]):
            continue
        return item
    return None


def select_lunch_recipe(
    recipes: Sequence[Recipe],
    members: Sequence[HouseholdMember],
    used_recipe_ids: Set[int],
) -> Optional[Recipe]:
    """First quick (<= 20 min), unused recipe the given members can eat. No scoring."""
    for recipe in recipes:
        if recipe.cook_minutes > LUNCH_MAX_COOK_MINUTES:
            continue
        if recipe.id in used_recipe_ids:
            continue
        if not is_allergy_safe(recipe, members):
            continue
        if any(m.dietary_style == "vegetarian" and not recipe.vegetarian for m in members):
            continue
        if any(m.dietary_style == "vegan" and not recipe.has_tag(VEGAN_TAG) for m in members):
            continue
        return recipe
    return None


def plan_lunches(
    lunch_needs: Sequence[LunchNeed],
    planned: Sequence[PlannedMealItem],
    recipes: Sequence[Recipe],
    members: Sequence[HouseholdMember],
    used_recipe_ids: Set[int],
    meal_plan_id: Optional[int] = None,
) -> List[PlannedMealItem]:
    """
    Build lunch items for every member/day that needs one.

    Args:
        lunch_needs: Per-member weekday lunch needs
        planned: Items planned so far (dinner mains and sides)
        recipes: Recipe catalog
        members: Household members
        used_recipe_ids: Recipe IDs already in the plan; standalone lunches are added to it
        meal_plan_id: Plan the items belong to

    Returns:
        Lunch items in lunch_needs order
    """
    members_by_id: Dict[int, HouseholdMember] = {m.id: m for m in members}
    lunches: List[PlannedMealItem] = []

    for need in lunch_needs:
        if not need.needs_lunch:
            continue

        member = members_by_id.get(need.member_id)
        if member is None:
            logger.warning(f"[LUNCH] Unknown member {need.member_id} for {need.day}, skipping")
            continue

        if need.leftovers_ok:
            leftover = find_leftover_main(need.day, planned, member)
            if leftover is None:
                logger.info(f"[LUNCH] No previous-weekday main for {member.name} on {need.day}")
                continue
            lunches.append(PlannedMealItem(
                meal_plan_id=meal_plan_id,
                day=need.day,
                meal_type="lunch",
                recipe_id=leftover.recipe_id,
                assigned_member_ids=[member.id],
                notes=LEFTOVERS_NOTE,
                recipe=leftover.recipe,
                parent=leftover,
            ))
        else:
            recipe = select_lunch_recipe(recipes, [member], used_recipe_ids)
            if recipe is None:
                logger.info(f"[LUNCH] No quick lunch recipe for {member.name} on {need.day}")
                continue
            used_recipe_ids.add(recipe.id)
            lunches.append(PlannedMealItem(
                meal_plan_id=meal_plan_id,
                day=need.day,
                meal_type="lunch",
                recipe_id=recipe.id,
                assigned_member_ids=[member.id],
                recipe=recipe,
            ))

    logger.info(f"[LUNCH] Planned {len(lunches)} lunches for {len(lunch_needs)} lunch needs")
    return lunches
