"""
Weekly meal plan generator.

Drives the per-day decision steps in order:

    lock -> keyword request -> compatibility filter + preference scoring -> sides

then plans lunches once every dinner main is known, and stores the result as a
full replace of the (household, week, variant) plan.
"""

import math
import random
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .config import PlannerSettings
from .data.database import DatabaseInterface
from .data.models import (
    DaySchedule,
    GenerationRequest,
    HouseholdMember,
    MainAssignment,
    MealPlan,
    PlannedMealItem,
    Recipe,
)
from .planner_modules.compatibility import allergy_conflict, filter_compatible, pick_best
from .planner_modules.keyword_resolver import resolve
from .planner_modules.lunch_planner import plan_lunches
from .planner_modules.side_selector import SideSelector
from .tag_canon import (
    DAYS_OF_WEEK,
    DEFAULT_NUM_MAINS,
    MEAL_MODE_CUSTOMIZE,
    MEAL_MODE_ONE_MAIN,
    is_weekend,
)

logger = logging.getLogger(__name__)

SIDES_PER_MAIN = 1


@dataclass
class PlanningState:
    """Running state threaded through every day of one generation run."""

    items: List[PlannedMealItem] = field(default_factory=list)
    used_recipe_ids: Set[int] = field(default_factory=set)
    # day -> recipe held back from scored selection until that day's lock/request runs
    reservations: Dict[str, int] = field(default_factory=dict)
    vegetarian_mains: int = 0

    @property
    def reserved_recipe_ids(self) -> Set[int]:
        return set(self.reservations.values())

    def release(self, day: str) -> Optional[int]:
        """Drop the day's reservation, returning the recipe id it held."""
        return self.reservations.pop(day, None)

    def mains(self) -> List[PlannedMealItem]:
        return [item for item in self.items if item.meal_type == "main"]

    def add_main(self, item: PlannedMealItem, recipe: Recipe):
        self.items.append(item)
        self.used_recipe_ids.add(recipe.id)
        if recipe.vegetarian:
            self.vegetarian_mains += 1

    def needs_vegetarian(self, vegetarian_ratio: int) -> bool:
        """True while fewer vegetarian mains are planned than the weekly target."""
        return self.vegetarian_mains < vegetarian_target(vegetarian_ratio)


def vegetarian_target(vegetarian_ratio: int) -> int:
    """Vegetarian mains wanted across a 7-day week (half rounds up)."""
    return int(math.floor(vegetarian_ratio / 100 * 7 + 0.5))


def _day_index(day: str) -> int:
    return DAYS_OF_WEEK.index(day) if day in DAYS_OF_WEEK else len(DAYS_OF_WEEK)


def apply_lock_safeguard(schedule: Sequence[DaySchedule], locks: Dict[str, int]) -> List[DaySchedule]:
    """
    Make sure every locked day is a cooking day.

    The upstream day parser can drop explicitly locked days or mark them as
    not cooking. Locked days that are off are switched on; locked days missing
    from the schedule are inserted in weekday order as one-main days. The
    input schedule is not modified.
    """
    if not locks:
        return list(schedule)

    result = []
    present = set()
    for day_schedule in schedule:
        present.add(day_schedule.day)
        if day_schedule.day in locks and not day_schedule.is_cooking:
            logger.info(f"[LOCK] Safeguard: forcing is_cooking=True for locked day {day_schedule.day}")
            day_schedule = replace(day_schedule, is_cooking=True, meal_mode=day_schedule.meal_mode or MEAL_MODE_ONE_MAIN)
        result.append(day_schedule)

    for day in DAYS_OF_WEEK:
        if day in locks and day not in present:
            logger.info(f"[LOCK] Safeguard: adding missing locked day {day} as a cooking day")
            position = next(
                (i for i, entry in enumerate(result) if _day_index(entry.day) > _day_index(day)),
                len(result),
            )
            result.insert(position, DaySchedule(day=day, is_cooking=True, meal_mode=MEAL_MODE_ONE_MAIN))

    logger.info(f"[LOCK] Locks provided: {locks}")
    logger.info(f"[LOCK] Cooking days after safeguard: {[d.day for d in result if d.is_cooking]}")
    return result


class MealPlanGenerator:
    """Generates and stores weekly meal plans for a household."""

    def __init__(
        self,
        db: DatabaseInterface,
        settings: Optional[PlannerSettings] = None,
        side_selector: Optional[SideSelector] = None,
    ):
        """
        Initialize the generator.

        Args:
            db: Store supplying recipes/members/sides and accepting plans
            settings: Planner settings (defaults when omitted)
            side_selector: Side selection policy (built from the sides library if omitted)
        """
        self.db = db
        self.settings = settings or PlannerSettings()
        self.side_selector = side_selector

    def _get_side_selector(self) -> SideSelector:
        if self.side_selector is None:
            rng = random.Random(self.settings.side_seed) if self.settings.side_seed is not None else None
            self.side_selector = SideSelector(
                self.db.get_sides(),
                rng=rng,
                enforce_weight=self.settings.enforce_side_weight,
            )
        return self.side_selector

    # ==================== Entry Point ====================

    def generate(self, request: GenerationRequest) -> MealPlan:
        """
        Generate the plan for one (household, week, variant) and store it.

        Regeneration of an existing key replaces all of that plan's items in one
        transaction.

        Raises:
            PlanPersistenceError: The store rejected the replace
        """
        members = self.db.get_members(request.family_id)
        recipes = self.db.get_recipes()
        logger.info(
            f"[GENERATE] family={request.family_id} week={request.week_start} variant={request.variant}: "
            f"{len(members)} members, {len(recipes)} recipes"
        )

        items = self.plan_week(request, members, recipes)

        meal_plan = MealPlan(
            family_id=request.family_id,
            week_start=request.week_start,
            variant=request.variant,
            items=items,
        )
        self.db.replace_meal_plan(meal_plan)
        logger.info(f"[GENERATE] {meal_plan.get_summary()}")
        return meal_plan

    def plan_week(
        self,
        request: GenerationRequest,
        members: Sequence[HouseholdMember],
        recipes: Sequence[Recipe],
    ) -> List[PlannedMealItem]:
        """
        Build the ordered item list for a week without touching the store.

        Each main is followed by its sides; lunches come last.
        """
        schedule = apply_lock_safeguard(request.cooking_schedule, request.locks)
        recipes_by_id = {r.id: r for r in recipes}
        specific_by_day = {sm.day: sm.description for sm in request.specific_meals}

        cooking_days: List[DaySchedule] = []
        seen_days: Set[str] = set()
        for day_schedule in schedule:
            if day_schedule.day in seen_days:
                logger.warning(f"[GENERATE] Duplicate schedule entry for {day_schedule.day}, ignoring")
                continue
            seen_days.add(day_schedule.day)
            if day_schedule.is_cooking:
                cooking_days.append(day_schedule)

        state = PlanningState(
            reservations=self._reserve(cooking_days, request, members, recipes, recipes_by_id, specific_by_day),
        )

        for day_schedule in cooking_days:
            self._plan_day(day_schedule, request, members, recipes, recipes_by_id, specific_by_day, state)

        lunches = plan_lunches(
            request.lunch_needs,
            state.items,
            recipes,
            members,
            state.used_recipe_ids,
        )
        state.items.extend(lunches)

        self._log_summary(state)
        return state.items

    def _reserve(
        self,
        cooking_days: Sequence[DaySchedule],
        request: GenerationRequest,
        members: Sequence[HouseholdMember],
        recipes: Sequence[Recipe],
        recipes_by_id: Dict[int, Recipe],
        specific_by_day: Dict[str, str],
    ) -> Dict[str, int]:
        """
        Recipe each cooking day's lock or specific-meal request will ask for.

        Scored selection skips them so an earlier day can't use up a later
        day's locked or requested recipe. Only recipes the day's first main
        could actually accept are held.

        Returns:
            Dict mapping day to the reserved recipe id
        """
        reservations: Dict[str, int] = {}
        for day_schedule in cooking_days:
            day = day_schedule.day
            audience = self._first_audience(day_schedule, members)

            lock_id = request.locks.get(day)
            locked = recipes_by_id.get(lock_id) if lock_id is not None else None
            if locked is not None and allergy_conflict(locked, audience) is None:
                reservations[day] = locked.id
                continue

            description = specific_by_day.get(day)
            if not description:
                continue
            for match in resolve(description, recipes):
                if allergy_conflict(match.recipe, audience) is None:
                    reservations[day] = match.recipe.id
                    break

        if reservations:
            logger.info(f"[GENERATE] Reserved for locks/requests: {reservations}")
        return reservations

    def _first_audience(self, day_schedule: DaySchedule, members: Sequence[HouseholdMember]) -> List[HouseholdMember]:
        """Members the day's first main is cooked for."""
        if day_schedule.meal_mode == MEAL_MODE_CUSTOMIZE:
            assignments = self._assignments_for(day_schedule, members)
            if assignments:
                return self._audience(assignments[0], members)
        return list(members)

    @staticmethod
    def _audience(assignment: MainAssignment, members: Sequence[HouseholdMember]) -> List[HouseholdMember]:
        return [m for m in members if m.id in assignment.member_ids] or list(members)

    # ==================== Per-Day Steps ====================

    def _plan_day(
        self,
        day_schedule: DaySchedule,
        request: GenerationRequest,
        members: Sequence[HouseholdMember],
        recipes: Sequence[Recipe],
        recipes_by_id: Dict[int, Recipe],
        specific_by_day: Dict[str, str],
        state: PlanningState,
    ):
        day = day_schedule.day
        max_cook = request.max_cook_minutes_weekend if is_weekend(day) else request.max_cook_minutes_weekday
        lock_id = request.locks.get(day)
        description = specific_by_day.get(day)

        if day_schedule.meal_mode == MEAL_MODE_CUSTOMIZE:
            assignments = self._assignments_for(day_schedule, members)
        else:
            if day_schedule.meal_mode != MEAL_MODE_ONE_MAIN:
                logger.warning(f"[GENERATE] Unknown meal mode {day_schedule.meal_mode!r} on {day}, using one main")
            assignments = [None]

        for index, assignment in enumerate(assignments):
            if assignment is None:
                audience = list(members)
                main_number = None
                assigned_ids = None
            else:
                audience = self._audience(assignment, members)
                main_number = assignment.main_number
                assigned_ids = [m.id for m in audience]

            # Locks and explicit requests apply to the day's first main only
            recipe, source = self._select_main(
                day,
                audience,
                recipes,
                recipes_by_id,
                max_cook,
                request.vegetarian_ratio,
                state,
                lock_id=lock_id if index == 0 else None,
                description=description if index == 0 else None,
            )

            if recipe is None:
                logger.info(f"[GENERATE] {day} main {main_number or 1}: no candidate survived, leaving slot empty")
                continue

            main_item = PlannedMealItem(
                day=day,
                meal_type="main",
                recipe_id=recipe.id,
                main_number=main_number,
                assigned_member_ids=assigned_ids,
                recipe=recipe,
            )
            state.add_main(main_item, recipe)
            logger.info(f"[GENERATE] {day} main {main_number or 1}: {recipe.name} (id={recipe.id}, via {source})")

            for side in self._get_side_selector().select(recipe, SIDES_PER_MAIN):
                state.items.append(PlannedMealItem(
                    day=day,
                    meal_type="side",
                    recipe_id=None,
                    main_number=main_number,
                    is_custom=True,
                    notes={"side_library_id": side.id, "side_name": side.name},
                    parent=main_item,
                ))

    def _assignments_for(self, day_schedule: DaySchedule, members: Sequence[HouseholdMember]) -> List[MainAssignment]:
        """Explicit main assignments, or N default ones covering every member."""
        if day_schedule.main_assignments:
            return list(day_schedule.main_assignments)

        num_mains = day_schedule.num_mains or DEFAULT_NUM_MAINS
        all_ids = [m.id for m in members]
        return [MainAssignment(main_number=i + 1, member_ids=list(all_ids)) for i in range(num_mains)]

    def _select_main(
        self,
        day: str,
        audience: Sequence[HouseholdMember],
        recipes: Sequence[Recipe],
        recipes_by_id: Dict[int, Recipe],
        max_cook: int,
        vegetarian_ratio: int,
        state: PlanningState,
        lock_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Tuple[Optional[Recipe], Optional[str]]:
        """
        Choose one main: lock, then keyword request, then scored selection.

        Returns:
            (recipe, source) where source is "lock", "request" or "scored";
            (None, None) when nothing qualifies
        """
        recipe, source = None, None
        if lock_id is not None:
            recipe = self._resolve_lock(day, lock_id, audience, recipes_by_id, state)
            source = "lock"
        if recipe is None and description:
            recipe = self._resolve_request(day, description, audience, recipes, state)
            source = "request"

        released = state.release(day)
        if recipe is not None:
            return recipe, source
        if released is not None:
            logger.info(f"[GENERATE] {day}: lock/request failed, released recipe id={released}")

        vegetarian_only = state.needs_vegetarian(vegetarian_ratio)
        candidates = filter_compatible(
            recipes,
            audience,
            max_cook_minutes=max_cook,
            used_recipe_ids=state.used_recipe_ids | state.reserved_recipe_ids,
            vegetarian_only=vegetarian_only,
        )
        logger.debug(
            f"[GENERATE] {day}: {len(candidates)} compatible candidates "
            f"(max_cook={max_cook}, vegetarian_only={vegetarian_only})"
        )
        recipe = pick_best(candidates, audience)
        return (recipe, "scored") if recipe is not None else (None, None)

    def _resolve_lock(
        self,
        day: str,
        lock_id: int,
        audience: Sequence[HouseholdMember],
        recipes_by_id: Dict[int, Recipe],
        state: PlanningState,
    ) -> Optional[Recipe]:
        """Locked recipe if it exists, is unused and allergy-safe. Everything else is waived."""
        recipe = recipes_by_id.get(lock_id)
        if recipe is None:
            logger.warning(f"[LOCK] Locked recipe id={lock_id} for {day} not found in recipes, falling back")
            return None
        if recipe.id in state.used_recipe_ids:
            logger.warning(f"[LOCK] Locked recipe {recipe.name} for {day} already used this week, falling back")
            return None
        conflict = allergy_conflict(recipe, audience)
        if conflict:
            logger.warning(f"[LOCK] Locked recipe {recipe.name} for {day} rejected: {conflict}, falling back")
            return None
        logger.info(f"[LOCK] Locked recipe for {day}: {recipe.name} (id={recipe.id})")
        return recipe

    def _resolve_request(
        self,
        day: str,
        description: str,
        audience: Sequence[HouseholdMember],
        recipes: Sequence[Recipe],
        state: PlanningState,
    ) -> Optional[Recipe]:
        """First unused, allergy-safe keyword match. Diet style and time are not enforced."""
        for match in resolve(description, recipes):
            candidate = match.recipe
            if candidate.id in state.used_recipe_ids:
                logger.debug(f"[KEYWORD]   Skipping {candidate.name}: already used")
                continue
            conflict = allergy_conflict(candidate, audience)
            if conflict:
                logger.debug(f"[KEYWORD]   Skipping {candidate.name}: {conflict}")
                continue
            logger.info(f"[KEYWORD] Matched \"{description}\" on {day} -> {candidate.name} (score={match.score})")
            return candidate

        logger.info(f"[KEYWORD] No compatible match for \"{description}\" on {day}, falling back to normal selection")
        return None

    def _log_summary(self, state: PlanningState):
        mains_by_day: Dict[str, int] = {}
        for item in state.mains():
            mains_by_day[item.day] = mains_by_day.get(item.day, 0) + 1
        logger.info(f"[GENERATE] Total items: {len(state.items)}; mains per day: {mains_by_day}")
        logger.debug(
            f"[GENERATE] All items: {[f'{i.day}/{i.meal_type}/{i.recipe_id}' for i in state.items]}"
        )
