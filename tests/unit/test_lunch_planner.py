"""
Tests for lunch planning (leftovers and quick standalone lunches).
"""

from meal_plan_engine.data.models import HouseholdMember, LunchNeed, PlannedMealItem
from meal_plan_engine.planner_modules.lunch_planner import (
    find_leftover_main,
    plan_lunches,
    previous_weekday,
    select_lunch_recipe,
)


def _main(day, recipe):
    return PlannedMealItem(day=day, meal_type="main", recipe_id=recipe.id, recipe=recipe)


class TestPreviousWeekday:

    def test_weekdays(self):
        assert previous_weekday("tuesday") == "monday"
        assert previous_weekday("friday") == "thursday"

    def test_no_wraparound(self):
        assert previous_weekday("monday") is None

    def test_weekend(self):
        assert previous_weekday("saturday") is None
        assert previous_weekday("sunday") is None


class TestFindLeftoverMain:

    def test_finds_previous_day_main(self, recipes_by_id):
        planned = [_main("monday", recipes_by_id[1]), _main("tuesday", recipes_by_id[3])]
        assert find_leftover_main("tuesday", planned).recipe_id == 1

    def test_ignores_sides(self, recipes_by_id):
        side = PlannedMealItem(day="monday", meal_type="side", is_custom=True, notes={"side_name": "Salad"})
        assert find_leftover_main("tuesday", [side]) is None

    def test_skips_mains_unsafe_for_member(self, recipes_by_id):
        # Multi-main Monday: shrimp for one group, tacos for another
        planned = [_main("monday", recipes_by_id[12]), _main("monday", recipes_by_id[1])]
        jordan = HouseholdMember(id=3, name="Jordan", allergies=["shellfish"])
        assert find_leftover_main("tuesday", planned, jordan).recipe_id == 1

    def test_monday_has_no_leftovers(self, recipes_by_id):
        assert find_leftover_main("monday", [_main("sunday", recipes_by_id[1])]) is None


class TestSelectLunchRecipe:

    def test_first_quick_unused_safe(self, sample_recipes):
        member = HouseholdMember(id=1)
        recipe = select_lunch_recipe(sample_recipes, [member], used_recipe_ids=set())
        assert recipe.id == 4  # first recipe at or under 20 minutes

    def test_skips_used(self, sample_recipes):
        recipe = select_lunch_recipe(sample_recipes, [HouseholdMember(id=1)], used_recipe_ids={4, 5})
        assert recipe.id == 8

    def test_respects_allergies_and_diet(self, sample_recipes):
        vegan = HouseholdMember(id=1, dietary_style="vegan", allergies=["peanuts"])
        assert select_lunch_recipe(sample_recipes, [vegan], used_recipe_ids=set()).id == 4
        assert select_lunch_recipe(sample_recipes, [vegan], used_recipe_ids={4}) is None

    def test_vegetarian_member(self, sample_recipes):
        veggie = HouseholdMember(id=1, dietary_style="vegetarian")
        recipe = select_lunch_recipe(sample_recipes, [veggie], used_recipe_ids={4, 5, 8})
        assert recipe is None  # the only other quick recipe has chicken


class TestPlanLunches:

    def test_leftovers_lunch_references_main(self, recipes_by_id, sample_members):
        monday = _main("monday", recipes_by_id[1])
        needs = [LunchNeed(day="tuesday", member_id=1)]

        lunches = plan_lunches(needs, [monday], [], sample_members, used_recipe_ids={1})

        assert len(lunches) == 1
        lunch = lunches[0]
        assert lunch.meal_type == "lunch"
        assert lunch.recipe_id == 1
        assert lunch.notes == "leftovers"
        assert lunch.parent is monday
        assert lunch.assigned_member_ids == [1]

    def test_no_leftovers_available_means_no_lunch(self, sample_members):
        needs = [LunchNeed(day="monday", member_id=1)]
        assert plan_lunches(needs, [], [], sample_members, used_recipe_ids=set()) == []

    def test_standalone_lunches_do_not_repeat(self, sample_recipes, sample_members):
        used = set()
        needs = [
            LunchNeed(day="monday", member_id=1, leftovers_ok=False),
            LunchNeed(day="monday", member_id=3, leftovers_ok=False),
        ]

        lunches = plan_lunches(needs, [], sample_recipes, sample_members, used)

        assert [l.recipe_id for l in lunches] == [4, 5]
        assert used == {4, 5}
        assert all(l.notes is None and l.parent is None for l in lunches)

    def test_standalone_lunch_skips_dinner_recipes(self, sample_recipes, sample_members):
        lunches = plan_lunches(
            [LunchNeed(day="wednesday", member_id=2, leftovers_ok=False)],
            [],
            sample_recipes,
            sample_members,
            used_recipe_ids={4},
        )
        # Recipe 5 has peanuts (Sam), next quick one is 8
        assert lunches[0].recipe_id == 8

    def test_not_needed_and_unknown_members_skipped(self, recipes_by_id, sample_members):
        planned = [_main("monday", recipes_by_id[1])]
        needs = [
            LunchNeed(day="tuesday", member_id=1, needs_lunch=False),
            LunchNeed(day="tuesday", member_id=99),
        ]
        assert plan_lunches(needs, planned, [], sample_members, used_recipe_ids=set()) == []

    def test_meal_plan_id_propagates(self, recipes_by_id, sample_members):
        lunches = plan_lunches(
            [LunchNeed(day="tuesday", member_id=2)],
            [_main("monday", recipes_by_id[1])],
            [],
            sample_members,
            used_recipe_ids=set(),
            meal_plan_id=17,
        )
        assert lunches[0].meal_plan_id == 17
