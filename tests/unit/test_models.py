"""
Tests for data models and settings.
"""

import json

from meal_plan_engine.config import PlannerSettings
from meal_plan_engine.data.models import (
    DaySchedule,
    GenerationRequest,
    MealPlan,
    PlannedMealItem,
    Recipe,
    RecipeIngredient,
)


class TestRecipe:

    def test_from_row_with_json_columns(self):
        row = {
            "id": 3,
            "name": "Spaghetti Marinara",
            "cuisine": "italian",
            "vegetarian": 1,
            "protein_type": None,
            "cook_minutes": 25,
            "allergens": '["gluten"]',
            "kid_friendly": 1,
            "makes_leftovers": 0,
            "ingredients": '[{"name": "spaghetti", "quantity": 1, "unit": "lb", "category": "pantry"}, "garlic"]',
            "tags": "[]",
            "difficulty": None,
        }
        recipe = Recipe.from_dict(row)

        assert recipe.vegetarian is True
        assert recipe.allergens == ["gluten"]
        assert recipe.ingredients[0] == RecipeIngredient("spaghetti", 1, "lb", "pantry")
        assert recipe.ingredient_names() == ["spaghetti", "garlic"]
        assert recipe.difficulty == "medium"

    def test_round_trip_through_dict(self, recipes_by_id):
        recipe = recipes_by_id[1]
        assert Recipe.from_dict(recipe.to_dict()) == recipe

    def test_display_dict(self, recipes_by_id):
        assert recipes_by_id[10].to_display_dict() == {
            "recipe_name": "Lentil Soup",
            "cuisine": "mediterranean",
            "vegetarian": True,
            "cook_minutes": 40,
            "makes_leftovers": False,
            "kid_friendly": False,
        }


class TestScheduleModels:

    def test_day_and_mode_normalized(self):
        schedule = DaySchedule(day="Tue", meal_mode="multi-main")
        assert schedule.day == "tuesday"
        assert schedule.meal_mode == "customize_mains"

    def test_unknown_mode_passes_through(self):
        assert DaySchedule(day="monday", meal_mode="buffet").meal_mode == "buffet"

    def test_generation_request_from_dict(self):
        request = GenerationRequest.from_dict({
            "family_id": "1",
            "week_start": "2025-10-13",
            "cooking_schedule": [
                {"day": "Monday"},
                {"day": "sat", "is_cooking": False},
                {"day": "Sunday", "meal_mode": "customize_mains",
                 "main_assignments": [{"main_number": 1, "member_ids": ["1", 2]}]},
            ],
            "lunch_needs": [{"day": "Tue", "member_id": 2, "leftovers_ok": False}],
            "locks": {"Fri": "7"},
            "specific_meals": [{"day": "friday", "description": "tacos"}],
            "vegetarian_ratio": 100,
        })

        assert request.family_id == 1
        assert [d.day for d in request.cooking_schedule] == ["monday", "saturday", "sunday"]
        assert request.cooking_schedule[2].main_assignments[0].member_ids == [1, 2]
        assert request.lunch_needs[0].day == "tuesday"
        assert request.locks == {"friday": 7}
        assert request.vegetarian_ratio == 100
        assert request.max_cook_minutes_weekday == 45
        assert request.max_cook_minutes_weekend == 90


class TestPlannedMealItem:

    def test_side_notes_round_trip(self):
        item = PlannedMealItem(
            day="monday", meal_type="side", is_custom=True,
            notes={"side_library_id": 4, "side_name": "Roasted Broccoli"},
        )
        row = {"id": 2, "day": "monday", "meal_type": "side", "notes": item.notes_json(), "is_custom": 1}

        restored = PlannedMealItem.from_row(row)

        assert json.loads(item.notes_json()) == item.notes
        assert restored.notes == {"side_library_id": 4, "side_name": "Roasted Broccoli"}
        assert restored.is_custom is True

    def test_text_notes_stay_text(self):
        row = {"day": "tuesday", "meal_type": "lunch", "notes": "leftovers", "assigned_member_ids": "[2]"}
        restored = PlannedMealItem.from_row(row)
        assert restored.notes == "leftovers"
        assert restored.assigned_member_ids == [2]

    def test_to_dict_includes_recipe_attributes(self, recipes_by_id):
        item = PlannedMealItem(day="monday", meal_type="main", recipe_id=1, recipe=recipes_by_id[1])
        data = item.to_dict()
        assert data["recipe_name"] == "Beef Tacos"
        assert data["cook_minutes"] == 30
        assert data["makes_leftovers"] is True


class TestMealPlan:

    def test_grouping(self, recipes_by_id):
        plan = MealPlan(family_id=1, week_start="2025-10-13", items=[
            PlannedMealItem(day="monday", meal_type="main", recipe_id=1),
            PlannedMealItem(day="monday", meal_type="side", is_custom=True),
            PlannedMealItem(day="tuesday", meal_type="lunch", recipe_id=1, notes="leftovers"),
        ])
        assert len(plan.mains()) == 1
        assert len(plan.items_for_day("Mon")) == 2
        assert plan.items_by_type("lunch")[0].notes == "leftovers"
        assert "1 mains across 1 days" in plan.get_summary()


class TestPlannerSettings:

    def test_defaults(self):
        settings = PlannerSettings()
        assert settings.max_cook_minutes_weekday == 45
        assert settings.max_cook_minutes_weekend == 90
        assert settings.vegetarian_ratio == 40
        assert settings.enforce_side_weight is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MEAL_PLANNER_DB_DIR", "/tmp/plans")
        monkeypatch.setenv("MAX_COOK_MINUTES_WEEKDAY", "30")
        monkeypatch.setenv("VEGETARIAN_RATIO", "100")
        monkeypatch.setenv("ENFORCE_SIDE_WEIGHT", "true")
        monkeypatch.setenv("SIDE_SEED", "11")
        monkeypatch.delenv("MAX_COOK_MINUTES_WEEKEND", raising=False)

        settings = PlannerSettings.from_env(load_env_file=False)

        assert settings.db_dir == "/tmp/plans"
        assert settings.max_cook_minutes_weekday == 30
        assert settings.max_cook_minutes_weekend == 90
        assert settings.vegetarian_ratio == 100
        assert settings.enforce_side_weight is True
        assert settings.side_seed == 11
