"""
Pytest configuration and shared fixtures.

Fixtures are reusable test setup that can be injected into tests.
"""

import random
import shutil
import tempfile

import pytest

from meal_plan_engine.config import PlannerSettings
from meal_plan_engine.data.database import DatabaseInterface
from meal_plan_engine.data.models import (
    DaySchedule,
    GenerationRequest,
    HouseholdMember,
    Recipe,
    RecipeIngredient,
)
from meal_plan_engine.meal_plan_generator import MealPlanGenerator
from meal_plan_engine.planner_modules.side_selector import SideSelector

FAMILY_ID = 1
WEEK_START = "2025-10-13"
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def _ingredients(*names):
    return [RecipeIngredient(name=n) for n in names]


@pytest.fixture
def temp_db_dir():
    """
    Create a temporary database directory for testing.

    This fixture is automatically cleaned up after each test.
    """
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def db(temp_db_dir):
    """
    Create a fresh DatabaseInterface for each test.

    Usage in tests:
        def test_something(db):
            db.add_recipe(...)
    """
    return DatabaseInterface(db_dir=temp_db_dir)


@pytest.fixture
def sample_recipes():
    """Small catalog covering every constraint the filter checks."""
    return [
        Recipe(
            id=1, name="Beef Tacos", cuisine="mexican", protein_type="beef", cook_minutes=30,
            kid_friendly=True, makes_leftovers=True, tags=["mexican"],
            ingredients=_ingredients("ground beef", "taco shells", "cheddar cheese", "lettuce"),
            difficulty="easy",
        ),
        Recipe(
            id=2, name="Chicken Tikka Masala", cuisine="indian", protein_type="chicken", cook_minutes=40,
            allergens=["dairy"], tags=["indian", "spicy"], makes_leftovers=True,
            ingredients=_ingredients("chicken thighs", "yogurt", "tomato", "rice"),
        ),
        Recipe(
            id=3, name="Spaghetti Marinara", cuisine="italian", vegetarian=True, cook_minutes=25,
            allergens=["gluten"], kid_friendly=True, tags=["vegetarian"],
            ingredients=_ingredients("spaghetti pasta", "tomato sauce", "garlic"),
            difficulty="easy",
        ),
        Recipe(
            id=4, name="Black Bean Burrito Bowl", cuisine="mexican", vegetarian=True, cook_minutes=20,
            tags=["vegetarian", "vegan", "mexican"],
            ingredients=_ingredients("black beans", "rice", "salsa", "avocado"),
            difficulty="easy",
        ),
        Recipe(
            id=5, name="Peanut Noodle Stir Fry", cuisine="thai", vegetarian=True, cook_minutes=20,
            allergens=["peanuts"], tags=["vegetarian"],
            ingredients=_ingredients("rice noodles", "peanut butter", "broccoli"),
        ),
        Recipe(
            id=6, name="Grilled Salmon", cuisine="american", protein_type="fish", cook_minutes=25,
            allergens=["fish"], tags=["healthy"],
            ingredients=_ingredients("salmon", "lemon", "asparagus"),
        ),
        Recipe(
            id=7, name="Slow Roasted Pork Shoulder", cuisine="american", protein_type="pork",
            cook_minutes=240, makes_leftovers=True,
            ingredients=_ingredients("pork shoulder", "potato", "onion"),
            difficulty="hard",
        ),
        Recipe(
            id=8, name="Caprese Sandwich", cuisine="italian", vegetarian=True, cook_minutes=10,
            allergens=["dairy", "gluten"], tags=["vegetarian"],
            ingredients=_ingredients("mozzarella", "tomato", "ciabatta"),
            difficulty="easy",
        ),
        Recipe(
            id=9, name="Mushroom Risotto", cuisine="italian", vegetarian=True, cook_minutes=45,
            allergens=["dairy"], tags=["vegetarian"],
            ingredients=_ingredients("arborio rice", "mushrooms", "parmesan"),
        ),
        Recipe(
            id=10, name="Lentil Soup", cuisine="mediterranean", vegetarian=True, cook_minutes=40,
            tags=["vegetarian", "vegan", "soup"],
            ingredients=_ingredients("lentils", "carrots", "celery"),
        ),
        Recipe(
            id=11, name="Chicken Caesar Wrap", cuisine="american", protein_type="chicken", cook_minutes=15,
            allergens=["gluten", "dairy"],
            ingredients=_ingredients("chicken breast", "romaine", "tortilla"),
            difficulty="easy",
        ),
        Recipe(
            id=12, name="Shrimp Fried Rice", cuisine="chinese", protein_type="shellfish", cook_minutes=25,
            allergens=["shellfish", "eggs"],
            ingredients=_ingredients("shrimp", "rice", "eggs", "peas"),
        ),
    ]


@pytest.fixture
def sample_members():
    """Household of three: a taco fan, a peanut-allergic spice avoider, a shellfish allergy."""
    return [
        HouseholdMember(id=1, name="Alex", favorites=["tacos"], dislikes=["mushrooms"]),
        HouseholdMember(id=2, name="Sam", allergies=["peanuts"], no_spicy=True),
        HouseholdMember(id=3, name="Jordan", allergies=["shellfish"]),
    ]


@pytest.fixture
def recipes_by_id(sample_recipes):
    return {r.id: r for r in sample_recipes}


@pytest.fixture
def seeded_db(db, sample_recipes, sample_members):
    """Database with the sample catalog and household loaded."""
    for recipe in sample_recipes:
        db.add_recipe(recipe)
    for member in sample_members:
        db.add_member(FAMILY_ID, member)
    return db


@pytest.fixture
def settings(temp_db_dir):
    return PlannerSettings(db_dir=temp_db_dir, side_seed=7)


@pytest.fixture
def generator(seeded_db, settings):
    """Generator with a seeded side selector so plans are reproducible."""
    return MealPlanGenerator(
        seeded_db,
        settings=settings,
        side_selector=SideSelector(seeded_db.get_sides(), rng=random.Random(7)),
    )


@pytest.fixture
def weekday_request():
    """Monday-Friday one-main plan with default budgets."""
    def _build(**overrides):
        params = {
            "family_id": FAMILY_ID,
            "week_start": WEEK_START,
            "cooking_schedule": [DaySchedule(day=d) for d in WEEKDAYS],
        }
        params.update(overrides)
        return GenerationRequest(**params)

    return _build
