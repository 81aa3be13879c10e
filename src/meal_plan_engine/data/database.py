"""
Database interface for the meal plan generation engine.

Manages one SQLite database (meal_planner.db) holding:
- recipes: Recipe catalog (read-only during generation)
- family_members: Household members and their dietary constraints
- sides_library: Common side dishes, seeded on first use
- meal_plans / meal_plan_items: Generated plans
"""

import sqlite3
import json
import logging
from typing import Dict, List, Optional, Sequence
from datetime import datetime
from pathlib import Path

from .models import HouseholdMember, MealPlan, PlannedMealItem, Recipe, Side

logger = logging.getLogger(__name__)

DB_FILENAME = "meal_planner.db"


class MealPlanError(Exception):
    """Base error for meal plan generation infrastructure failures."""


class PlanPersistenceError(MealPlanError):
    """The atomic plan replace failed; the previously committed plan is untouched."""


# name, category, weight, cuisine_affinity, avoid_with_main_types, prep_time_minutes
DEFAULT_SIDES = [
    ("Green Salad", "salad", "light", ["italian", "french", "mediterranean", "american"], ["pasta", "rice"], 10),
    ("Caesar Salad", "salad", "light", ["italian", "american"], ["pasta"], 15),
    ("Roasted Broccoli", "veggie", "light", ["american", "italian", "chinese"], [], 25),
    ("Steamed Green Beans", "veggie", "light", ["american", "french"], [], 15),
    ("Mashed Potatoes", "starch", "heavy", ["american", "french"], ["pasta", "rice", "potatoes"], 30),
    ("Roasted Potatoes", "starch", "heavy", ["american", "mediterranean"], ["pasta", "rice", "potatoes"], 40),
    ("White Rice", "grain", "medium", ["chinese", "japanese", "thai", "indian", "korean"], ["pasta", "rice", "quinoa"], 20),
    ("Brown Rice", "grain", "medium", ["chinese", "japanese", "thai", "american"], ["pasta", "rice", "quinoa"], 45),
    ("Garlic Bread", "bread", "medium", ["italian", "american"], ["pasta"], 15),
    ("Dinner Rolls", "bread", "medium", ["american", "french"], [], 20),
    ("Corn on the Cob", "veggie", "medium", ["american", "mexican"], [], 15),
    ("Coleslaw", "salad", "light", ["american", "mexican"], [], 15),
    ("Caprese Salad", "salad", "light", ["italian", "mediterranean"], [], 10),
    ("Quinoa Pilaf", "grain", "medium", ["mediterranean", "middle_eastern"], ["pasta", "rice", "quinoa"], 25),
    ("Sautéed Spinach", "veggie", "light", ["italian", "mediterranean", "indian"], [], 10),
    ("Roasted Brussels Sprouts", "veggie", "light", ["american", "french"], [], 30),
    ("Sweet Potato Fries", "starch", "medium", ["american"], ["potatoes", "fries"], 35),
    ("Cucumber Salad", "salad", "light", ["mediterranean", "middle_eastern", "japanese"], [], 10),
    ("French Fries", "starch", "heavy", ["american", "french"], ["potatoes"], 30),
    ("Grilled Asparagus", "veggie", "light", ["american", "french", "italian"], [], 15),
]


class DatabaseInterface:
    """Interface for interacting with the SQLite database."""

    def __init__(self, db_dir: str = "data", seed_sides: bool = True):
        """
        Initialize database interface.

        Args:
            db_dir: Directory containing the database file
            seed_sides: Populate an empty sides library with the default sides
        """
        self.db_dir = Path(db_dir)
        self.db_dir.mkdir(parents=True, exist_ok=True)

        self.db_path = self.db_dir / DB_FILENAME

        self._init_database()
        if seed_sides:
            self._seed_sides()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _init_database(self):
        """Initialize database schema (idempotent)."""
        with self._connect() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS recipes (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    cuisine TEXT,
                    vegetarian INTEGER NOT NULL DEFAULT 0,
                    protein_type TEXT,
                    cook_minutes INTEGER NOT NULL DEFAULT 0,
                    allergens TEXT NOT NULL DEFAULT '[]',
                    kid_friendly INTEGER NOT NULL DEFAULT 0,
                    makes_leftovers INTEGER NOT NULL DEFAULT 0,
                    ingredients TEXT NOT NULL DEFAULT '[]',
                    tags TEXT NOT NULL DEFAULT '[]',
                    difficulty TEXT DEFAULT 'medium'
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS family_members (
                    id INTEGER PRIMARY KEY,
                    family_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    dietary_style TEXT NOT NULL DEFAULT 'omnivore',
                    allergies TEXT NOT NULL DEFAULT '[]',
                    dislikes TEXT NOT NULL DEFAULT '[]',
                    favorites TEXT NOT NULL DEFAULT '[]',
                    no_spicy INTEGER NOT NULL DEFAULT 0,
                    CHECK (dietary_style IN ('omnivore', 'vegetarian', 'vegan'))
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_family_members_family
                ON family_members(family_id)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sides_library (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    weight TEXT NOT NULL,
                    cuisine_affinity TEXT,
                    avoid_with_main_types TEXT,
                    prep_time_minutes INTEGER,
                    vegetarian INTEGER NOT NULL DEFAULT 1,
                    CHECK (category IN ('veggie', 'salad', 'starch', 'grain', 'bread', 'fruit', 'other')),
                    CHECK (weight IN ('light', 'medium', 'heavy'))
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_plans (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    family_id INTEGER NOT NULL,
                    week_start TEXT NOT NULL,
                    variant INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            # One plan per (household, week, variant)
            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_meal_plans_family_week_variant
                ON meal_plans(family_id, week_start, variant)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meal_plan_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    meal_plan_id INTEGER NOT NULL REFERENCES meal_plans(id) ON DELETE CASCADE,
                    day TEXT NOT NULL,
                    recipe_id INTEGER REFERENCES recipes(id),
                    meal_type TEXT NOT NULL DEFAULT 'main',
                    main_number INTEGER,
                    assigned_member_ids TEXT,
                    parent_meal_item_id INTEGER REFERENCES meal_plan_items(id) ON DELETE CASCADE,
                    is_custom INTEGER NOT NULL DEFAULT 0,
                    notes TEXT,
                    CHECK (meal_type IN ('main', 'side', 'lunch'))
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_mpi_plan
                ON meal_plan_items(meal_plan_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_mpi_parent
                ON meal_plan_items(parent_meal_item_id)
            """)

            conn.commit()
            logger.info(f"Database initialized at {self.db_path}")

    def _seed_sides(self):
        """Insert the default sides when the library is empty."""
        with self._connect() as conn:
            count = conn.execute("SELECT COUNT(*) FROM sides_library").fetchone()[0]
            if count:
                return
            conn.executemany(
                """
                INSERT INTO sides_library
                (name, category, weight, cuisine_affinity, avoid_with_main_types, prep_time_minutes, vegetarian)
                VALUES (?, ?, ?, ?, ?, ?, 1)
                """,
                [
                    (name, category, weight, json.dumps(affinity), json.dumps(avoid), prep)
                    for name, category, weight, affinity, avoid, prep in DEFAULT_SIDES
                ],
            )
            conn.commit()
            logger.info(f"Seeded sides library with {len(DEFAULT_SIDES)} sides")

    # ==================== Recipe Operations ====================

    def add_recipe(self, recipe: Recipe) -> int:
        """
        Insert or replace a recipe.

        Args:
            recipe: Recipe object (its id is kept)

        Returns:
            Recipe ID
        """
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO recipes
                (id, name, cuisine, vegetarian, protein_type, cook_minutes, allergens,
                 kid_friendly, makes_leftovers, ingredients, tags, difficulty)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    recipe.id,
                    recipe.name,
                    recipe.cuisine,
                    int(recipe.vegetarian),
                    recipe.protein_type,
                    recipe.cook_minutes,
                    json.dumps(recipe.allergens),
                    int(recipe.kid_friendly),
                    int(recipe.makes_leftovers),
                    json.dumps([ing.__dict__ for ing in recipe.ingredients]),
                    json.dumps(recipe.tags),
                    recipe.difficulty,
                ),
            )
            conn.commit()
        return recipe.id

    def get_recipes(self) -> List[Recipe]:
        """Full recipe catalog, in id order."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM recipes ORDER BY id").fetchall()

        recipes = []
        for row in rows:
            try:
                recipes.append(Recipe.from_dict(dict(row)))
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable recipe {row['id']}: {e}")
        return recipes

    # ==================== Household Operations ====================

    def add_member(self, family_id: int, member: HouseholdMember) -> int:
        """Insert or replace a household member. Returns the member ID."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO family_members
                (id, family_id, name, dietary_style, allergies, dislikes, favorites, no_spicy)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    member.id,
                    family_id,
                    member.name,
                    member.dietary_style,
                    json.dumps(member.allergies),
                    json.dumps(member.dislikes),
                    json.dumps(member.favorites),
                    int(member.no_spicy),
                ),
            )
            conn.commit()
        return member.id

    def get_members(self, family_id: int) -> List[HouseholdMember]:
        """Household members for a family, in id order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM family_members WHERE family_id = ? ORDER BY id",
                (family_id,),
            ).fetchall()
        return [HouseholdMember.from_dict(dict(row)) for row in rows]

    # ==================== Sides Operations ====================

    def get_sides(self) -> List[Side]:
        """The sides library, in id order."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM sides_library ORDER BY id").fetchall()
        return [Side.from_dict(dict(row)) for row in rows]

    # ==================== Meal Plan Operations ====================

    def replace_meal_plan(self, meal_plan: MealPlan) -> int:
        """
        Store a generated plan, fully replacing any plan with the same key.

        Finds or creates the (family_id, week_start, variant) plan row, deletes
        all of its items and inserts the new ones in a single transaction. On any
        failure the transaction is rolled back, leaving the previous plan intact.

        Items must be ordered so that a parent (main) precedes the sides and
        lunches that reference it.

        Args:
            meal_plan: Plan with items; ``id`` and item ids are set in place

        Returns:
            Meal plan ID

        Raises:
            PlanPersistenceError: If any statement fails
        """
        conn = self._connect()
        try:
            with conn:
                cursor = conn.cursor()

                cursor.execute(
                    "SELECT id FROM meal_plans WHERE family_id = ? AND week_start = ? AND variant = ?",
                    (meal_plan.family_id, meal_plan.week_start, meal_plan.variant),
                )
                existing = cursor.fetchone()

                if existing:
                    plan_id = existing["id"]
                    cursor.execute(
                        "UPDATE meal_plans SET created_at = ? WHERE id = ?",
                        (meal_plan.created_at.isoformat(), plan_id),
                    )
                else:
                    cursor.execute(
                        "INSERT INTO meal_plans (family_id, week_start, variant, created_at) VALUES (?, ?, ?, ?)",
                        (meal_plan.family_id, meal_plan.week_start, meal_plan.variant,
                         meal_plan.created_at.isoformat()),
                    )
                    plan_id = cursor.lastrowid

                # Always clear existing items first so repeated generation never duplicates
                cursor.execute("DELETE FROM meal_plan_items WHERE meal_plan_id = ?", (plan_id,))
                logger.info(
                    f"[PERSIST] Plan {plan_id} ({'existing' if existing else 'new'}), "
                    f"cleared {cursor.rowcount} old items"
                )

                # Items only take their new ids once the transaction has committed
                row_ids: Dict[int, int] = {}
                parent_ids: Dict[int, Optional[int]] = {}
                for item in meal_plan.items:
                    parent_id = item.parent_meal_item_id
                    if item.parent is not None:
                        parent_id = row_ids.get(id(item.parent), item.parent.id)
                    parent_ids[id(item)] = parent_id
                    cursor.execute(
                        """
                        INSERT INTO meal_plan_items
                        (meal_plan_id, day, recipe_id, meal_type, main_number, assigned_member_ids,
                         parent_meal_item_id, is_custom, notes)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            plan_id,
                            item.day,
                            item.recipe_id,
                            item.meal_type,
                            item.main_number,
                            json.dumps(item.assigned_member_ids) if item.assigned_member_ids is not None else None,
                            parent_id,
                            int(item.is_custom),
                            item.notes_json(),
                        ),
                    )
                    row_ids[id(item)] = cursor.lastrowid
        except sqlite3.Error as e:
            logger.error(f"[PERSIST] Plan replace failed, rolled back: {e}")
            raise PlanPersistenceError(f"Failed to save meal plan: {e}") from e
        finally:
            conn.close()

        for item in meal_plan.items:
            item.id = row_ids[id(item)]
            item.meal_plan_id = plan_id
            item.parent_meal_item_id = parent_ids[id(item)]
        meal_plan.id = plan_id
        logger.info(f"[PERSIST] Saved plan {plan_id} with {len(meal_plan.items)} items")
        return plan_id

    def _load_plan(self, row: sqlite3.Row, conn: sqlite3.Connection) -> MealPlan:
        item_rows = conn.execute(
            "SELECT * FROM meal_plan_items WHERE meal_plan_id = ? ORDER BY id",
            (row["id"],),
        ).fetchall()

        recipe_ids = {r["recipe_id"] for r in item_rows if r["recipe_id"] is not None}
        recipes: Dict[int, Recipe] = {}
        if recipe_ids:
            placeholders = ",".join("?" for _ in recipe_ids)
            for recipe_row in conn.execute(
                f"SELECT * FROM recipes WHERE id IN ({placeholders})", list(recipe_ids)
            ):
                recipes[recipe_row["id"]] = Recipe.from_dict(dict(recipe_row))

        return MealPlan(
            id=row["id"],
            family_id=row["family_id"],
            week_start=row["week_start"],
            variant=row["variant"],
            created_at=datetime.fromisoformat(row["created_at"]),
            items=[
                PlannedMealItem.from_row(dict(r), recipes.get(r["recipe_id"]))
                for r in item_rows
            ],
        )

    def get_meal_plan(self, plan_id: int) -> Optional[MealPlan]:
        """Get a meal plan with its items (recipes denormalized), or None."""
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM meal_plans WHERE id = ?", (plan_id,)).fetchone()
            if row is None:
                return None
            return self._load_plan(row, conn)

    def get_meal_plan_by_key(self, family_id: int, week_start: str, variant: int = 0) -> Optional[MealPlan]:
        """Get the plan for a (family, week, variant) key, or None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM meal_plans WHERE family_id = ? AND week_start = ? AND variant = ?",
                (family_id, week_start, variant),
            ).fetchone()
            if row is None:
                return None
            return self._load_plan(row, conn)

    def count_plan_items(self, plan_id: int, meal_types: Optional[Sequence[str]] = None) -> int:
        """Number of stored items for a plan, optionally limited to some meal types."""
        sql = "SELECT COUNT(*) FROM meal_plan_items WHERE meal_plan_id = ?"
        params: list = [plan_id]
        if meal_types:
            sql += f" AND meal_type IN ({','.join('?' for _ in meal_types)})"
            params.extend(meal_types)
        with self._connect() as conn:
            return conn.execute(sql, params).fetchone()[0]
