#!/usr/bin/env python3
"""
Command-line entry point for the meal plan generator.

Commands:
    load      Load recipes and household members from a JSON file
    generate  Generate a plan from a JSON generation request
    show      Print a stored plan
    match     Rank recipes for a free-text request (LLM fallback)
"""

import json
import logging
import argparse
from typing import Optional

from .config import PlannerSettings, configure_logging
from .data.database import DatabaseInterface, PlanPersistenceError
from .data.models import GenerationRequest, HouseholdMember, MealPlan, Recipe
from .meal_plan_generator import MealPlanGenerator
from .recipe_matcher import match_recipes

logger = logging.getLogger(__name__)


class MealPlanningCLI:
    """Wires settings, the store and the generator for command-line use."""

    def __init__(self, settings: PlannerSettings, db_dir: Optional[str] = None):
        self.settings = settings
        self.db = DatabaseInterface(db_dir=db_dir or settings.db_dir)

    def load(self, path: str) -> dict:
        """
        Load catalog data.

        File format:
            {"recipes": [{...}], "members": [{"family_id": 1, "id": 1, ...}]}
        """
        with open(path) as f:
            data = json.load(f)

        for recipe_data in data.get("recipes", []):
            self.db.add_recipe(Recipe.from_dict(recipe_data))
        for member_data in data.get("members", []):
            self.db.add_member(int(member_data["family_id"]), HouseholdMember.from_dict(member_data))

        counts = {"recipes": len(data.get("recipes", [])), "members": len(data.get("members", []))}
        print(f"✅ Loaded {counts['recipes']} recipes and {counts['members']} members")
        return counts

    def generate(self, path: str) -> Optional[MealPlan]:
        with open(path) as f:
            data = json.load(f)

        data.setdefault("max_cook_minutes_weekday", self.settings.max_cook_minutes_weekday)
        data.setdefault("max_cook_minutes_weekend", self.settings.max_cook_minutes_weekend)
        data.setdefault("vegetarian_ratio", self.settings.vegetarian_ratio)
        request = GenerationRequest.from_dict(data)

        try:
            meal_plan = MealPlanGenerator(self.db, settings=self.settings).generate(request)
        except PlanPersistenceError as e:
            print(f"❌ Failed to save meal plan: {e}")
            return None

        self.print_plan(meal_plan)
        return meal_plan

    def show(self, plan_id: int) -> Optional[MealPlan]:
        meal_plan = self.db.get_meal_plan(plan_id)
        if meal_plan is None:
            print(f"❌ Meal plan {plan_id} not found")
            return None
        self.print_plan(meal_plan)
        return meal_plan

    def match(self, family_id: int, description: str) -> list:
        matches = match_recipes(description, self.db.get_members(family_id), self.db.get_recipes())
        if not matches:
            print(f"No matches for \"{description}\"")
        for m in matches:
            print(f"  {m['score']:.2f}  {m['recipe_name']} (id={m['recipe_id']}) - {m['reasoning']}")
        return matches

    @staticmethod
    def print_plan(meal_plan: MealPlan):
        print("\n" + "=" * 70)
        print(f"📅 {meal_plan.get_summary()}")
        print("=" * 70)
        for item in meal_plan.items:
            if item.meal_type == "side":
                name = item.notes.get("side_name") if isinstance(item.notes, dict) else item.notes
                print(f"   + side: {name}")
                continue
            name = item.recipe.name if item.recipe else f"recipe {item.recipe_id}"
            who = f" for {item.assigned_member_ids}" if item.assigned_member_ids else ""
            note = f" ({item.notes})" if item.meal_type == "lunch" and item.notes else ""
            print(f"{item.day:<10} {item.meal_type:<5} {name}{who}{note}")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Weekly Meal Plan Generator")
    parser.add_argument(
        "command",
        choices=["load", "generate", "show", "match"],
        help="Command to run",
    )
    parser.add_argument(
        "--file",
        type=str,
        help="JSON file (catalog for 'load', generation request for 'generate')",
    )
    parser.add_argument(
        "--plan-id",
        type=int,
        help="Meal plan ID for 'show'",
    )
    parser.add_argument(
        "--family-id",
        type=int,
        help="Household ID for 'match'",
    )
    parser.add_argument(
        "--description",
        type=str,
        help="Free-text request for 'match'",
    )
    parser.add_argument(
        "--db-dir",
        type=str,
        default=None,
        help="Database directory (default: $MEAL_PLANNER_DB_DIR or data)",
    )

    args = parser.parse_args()

    settings = PlannerSettings.from_env()
    configure_logging(settings.debug)
    cli = MealPlanningCLI(settings, db_dir=args.db_dir)

    if args.command in ("load", "generate"):
        if not args.file:
            print(f"❌ Error: --file required for '{args.command}' command")
            return
        if args.command == "load":
            cli.load(args.file)
        else:
            cli.generate(args.file)

    elif args.command == "show":
        if args.plan_id is None:
            print("❌ Error: --plan-id required for 'show' command")
            return
        cli.show(args.plan_id)

    elif args.command == "match":
        if args.family_id is None or not args.description:
            print("❌ Error: --family-id and --description required for 'match' command")
            return
        cli.match(args.family_id, args.description)


if __name__ == "__main__":
    main()
