"""
Tests for the command-line entry point.
"""

import json
import sys

import pytest

from meal_plan_engine import main as cli_main
from meal_plan_engine.config import PlannerSettings
from meal_plan_engine.main import MealPlanningCLI


@pytest.fixture
def catalog_file(tmp_path, sample_recipes, sample_members):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "recipes": [r.to_dict() for r in sample_recipes],
        "members": [dict(m.to_dict(), family_id=1) for m in sample_members],
    }))
    return str(path)


@pytest.fixture
def request_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({
        "family_id": 1,
        "week_start": "2025-10-13",
        "cooking_schedule": [{"day": "monday"}, {"day": "tuesday"}],
        "specific_meals": [{"day": "tuesday", "description": "salmon"}],
    }))
    return str(path)


@pytest.fixture
def cli(temp_db_dir):
    return MealPlanningCLI(PlannerSettings(db_dir=temp_db_dir, side_seed=3))


class TestMealPlanningCLI:

    def test_load(self, cli, catalog_file, capsys):
        counts = cli.load(catalog_file)

        assert counts == {"recipes": 12, "members": 3}
        assert len(cli.db.get_recipes()) == 12
        assert [m.name for m in cli.db.get_members(1)] == ["Alex", "Sam", "Jordan"]
        assert "Loaded 12 recipes" in capsys.readouterr().out

    def test_generate_and_show(self, cli, catalog_file, request_file, capsys):
        cli.load(catalog_file)

        meal_plan = cli.generate(request_file)

        assert {m.day: m.recipe_id for m in meal_plan.mains()} == {"monday": 3, "tuesday": 6}
        assert cli.show(meal_plan.id).id == meal_plan.id
        out = capsys.readouterr().out
        assert "Grilled Salmon" in out
        assert "side:" in out

    def test_show_missing(self, cli, capsys):
        assert cli.show(42) is None
        assert "not found" in capsys.readouterr().out

    def test_match_without_provider(self, cli, catalog_file, monkeypatch, capsys):
        monkeypatch.setenv("USE_NULL_LLM", "true")
        cli.load(catalog_file)
        assert cli.match(1, "something cozy") == []
        assert "No matches" in capsys.readouterr().out


class TestMain:

    def test_requires_file(self, temp_db_dir, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["meal-plan-engine", "generate", "--db-dir", temp_db_dir])
        cli_main.main()
        assert "--file required" in capsys.readouterr().out

    def test_load_command(self, temp_db_dir, catalog_file, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["meal-plan-engine", "load", "--file", catalog_file, "--db-dir", temp_db_dir])
        cli_main.main()
        assert "Loaded 12 recipes and 3 members" in capsys.readouterr().out
