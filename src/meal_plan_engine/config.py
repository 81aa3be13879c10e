"""
Runtime settings, read from environment variables (and a .env file if present).

Environment Variables:
    MEAL_PLANNER_DB_DIR: Directory holding meal_planner.db (default: data)
    MAX_COOK_MINUTES_WEEKDAY: Default weeknight time budget (default: 45)
    MAX_COOK_MINUTES_WEEKEND: Default weekend time budget (default: 90)
    VEGETARIAN_RATIO: Default weekly vegetarian target, 0-100 (default: 40)
    ENFORCE_SIDE_WEIGHT: Pair heavy mains with light sides only (default: false)
    SIDE_SEED: Seed for side selection randomness (default: unseeded)
    DEBUG: Verbose logging (default: false)
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


@dataclass
class PlannerSettings:
    """Defaults applied when a generation request leaves a value out."""

    db_dir: str = "data"
    max_cook_minutes_weekday: int = 45
    max_cook_minutes_weekend: int = 90
    vegetarian_ratio: int = 40
    enforce_side_weight: bool = False
    side_seed: Optional[int] = None
    debug: bool = False

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "PlannerSettings":
        if load_env_file:
            load_dotenv()
        return cls(
            db_dir=os.getenv("MEAL_PLANNER_DB_DIR", "data"),
            max_cook_minutes_weekday=_env_int("MAX_COOK_MINUTES_WEEKDAY", 45),
            max_cook_minutes_weekend=_env_int("MAX_COOK_MINUTES_WEEKEND", 90),
            vegetarian_ratio=_env_int("VEGETARIAN_RATIO", 40),
            enforce_side_weight=_env_bool("ENFORCE_SIDE_WEIGHT"),
            side_seed=_env_int("SIDE_SEED", None),
            debug=_env_bool("DEBUG"),
        )


def configure_logging(debug: bool = False):
    """Root logging setup for the CLI and API entry points."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
