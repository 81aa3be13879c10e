"""
Side dish selection for planned mains.

Baseline behavior is an unweighted random draw from the sides library. The
main's weight (heavy/medium/light) is always computed; pairing a heavy main
with light sides, and skipping sides that clash with the main (see
``rank_sides``), is only enforced when ``enforce_weight`` is on.
"""

import random
import logging
from typing import List, Optional, Sequence

from ..data.models import Recipe, Side
from ..tag_canon import HEAVY_MAIN_MARKERS, LIGHT_MAIN_MARKERS, MAIN_CATEGORY_MARKERS

logger = logging.getLogger(__name__)


def determine_main_weight(main: Recipe) -> str:
    """Classify a main as "heavy", "light" or "medium" from its ingredients and tags."""
    ingredient_text = " ".join(main.ingredient_names())

    if any(marker in ingredient_text for marker in HEAVY_MAIN_MARKERS):
        return "heavy"
    if any(marker in ingredient_text for marker in LIGHT_MAIN_MARKERS) or main.has_tag("light"):
        return "light"
    return "medium"


def categorize_main(main: Recipe) -> List[str]:
    """Main categories (pasta, rice, potatoes, ...) that sides may want to avoid."""
    ingredient_text = " ".join(main.ingredient_names())
    return [
        category for marker, category in MAIN_CATEGORY_MARKERS.items()
        if marker in ingredient_text
    ]


PAIRING_BASE_SCORE = 100


def pairing_score(main: Recipe, side: Side) -> int:
    """
    Pairing quality of one side with a main.

    +50 when the side's cuisine affinity includes the main's cuisine,
    -100 for each main category the side should avoid, +20 for veggies/salads.
    Anything below ``PAIRING_BASE_SCORE`` clashes with the main.
    """
    main_categories = categorize_main(main)
    cuisine = (main.cuisine or "").lower()

    score = PAIRING_BASE_SCORE
    if cuisine and cuisine in [c.lower() for c in side.cuisine_affinity]:
        score += 50
    for avoid_type in side.avoid_with_main_types:
        if avoid_type in main_categories:
            score -= 100
    if side.category in ("veggie", "salad"):
        score += 20
    return score


def rank_sides(main: Recipe, sides: Sequence[Side]) -> List[Side]:
    """Sides ordered best pairing first. Stable for equal scores."""
    return sorted(sides, key=lambda side: pairing_score(main, side), reverse=True)


def select_sides(
    main: Recipe,
    count: int,
    sides: Sequence[Side],
    rng: Optional[random.Random] = None,
    enforce_weight: bool = False,
    exclude_ids: Optional[Sequence[int]] = None,
) -> List[Side]:
    """
    Choose accompaniments for a main.

    Args:
        main: The main recipe
        count: Number of sides wanted
        sides: Sides library
        rng: Random source (seed it for reproducible plans)
        enforce_weight: Restrict heavy mains to light sides and skip sides that
            clash with the main's category, each only when something is left
        exclude_ids: Side IDs not to repeat

    Returns:
        Up to ``count`` sides, drawn at random
    """
    if count <= 0 or not sides:
        return []

    rng = rng or random.Random()
    pool = [s for s in sides if not exclude_ids or s.id not in exclude_ids]

    weight = determine_main_weight(main)
    if enforce_weight and weight == "heavy":
        light = [s for s in pool if s.weight == "light"]
        if light:
            pool = light
        else:
            logger.info(f"[SIDES] No light sides available for heavy main {main.name}, using full library")

    if enforce_weight:
        paired = [s for s in rank_sides(main, pool) if pairing_score(main, s) >= PAIRING_BASE_SCORE]
        if paired:
            pool = paired
        else:
            logger.info(f"[SIDES] Every side clashes with {main.name}, ignoring pairing")

    chosen = rng.sample(pool, min(count, len(pool)))
    logger.debug(
        f"[SIDES] {main.name} (weight={weight}) -> {[s.name for s in chosen]}"
    )
    return chosen


class SideSelector:
    """Binds the sides library, randomness and pairing policy for one generator."""

    def __init__(
        self,
        sides: Sequence[Side],
        rng: Optional[random.Random] = None,
        enforce_weight: bool = False,
    ):
        self.sides = list(sides)
        self.rng = rng or random.Random()
        self.enforce_weight = enforce_weight

    def select(self, main: Recipe, count: int = 1) -> List[Side]:
        return select_sides(
            main, count, self.sides, rng=self.rng, enforce_weight=self.enforce_weight
        )
