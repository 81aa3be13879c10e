"""
Keyword matching for explicit meal requests.

Maps free text like "Ina Garten's mac and cheese" or "tacos on Friday" to a
ranked list of catalog recipes without requiring exact titles.
"""

import re
import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..data.models import Recipe
from ..tag_canon import (
    STOP_WORDS,
    RELATED_TERMS,
    SCORE_EXACT_NAME,
    SCORE_NAME_CONTAINS,
    SCORE_MULTI_NAME,
    SCORE_NAME_PLUS_INGREDIENT,
    SCORE_SINGLE_NAME,
    SCORE_PROTEIN,
    SCORE_MULTI_INGREDIENT,
    SCORE_TAG_OR_INGREDIENT,
    SCORE_RELATED_ONLY,
    EXTRA_WORD_BONUS,
    EXTRA_WORD_BONUS_CAP,
)

logger = logging.getLogger(__name__)


@dataclass
class KeywordMatch:
    """A recipe matched by a free-text request."""
    recipe: Recipe
    score: int

    def __str__(self) -> str:
        return f"{self.recipe.name} (score={self.score})"


def extract_food_words(description: str) -> List[str]:
    """
    Extract meaningful food words from a request.

    Examples:
        "Ina Garten's mac and cheese" -> ["mac", "cheese"]
        "tacos on Friday" -> ["tacos"]
    """
    lower = description.lower()
    # Possessives: "garten's" -> "garten s"
    lower = re.sub(r"['‘’`]", " ", lower)
    lower = re.sub(r"[^a-z\s]", " ", lower)
    return [w for w in lower.split() if len(w) > 1 and w not in STOP_WORDS]


def _contains_any(haystack: Sequence[str], needle: str) -> bool:
    return any(needle in item for item in haystack)


def _score_food_words(
    food_words: List[str],
    name: str,
    protein: str,
    cuisine: str,
    tags: List[str],
    ingredients: List[str],
) -> int:
    """Score a recipe on per-word hits across name, protein, tags, ingredients and related terms."""
    name_hits = protein_hits = tag_hits = ingredient_hits = related_hits = 0

    for word in food_words:
        if word in name:
            name_hits += 1
        if word in protein:
            protein_hits += 1
        if _contains_any(tags, word) or word in cuisine:
            tag_hits += 1
        if _contains_any(ingredients, word):
            ingredient_hits += 1
        for related in RELATED_TERMS.get(word, []):
            if (related in name or related in protein
                    or _contains_any(ingredients, related) or _contains_any(tags, related)):
                related_hits += 1
                break

    total_hits = name_hits + protein_hits + tag_hits + ingredient_hits + related_hits

    # At least half the food words must land somewhere
    if total_hits / len(food_words) < 0.5:
        return 0

    if name_hits >= 2:
        score = SCORE_MULTI_NAME
    elif name_hits == 1 and (ingredient_hits > 0 or related_hits > 0):
        score = SCORE_NAME_PLUS_INGREDIENT
    elif name_hits == 1:
        score = SCORE_SINGLE_NAME
    elif protein_hits > 0:
        score = SCORE_PROTEIN
    elif ingredient_hits >= 2:
        score = SCORE_MULTI_INGREDIENT
    elif tag_hits > 0 or ingredient_hits > 0:
        score = SCORE_TAG_OR_INGREDIENT
    elif related_hits > 0:
        score = SCORE_RELATED_ONLY
    else:
        return 0

    return score + min(total_hits - 1, EXTRA_WORD_BONUS_CAP) * EXTRA_WORD_BONUS


def _score_single_word(
    word: str,
    protein: str,
    cuisine: str,
    tags: List[str],
    ingredients: List[str],
) -> int:
    """Direct attribute fallback for one-word requests ("salmon", "mexican")."""
    if word in protein:
        return 100
    if _contains_any(tags, word) or word in cuisine:
        return 80
    if _contains_any(ingredients, word):
        return 50

    for related in RELATED_TERMS.get(word, []):
        if related in protein:
            return 60
        if related in cuisine or _contains_any(tags, related):
            return 40
        if _contains_any(ingredients, related):
            return 30
    return 0


def score_recipe_for_request(description: str, recipe: Recipe) -> int:
    """Score one recipe against a free-text request (0 = no match)."""
    kw = description.lower().strip()
    food_words = extract_food_words(description)

    name = recipe.name.lower()
    protein = (recipe.protein_type or "").lower()
    cuisine = (recipe.cuisine or "").lower()
    tags = [t.lower() for t in recipe.tags]
    ingredients = recipe.ingredient_names()

    if kw and name == kw:
        return SCORE_EXACT_NAME
    if kw and kw in name:
        return SCORE_NAME_CONTAINS

    score = 0
    if food_words:
        score = _score_food_words(food_words, name, protein, cuisine, tags, ingredients)

    if score == 0 and len(food_words) <= 1:
        single_word = food_words[0] if food_words else kw
        if single_word:
            score = _score_single_word(single_word, protein, cuisine, tags, ingredients)

    return score


def resolve(description: str, recipes: Sequence[Recipe]) -> List[KeywordMatch]:
    """
    Rank catalog recipes against a free-text meal request.

    Args:
        description: User's request (e.g., "salmon", "Beef Tacos", "tacos on Friday")
        recipes: Recipe catalog

    Returns:
        Matches with score > 0, highest first (catalog order breaks ties)
    """
    matches = []
    for recipe in recipes:
        score = score_recipe_for_request(description, recipe)
        if score > 0:
            matches.append(KeywordMatch(recipe=recipe, score=score))

    matches.sort(key=lambda m: m.score, reverse=True)
    logger.info(
        f"[KEYWORD] \"{description}\" matched {len(matches)} recipes: "
        f"{[str(m) for m in matches[:5]]}"
    )
    return matches
