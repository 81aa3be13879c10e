"""
LLM-assisted recipe matching for free-text "find me a meal" requests.

This is a best-effort fallback between keyword matching and giving up. The
ranking provider sits behind the CandidateRanker port so it can be swapped for
a no-op in tests or when no API key is configured. Every failure degrades to an
empty result; nothing here raises to the caller.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from anthropic import RateLimitError

from .data.models import HouseholdMember, Recipe
from .llm_provider import LLMProvider, get_llm_provider
from .planner_modules.compatibility import filter_compatible

logger = logging.getLogger(__name__)

MATCHER_MODEL = os.environ.get("MATCHER_MODEL", "claude-sonnet-4-5-20250929")
MAX_MATCHES = 3
MIN_MATCH_SCORE = 0.5

SYSTEM_PROMPT = """You are a recipe matching assistant for a family meal planner. Given a meal request, family context, and available recipes, pick the 3 best matches.

The request may be specific ("roast chicken"), contextual ("something for picky Stella"), dietary ("no dairy tonight"), or a combination.

Consider: member preferences/dislikes/dietary needs, kid-friendliness when kids are mentioned, the vibe of the request (comfort, quick, fancy), and recipe attributes.

Return ONLY a JSON array, top 3 picks (fewer if <3 are good):
[{"recipe_id": <int>, "recipe_name": "<str>", "score": <0.0-1.0>, "reasoning": "<1 sentence>"}]

Score: 0.9+ near-perfect, 0.7+ strong, 0.5+ reasonable. Don't include <0.5.
Return [] if nothing fits. Return ONLY valid JSON, no markdown fences."""


def describe_recipe(recipe: Recipe) -> str:
    """One compact line per recipe: ID:12 | Beef Tacos | mexican | beef | 30min | easy | kid-friendly"""
    parts = [f"ID:{recipe.id}", recipe.name, recipe.cuisine]
    if recipe.protein_type:
        parts.append(recipe.protein_type)
    parts.append(f"{recipe.cook_minutes}min")
    parts.append(recipe.difficulty)
    if recipe.kid_friendly:
        parts.append("kid-friendly")
    if recipe.vegetarian:
        parts.append("vegetarian")
    return " | ".join(parts)


def describe_member(member: HouseholdMember) -> str:
    """One compact line per member: Stella | diet:vegetarian | allergies:peanuts | no-spicy"""
    parts = [member.name or str(member.id)]
    if member.dietary_style and member.dietary_style != "omnivore":
        parts.append(f"diet:{member.dietary_style}")
    if member.allergies:
        parts.append(f"allergies:{','.join(member.allergies)}")
    if member.dislikes:
        parts.append(f"dislikes:{','.join(member.dislikes)}")
    if member.favorites:
        parts.append(f"favorites:{','.join(member.favorites)}")
    if member.no_spicy:
        parts.append("no-spicy")
    return " | ".join(parts)


def extract_json_array(text: str) -> Optional[List[Any]]:
    """Pull the JSON array out of a model reply (markdown fences and chatter tolerated)."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else cleaned[3:]
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    cleaned = cleaned.strip()

    first = cleaned.find("[")
    last = cleaned.rfind("]")
    if first == -1 or last == -1 or last <= first:
        return None

    parsed = json.loads(cleaned[first:last + 1])
    return parsed if isinstance(parsed, list) else None


class CandidateRanker(ABC):
    """Port for ranking providers used by the matching fallback."""

    @abstractmethod
    def rank(self, description: str, recipe_lines: List[str], member_lines: List[str]) -> List[Dict[str, Any]]:
        """Return raw ranked entries: [{"recipe_id", "score", "reasoning", ...}]. May raise."""
        pass


class NullCandidateRanker(CandidateRanker):
    """Ranker that never matches anything."""

    def rank(self, description: str, recipe_lines: List[str], member_lines: List[str]) -> List[Dict[str, Any]]:
        return []


class LLMCandidateRanker(CandidateRanker):
    """Ranks candidates with a text-completion model."""

    def __init__(self, provider: LLMProvider, model: str = MATCHER_MODEL):
        self.provider = provider
        self.model = model

    def rank(self, description: str, recipe_lines: List[str], member_lines: List[str]) -> List[Dict[str, Any]]:
        user_message = (
            f'Request: "{description}"\n\n'
            f"Family members:\n" + "\n".join(member_lines) + "\n\n"
            f"Available recipes ({len(recipe_lines)}):\n" + "\n".join(recipe_lines)
        )

        response = self.provider.create_message(
            model=self.model,
            max_tokens=512,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": user_message}],
        )

        text = next(
            (block.text for block in response.content if getattr(block, "type", None) == "text"),
            None,
        )
        if not text:
            logger.info("[MATCHER] No text in response")
            return []

        results = extract_json_array(text)
        if results is None:
            logger.error(f"[MATCHER] No JSON array in response: {text[:200]}")
            return []
        return results


def get_candidate_ranker(provider: Optional[LLMProvider] = None) -> CandidateRanker:
    """LLM ranker when a real provider is available, otherwise the null ranker."""
    provider = provider or get_llm_provider()
    if provider.is_null:
        return NullCandidateRanker()
    return LLMCandidateRanker(provider)


def validate_matches(
    results: Any,
    compatible: Sequence[Recipe],
) -> List[Dict[str, Any]]:
    """
    Re-check untrusted ranker output against the compatible set.

    Keeps entries with an integer recipe_id from the compatible set and a
    numeric score >= 0.5; at most three, in ranker order.
    """
    if not isinstance(results, list):
        return []

    by_id = {r.id: r for r in compatible}
    validated = []
    for entry in results:
        if not isinstance(entry, dict):
            continue
        recipe_id = entry.get("recipe_id")
        score = entry.get("score")
        if isinstance(recipe_id, bool) or not isinstance(recipe_id, int):
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        if score < MIN_MATCH_SCORE or recipe_id not in by_id:
            continue
        validated.append({
            "recipe_id": recipe_id,
            "recipe_name": by_id[recipe_id].name,
            "score": float(score),
            "reasoning": str(entry.get("reasoning") or ""),
        })
        if len(validated) == MAX_MATCHES:
            break
    return validated


def match_recipes(
    description: str,
    members: Sequence[HouseholdMember],
    recipes: Sequence[Recipe],
    ranker: Optional[CandidateRanker] = None,
) -> List[Dict[str, Any]]:
    """
    Find up to three recipes for a free-text request via the ranking provider.

    Args:
        description: Free-text request ("something for picky Stella")
        members: Household members whose hard constraints apply
        recipes: Recipe catalog
        ranker: Ranking provider (defaults to one built from the environment)

    Returns:
        Validated matches ``{recipe_id, recipe_name, score, reasoning}``; [] on any failure
    """
    ranker = ranker or get_candidate_ranker()

    # Hard constraints only; time budgets and plan state don't apply here
    compatible = filter_compatible(recipes, members)
    if not compatible:
        logger.info("[MATCHER] No compatible recipes after filtering")
        return []

    try:
        raw = ranker.rank(
            description,
            [describe_recipe(r) for r in compatible],
            [describe_member(m) for m in members],
        )
        validated = validate_matches(raw, compatible)
    except RateLimitError as e:
        logger.warning(f"[MATCHER] Still rate limited after client retries: {e}")
        return []
    except Exception as e:
        logger.error(f"[MATCHER] Error: {e}")
        return []

    logger.info(
        f"[MATCHER] query=\"{description}\" -> {len(validated)} matches: "
        f"{[(m['recipe_name'], m['score']) for m in validated]}"
    )
    return validated
