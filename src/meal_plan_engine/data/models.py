"""
Data models for the meal plan generation engine.

These models define the core entities used throughout the system:
- Recipe: Catalog recipes with dietary and timing attributes
- HouseholdMember: Per-person dietary style, allergies and tastes
- DaySchedule / LunchNeed: The week's cooking schedule inputs
- Side: Entries from the sides library
- PlannedMealItem / MealPlan: Generated plan output
- GenerationRequest: Everything the generator needs for one run
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
import json

from ..tag_canon import normalize_day, normalize_meal_mode, MEAL_MODE_ONE_MAIN


def _json_list(value: Any) -> List:
    """Decode a JSON-encoded list column, tolerating already-decoded values."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return json.loads(value)


@dataclass
class RecipeIngredient:
    """One ingredient line of a recipe."""
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    category: str = "other"  # Shopping category (e.g., "produce", "meat")

    def __str__(self) -> str:
        if self.quantity and self.unit:
            return f"{self.quantity} {self.unit} {self.name}"
        elif self.quantity:
            return f"{self.quantity} {self.name}"
        return self.name

    @classmethod
    def from_value(cls, value: Union[str, Dict]) -> "RecipeIngredient":
        """Build from a stored value (plain name string or dict)."""
        if isinstance(value, str):
            return cls(name=value)
        return cls(
            name=value.get("name") or "",
            quantity=value.get("quantity"),
            unit=value.get("unit"),
            category=value.get("category") or "other",
        )


@dataclass
class Recipe:
    """Catalog recipe. Treated as immutable for the duration of one generation run."""

    id: int
    name: str
    cuisine: str = ""
    vegetarian: bool = False
    protein_type: Optional[str] = None
    cook_minutes: int = 0
    allergens: List[str] = field(default_factory=list)
    kid_friendly: bool = False
    makes_leftovers: bool = False
    ingredients: List[RecipeIngredient] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    difficulty: str = "medium"  # "easy", "medium", "hard"

    def ingredient_names(self) -> List[str]:
        """Lower-cased ingredient names (for keyword and dislike matching)."""
        return [(ing.name or "").lower() for ing in self.ingredients]

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_display_dict(self) -> Dict[str, Any]:
        """Denormalized attributes attached to plan items for direct display."""
        return {
            "recipe_name": self.name,
            "cuisine": self.cuisine,
            "vegetarian": self.vegetarian,
            "cook_minutes": self.cook_minutes,
            "makes_leftovers": self.makes_leftovers,
            "kid_friendly": self.kid_friendly,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cuisine": self.cuisine,
            "vegetarian": self.vegetarian,
            "protein_type": self.protein_type,
            "cook_minutes": self.cook_minutes,
            "allergens": list(self.allergens),
            "kid_friendly": self.kid_friendly,
            "makes_leftovers": self.makes_leftovers,
            "ingredients": [ing.__dict__.copy() for ing in self.ingredients],
            "tags": list(self.tags),
            "difficulty": self.difficulty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """Create Recipe from a dictionary or database row mapping.

        List columns may arrive JSON-encoded (database rows) or already decoded.
        """
        return cls(
            id=int(data["id"]),
            name=data["name"],
            cuisine=data.get("cuisine") or "",
            vegetarian=bool(data.get("vegetarian")),
            protein_type=data.get("protein_type"),
            cook_minutes=int(data.get("cook_minutes") or 0),
            allergens=_json_list(data.get("allergens")),
            kid_friendly=bool(data.get("kid_friendly")),
            makes_leftovers=bool(data.get("makes_leftovers")),
            ingredients=[
                RecipeIngredient.from_value(ing)
                for ing in _json_list(data.get("ingredients"))
            ],
            tags=_json_list(data.get("tags")),
            difficulty=data.get("difficulty") or "medium",
        )


@dataclass
class HouseholdMember:
    """A household member's dietary constraints and tastes. Read-only during generation."""

    id: int
    name: str = ""
    dietary_style: str = "omnivore"  # "omnivore", "vegetarian", "vegan"
    allergies: List[str] = field(default_factory=list)
    dislikes: List[str] = field(default_factory=list)
    favorites: List[str] = field(default_factory=list)
    no_spicy: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dietary_style": self.dietary_style,
            "allergies": list(self.allergies),
            "dislikes": list(self.dislikes),
            "favorites": list(self.favorites),
            "no_spicy": self.no_spicy,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HouseholdMember":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            dietary_style=data.get("dietary_style") or "omnivore",
            allergies=_json_list(data.get("allergies")),
            dislikes=_json_list(data.get("dislikes")),
            favorites=_json_list(data.get("favorites")),
            no_spicy=bool(data.get("no_spicy")),
        )


@dataclass
class MainAssignment:
    """One main of a multi-main day and the members it is cooked for."""
    main_number: int
    member_ids: List[int] = field(default_factory=list)


@dataclass
class DaySchedule:
    """Cooking configuration for one day of the week."""

    day: str
    is_cooking: bool = True
    meal_mode: str = MEAL_MODE_ONE_MAIN
    num_mains: Optional[int] = None
    main_assignments: List[MainAssignment] = field(default_factory=list)

    def __post_init__(self):
        self.day = normalize_day(self.day)
        self.meal_mode = normalize_meal_mode(self.meal_mode)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DaySchedule":
        return cls(
            day=data["day"],
            is_cooking=bool(data.get("is_cooking", True)),
            meal_mode=data.get("meal_mode") or MEAL_MODE_ONE_MAIN,
            num_mains=data.get("num_mains"),
            main_assignments=[
                MainAssignment(
                    main_number=int(a["main_number"]),
                    member_ids=[int(m) for m in a.get("member_ids") or []],
                )
                for a in data.get("main_assignments") or []
            ],
        )


@dataclass
class LunchNeed:
    """Whether a member needs a packed lunch on a weekday."""

    day: str
    member_id: int
    needs_lunch: bool = True
    leftovers_ok: bool = True

    def __post_init__(self):
        self.day = normalize_day(self.day)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LunchNeed":
        return cls(
            day=data["day"],
            member_id=int(data["member_id"]),
            needs_lunch=bool(data.get("needs_lunch", True)),
            leftovers_ok=bool(data.get("leftovers_ok", True)),
        )


@dataclass
class SpecificMealRequest:
    """A free-text request for a given day, e.g. "tacos on Friday"."""

    day: str
    description: str

    def __post_init__(self):
        self.day = normalize_day(self.day)


@dataclass
class Side:
    """Entry from the sides library."""

    id: int
    name: str
    category: str = "other"  # veggie, salad, starch, grain, bread, fruit, other
    weight: str = "medium"  # light, medium, heavy
    cuisine_affinity: List[str] = field(default_factory=list)
    avoid_with_main_types: List[str] = field(default_factory=list)
    prep_time_minutes: Optional[int] = None
    vegetarian: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Side":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            category=data.get("category") or "other",
            weight=data.get("weight") or "medium",
            cuisine_affinity=_json_list(data.get("cuisine_affinity")),
            avoid_with_main_types=_json_list(data.get("avoid_with_main_types")),
            prep_time_minutes=data.get("prep_time_minutes"),
            vegetarian=bool(data.get("vegetarian", True)),
        )


@dataclass
class PlannedMealItem:
    """
    One generated row of a meal plan.

    Sides reference their main through ``parent``/``parent_meal_item_id``.
    ``assigned_member_ids`` of None means everyone in the household.
    """

    day: str
    meal_type: str  # "main", "side", "lunch"
    recipe_id: Optional[int] = None
    meal_plan_id: Optional[int] = None
    main_number: Optional[int] = None
    assigned_member_ids: Optional[List[int]] = None
    parent_meal_item_id: Optional[int] = None
    is_custom: bool = False
    notes: Optional[Union[str, Dict[str, Any]]] = None
    id: Optional[int] = None

    # In-memory only: the recipe used, and the main a side/lunch hangs off
    recipe: Optional[Recipe] = field(default=None, repr=False, compare=False)
    parent: Optional["PlannedMealItem"] = field(default=None, repr=False, compare=False)

    def notes_json(self) -> Optional[str]:
        """Notes as stored in the database (dicts are JSON-encoded)."""
        if self.notes is None:
            return None
        if isinstance(self.notes, str):
            return self.notes
        return json.dumps(self.notes)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "meal_plan_id": self.meal_plan_id,
            "day": self.day,
            "meal_type": self.meal_type,
            "recipe_id": self.recipe_id,
            "main_number": self.main_number,
            "assigned_member_ids": self.assigned_member_ids,
            "parent_meal_item_id": self.parent_meal_item_id,
            "is_custom": self.is_custom,
            "notes": self.notes,
        }
        if self.recipe is not None:
            data.update(self.recipe.to_display_dict())
        return data

    @classmethod
    def from_row(cls, row: Dict[str, Any], recipe: Optional[Recipe] = None) -> "PlannedMealItem":
        """Create from a meal_plan_items row; notes are decoded when they hold JSON."""
        notes = row.get("notes")
        if notes and notes.startswith("{"):
            try:
                notes = json.loads(notes)
            except json.JSONDecodeError:
                pass  # Free-text note that happens to start with a brace
        assigned = row.get("assigned_member_ids")
        return cls(
            id=row.get("id"),
            meal_plan_id=row.get("meal_plan_id"),
            day=row["day"],
            meal_type=row["meal_type"],
            recipe_id=row.get("recipe_id"),
            main_number=row.get("main_number"),
            assigned_member_ids=_json_list(assigned) if assigned else None,
            parent_meal_item_id=row.get("parent_meal_item_id"),
            is_custom=bool(row.get("is_custom")),
            notes=notes,
            recipe=recipe,
        )


@dataclass
class MealPlan:
    """A household's plan for one week (and variant)."""

    family_id: int
    week_start: str
    variant: int = 0
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)
    items: List[PlannedMealItem] = field(default_factory=list)

    def mains(self) -> List[PlannedMealItem]:
        return self.items_by_type("main")

    def items_by_type(self, meal_type: str) -> List[PlannedMealItem]:
        return [item for item in self.items if item.meal_type == meal_type]

    def items_for_day(self, day: str) -> List[PlannedMealItem]:
        day = normalize_day(day)
        return [item for item in self.items if item.day == day]

    def get_summary(self) -> str:
        days = sorted({item.day for item in self.mains()})
        return (
            f"Meal plan {self.id} for week of {self.week_start} (variant {self.variant}): "
            f"{len(self.mains())} mains across {len(days)} days, {len(self.items)} items"
        )

    def __str__(self) -> str:
        return self.get_summary()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "family_id": self.family_id,
            "week_start": self.week_start,
            "variant": self.variant,
            "created_at": self.created_at.isoformat(),
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class GenerationRequest:
    """Inputs for one generation run."""

    family_id: int
    week_start: str
    cooking_schedule: List[DaySchedule]
    lunch_needs: List[LunchNeed] = field(default_factory=list)
    max_cook_minutes_weekday: int = 45
    max_cook_minutes_weekend: int = 90
    vegetarian_ratio: int = 40
    locks: Dict[str, int] = field(default_factory=dict)
    specific_meals: List[SpecificMealRequest] = field(default_factory=list)
    variant: int = 0

    def __post_init__(self):
        self.locks = {normalize_day(day): int(recipe_id) for day, recipe_id in (self.locks or {}).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationRequest":
        """Build from a plain dict (CLI JSON files, API bodies)."""
        kwargs = {
            "family_id": int(data["family_id"]),
            "week_start": data["week_start"],
            "cooking_schedule": [DaySchedule.from_dict(d) for d in data.get("cooking_schedule") or []],
            "lunch_needs": [LunchNeed.from_dict(n) for n in data.get("lunch_needs") or []],
            "locks": data.get("locks") or {},
            "specific_meals": [
                SpecificMealRequest(day=sm["day"], description=sm["description"])
                for sm in data.get("specific_meals") or []
            ],
        }
        for key in ("max_cook_minutes_weekday", "max_cook_minutes_weekend", "vegetarian_ratio", "variant"):
            if data.get(key) is not None:
                kwargs[key] = int(data[key])
        return cls(**kwargs)
