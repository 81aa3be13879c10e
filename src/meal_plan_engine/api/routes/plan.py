"""
Plan routes for the FastAPI application.

Provides endpoints for:
- Generating (or regenerating) a weekly meal plan
- Fetching a stored plan
- Free-text recipe matching via the ranking provider
"""
import logging
from datetime import date
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from ...config import PlannerSettings
from ...data.database import DatabaseInterface, PlanPersistenceError
from ...data.models import (
    DaySchedule,
    GenerationRequest,
    LunchNeed,
    MainAssignment,
    SpecificMealRequest,
)
from ...meal_plan_generator import MealPlanGenerator
from ...recipe_matcher import CandidateRanker, get_candidate_ranker, match_recipes
from ...tag_canon import DAYS_OF_WEEK, LUNCH_WEEKDAYS, normalize_day

logger = logging.getLogger(__name__)

router = APIRouter()

MealMode = Literal["one_main", "customize_mains", "single-main", "multi-main"]


def _valid_day(value: str) -> str:
    day = normalize_day(value)
    if day not in DAYS_OF_WEEK:
        raise ValueError(f"day must be one of: {', '.join(DAYS_OF_WEEK)}")
    return day


# Request/Response models
class MainAssignmentModel(BaseModel):
    """Which members one main of a multi-main day is for."""
    main_number: int = Field(ge=1)
    member_ids: List[int] = []


class DayScheduleModel(BaseModel):
    """Cooking configuration for one day."""
    day: str
    is_cooking: bool = True
    meal_mode: MealMode = "one_main"
    num_mains: Optional[int] = Field(default=None, ge=1, le=6)
    main_assignments: List[MainAssignmentModel] = []

    @field_validator("day")
    @classmethod
    def check_day(cls, value: str) -> str:
        return _valid_day(value)


class LunchNeedModel(BaseModel):
    """Lunch need for one member on one weekday."""
    day: str
    member_id: int
    needs_lunch: bool = True
    leftovers_ok: bool = True

    @field_validator("day")
    @classmethod
    def weekday_only(cls, value: str) -> str:
        day = normalize_day(value)
        if day not in LUNCH_WEEKDAYS:
            raise ValueError(f"lunch day must be one of: {', '.join(LUNCH_WEEKDAYS)}")
        return day


class SpecificMealModel(BaseModel):
    """Free-text meal request for a day ("tacos", "Ina Garten's mac and cheese")."""
    day: str
    description: str = Field(min_length=1)

    @field_validator("day")
    @classmethod
    def check_day(cls, value: str) -> str:
        return _valid_day(value)


class GeneratePlanRequest(BaseModel):
    """Request body for generating a meal plan."""
    family_id: int
    week_start: date
    cooking_schedule: List[DayScheduleModel] = Field(min_length=1)
    lunch_needs: List[LunchNeedModel] = []
    max_cook_minutes_weekday: Optional[int] = Field(default=None, ge=1)
    max_cook_minutes_weekend: Optional[int] = Field(default=None, ge=1)
    vegetarian_ratio: Optional[int] = Field(default=None, ge=0, le=100)
    locks: Dict[str, int] = {}
    specific_meals: List[SpecificMealModel] = []
    variant: int = Field(default=0, ge=0)

    @field_validator("locks")
    @classmethod
    def lock_days(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {_valid_day(day): recipe_id for day, recipe_id in value.items()}

    def to_generation_request(self, settings: PlannerSettings) -> GenerationRequest:
        """Fill unset budgets/ratio from settings and convert to the planner's types."""
        return GenerationRequest(
            family_id=self.family_id,
            week_start=self.week_start.isoformat(),
            cooking_schedule=[
                DaySchedule(
                    day=d.day,
                    is_cooking=d.is_cooking,
                    meal_mode=d.meal_mode,
                    num_mains=d.num_mains,
                    main_assignments=[
                        MainAssignment(main_number=a.main_number, member_ids=list(a.member_ids))
                        for a in d.main_assignments
                    ],
                )
                for d in self.cooking_schedule
            ],
            lunch_needs=[
                LunchNeed(day=n.day, member_id=n.member_id, needs_lunch=n.needs_lunch, leftovers_ok=n.leftovers_ok)
                for n in self.lunch_needs
            ],
            max_cook_minutes_weekday=self.max_cook_minutes_weekday or settings.max_cook_minutes_weekday,
            max_cook_minutes_weekend=self.max_cook_minutes_weekend or settings.max_cook_minutes_weekend,
            vegetarian_ratio=(
                self.vegetarian_ratio if self.vegetarian_ratio is not None else settings.vegetarian_ratio
            ),
            locks=dict(self.locks),
            specific_meals=[SpecificMealRequest(day=s.day, description=s.description) for s in self.specific_meals],
            variant=self.variant,
        )


class MatchRecipesRequest(BaseModel):
    """Request body for free-text recipe matching."""
    family_id: int
    description: str = Field(min_length=1)


class RecipeMatchModel(BaseModel):
    """One validated match."""
    recipe_id: int
    recipe_name: str
    score: float
    reasoning: str = ""


class MatchRecipesResponse(BaseModel):
    """Response from the match endpoint (empty on any ranking failure)."""
    matches: List[RecipeMatchModel]


def get_db(request: Request) -> DatabaseInterface:
    """Dependency to get the store."""
    return request.app.state.db


def get_settings(request: Request) -> PlannerSettings:
    """Dependency to get planner settings."""
    return request.app.state.settings


def get_ranker() -> CandidateRanker:
    """Dependency to get the ranking provider (overridden in tests)."""
    return get_candidate_ranker()


@router.post("/meal-plans/generate", status_code=201)
def generate_plan(
    plan_request: GeneratePlanRequest,
    db: DatabaseInterface = Depends(get_db),
    settings: PlannerSettings = Depends(get_settings),
):
    """
    Generate (or fully regenerate) the plan for a household's week.

    Returns:
        {"success": true, "meal_plan_id": ..., "plan": {...}} with every item
        carrying the recipe attributes needed for display
    """
    generator = MealPlanGenerator(db, settings=settings)
    try:
        meal_plan = generator.generate(plan_request.to_generation_request(settings))
    except PlanPersistenceError as e:
        logger.error(f"Generate meal plan error: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, "meal_plan_id": meal_plan.id, "plan": meal_plan.to_dict()}


@router.get("/meal-plans/{plan_id}")
def get_plan(plan_id: int, db: DatabaseInterface = Depends(get_db)):
    """Fetch a stored plan with denormalized recipe attributes."""
    meal_plan = db.get_meal_plan(plan_id)
    if meal_plan is None:
        raise HTTPException(status_code=404, detail=f"Meal plan {plan_id} not found")
    return {"success": True, "plan": meal_plan.to_dict()}


@router.post("/recipes/match", response_model=MatchRecipesResponse)
def match(
    match_request: MatchRecipesRequest,
    db: DatabaseInterface = Depends(get_db),
    ranker: CandidateRanker = Depends(get_ranker),
):
    """Rank up to three catalog recipes for a free-text request."""
    members = db.get_members(match_request.family_id)
    matches = match_recipes(match_request.description, members, db.get_recipes(), ranker=ranker)
    return {"matches": matches}
