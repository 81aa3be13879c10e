"""
FastAPI application for the meal plan generator.

Thin HTTP layer: validates request bodies, hands them to MealPlanGenerator
and returns JSON. All decision logic lives in the planner modules.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import PlannerSettings, configure_logging
from ..data.database import DatabaseInterface
from .routes import plan

logger = logging.getLogger(__name__)


def create_app(settings: Optional[PlannerSettings] = None, db: Optional[DatabaseInterface] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Planner settings (read from the environment when omitted)
        db: Store to use (opened from settings.db_dir when omitted)
    """
    settings = settings or PlannerSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting meal plan API...")
        app.state.settings = settings
        app.state.db = db or DatabaseInterface(db_dir=settings.db_dir)
        yield
        logger.info("Meal plan API shutdown complete")

    app = FastAPI(
        title="Meal Plan Engine API",
        description="Weekly household meal plan generation",
        version="0.3.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check():
        """Health check endpoint for load balancers."""
        return {"status": "healthy"}

    app.include_router(plan.router, prefix="/api", tags=["plan"])
    return app


def run():
    """Run the API with uvicorn (meal_plan_engine.api.main:run)."""
    import uvicorn

    settings = PlannerSettings.from_env()
    configure_logging(settings.debug)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
