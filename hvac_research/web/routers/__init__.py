from fastapi import FastAPI

from hvac_research.web.routers.dashboard import router as dashboard_router
from hvac_research.web.routers.prospects import router as prospects_router
from hvac_research.web.routers.reports import router as reports_router
from hvac_research.web.routers.research import router as research_router
from hvac_research.web.routers.scoring import router as scoring_router


def register_routers(app: FastAPI):
    """Register all routers with the application."""
    app.include_router(dashboard_router)
    app.include_router(prospects_router)
    app.include_router(reports_router)
    app.include_router(research_router)
    app.include_router(scoring_router)
