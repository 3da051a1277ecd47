from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, RedirectResponse
from pathlib import Path
import contextlib
import logging

from hvac_research.core.config import settings
from hvac_research.core.database import engine, Base

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Texas HVAC Acquisition Research",
    description="Discover, score and track Texas HVAC businesses as acquisition targets",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Prospects", "description": "Business records, status pipeline and notes"},
        {"name": "Research", "description": "Deep-research discovery jobs"},
        {"name": "Scoring", "description": "Scoring configuration, rescoring and previews"},
        {"name": "Reporting", "description": "CSV export"},
        {"name": "Dashboard", "description": "Dashboard statistics"},
    ]
)

from hvac_research.web.routers import register_routers
from hvac_research.web.scheduler import start_scheduler, stop_scheduler

register_routers(app)

@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Database Tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Start Scheduler
    start_scheduler()

    yield

    # Stop Scheduler
    await stop_scheduler()

app.router.lifespan_context = lifespan

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")

@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")

@app.get("/dashboard", include_in_schema=False)
async def dashboard_view():
    """Serve the dashboard HTML."""
    return FileResponse(static_dir / "dashboard.html")
