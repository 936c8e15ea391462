"""
api/main.py - FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from leadflow.config import settings
from leadflow.db.session import engine
from api.endpoints.capture_routes import router as capture_router
from api.endpoints.lead_routes import router as lead_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown logic."""
    # Verify DB is reachable on startup
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection verified.")
    yield
    logger.info("Application shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Leadflow",
    description=(
        "Lead intake and lifecycle engine: captures landing-page submissions, "
        "scores and attributes them, and tracks each lead through the "
        "practice's patient pipeline."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Routers ──────────────────────────────────────────────────────────────────
# capture_router first so /leads/capture isn't shadowed by /leads/{lead_id}
app.include_router(capture_router, prefix="/leads", tags=["Capture"])
app.include_router(lead_router, prefix="/leads", tags=["Leads"])


# ── Health check ─────────────────────────────────────────────────────────────

@app.get("/health", tags=["System"])
def health_check():
    """Returns service liveness status."""
    return {"status": "ok", "service": "leadflow"}
