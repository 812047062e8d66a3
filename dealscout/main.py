"""
DealScout - FastAPI Application
Main entry point with all routes configured.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from dealscout import __version__
from dealscout.database import init_db
from dealscout.core.exceptions import DealScoutException, dealscout_exception_handler
from dealscout.schemas.common import HealthResponse

# Import all API routers
from dealscout.api import personas, feedback, scoring


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    yield
    # Shutdown


app = FastAPI(
    title="DealScout API",
    description="Persona-based preference learning and candidate scoring",
    version=__version__,
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Domain errors -> HTTP status (404 / 422 / 409)
app.add_exception_handler(DealScoutException, dealscout_exception_handler)

# Include all routers
app.include_router(personas.router)
app.include_router(feedback.router)
app.include_router(scoring.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "DealScout API is running",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse(status="healthy", version=__version__)
