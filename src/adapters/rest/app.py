"""
FastAPI application — REST adapter for the ingredient detection service.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings, configure_logging
from factory import ServiceFactory
from adapters.rest.dependencies import get_factory, set_factory
from adapters.rest.routers import ingredients, recipes
from adapters.rest.schemas import HealthOut

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the ServiceFactory from the environment on startup."""
    config = Settings.from_env()
    configure_logging(config.log_level)
    factory = ServiceFactory(config)
    set_factory(factory)
    logger.info(
        "Ingredient Snap ready (openai=%s, roboflow=%s, llm=%s)",
        config.has_openai, config.has_roboflow, config.llm_provider,
    )
    yield
    await factory.aclose()


app = FastAPI(
    title="Ingredient Snap",
    version=__version__,
    description="Detect ingredients in a food photo and suggest recipes.",
    lifespan=lifespan,
)

# CORS — permissive for development; tighten allowed_origins in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(ingredients.router)
app.include_router(recipes.router)


@app.get("/health", tags=["health"], response_model=HealthOut)
async def health(factory: ServiceFactory = Depends(get_factory)):
    return HealthOut(
        status="ok",
        version=__version__,
        providers={
            "primary": factory.config.has_openai,
            "secondary": factory.config.has_roboflow,
        },
    )
