"""
Study Pace API

FastAPI application: daily-quota pacing, progress accounting, daily
entries and streaks.

Run:
    uvicorn studypace.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studypace.config import settings
from studypace.db.base import init_db
from studypace.middleware import setup_error_handling, setup_rate_limiting
from studypace.routers import (
    categories_router,
    courses_router,
    daily_entries_router,
    health_router,
    streaks_router,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} (calendar zone {settings.TIMEZONE})")
    await init_db()
    yield
    logger.info(f"Stopping {settings.APP_NAME}")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_error_handling(app, debug=settings.DEBUG)
setup_rate_limiting(app, enabled=settings.RATE_LIMIT_ENABLED)

app.include_router(health_router.router)
app.include_router(courses_router.router)
app.include_router(categories_router.router)
app.include_router(daily_entries_router.router)
app.include_router(streaks_router.router)


@app.get("/")
async def root():
    return {"message": settings.APP_NAME}
