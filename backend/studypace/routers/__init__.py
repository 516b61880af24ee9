"""API Routers package."""

from studypace.routers import categories as categories_router
from studypace.routers import courses as courses_router
from studypace.routers import daily_entries as daily_entries_router
from studypace.routers import health as health_router
from studypace.routers import streaks as streaks_router

__all__ = [
    "categories_router",
    "courses_router",
    "daily_entries_router",
    "health_router",
    "streaks_router",
]
