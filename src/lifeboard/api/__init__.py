"""API route aggregation.

All routers registered here get mounted under /api/{version} in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. The auth router stays open at
that level; its logout and session routes ask for the user themselves.
"""

from fastapi import APIRouter, Depends

from lifeboard.api.auth import router as auth_router
from lifeboard.api.goals import router as goals_router
from lifeboard.api.habits import router as habits_router
from lifeboard.api.health_tracking import router as health_tracking_router
from lifeboard.api.journal import router as journal_router
from lifeboard.api.tasks import router as tasks_router
from lifeboard.auth.dependencies import get_current_user
from lifeboard.config import settings

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix=settings.api_prefix)

# Open at router level — send-otp / verify-otp need no token
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid Supabase access token
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
api_router.include_router(goals_router, tags=["goals", "milestones"], dependencies=_auth)
api_router.include_router(habits_router, tags=["habits", "habit-logs"], dependencies=_auth)
api_router.include_router(health_tracking_router, tags=["health"], dependencies=_auth)
api_router.include_router(journal_router, tags=["journal"], dependencies=_auth)
