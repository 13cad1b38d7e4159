"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. Health and auth routers are
open (no auth required).
"""

from fastapi import APIRouter, Depends

from keepmark.api.auth import router as auth_router
from keepmark.api.bookmarks import router as bookmarks_router
from keepmark.api.health import router as health_router
from keepmark.api.users import router as users_router
from keepmark.auth.dependencies import require_user

# All protected routers require authentication
_auth = [Depends(require_user)]

api_router = APIRouter()

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid bearer token
api_router.include_router(users_router, tags=["users"], dependencies=_auth)
api_router.include_router(bookmarks_router, tags=["bookmarks"], dependencies=_auth)
