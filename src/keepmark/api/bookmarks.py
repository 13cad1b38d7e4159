"""Bookmark API routes.

Learn: FastAPI routers define HTTP endpoints. Each route function
receives dependencies (db session, current user) via Depends() and
delegates to the service layer. The auth guard is attached to this
router as a whole in api/__init__.py, so by the time any handler here
runs, request.state.user is set.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from keepmark.auth.dependencies import get_current_user
from keepmark.db.engine import get_db
from keepmark.db.models import User
from keepmark.schemas.bookmark import BookmarkCreate, BookmarkRead, BookmarkUpdate
from keepmark.services.bookmark_service import BookmarkService

router = APIRouter(prefix="/bookmarks")


def _svc(db: AsyncSession = Depends(get_db)) -> BookmarkService:
    return BookmarkService(db)


@router.get("", response_model=list[BookmarkRead])
async def list_bookmarks(
    user: User = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    return await svc.list_bookmarks(user.id)


@router.post("", response_model=BookmarkRead, status_code=201)
async def create_bookmark(
    body: BookmarkCreate,
    user: User = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    return await svc.create_bookmark(user.id, body.model_dump())


@router.get("/{bookmark_id}", response_model=BookmarkRead)
async def get_bookmark(
    bookmark_id: int,
    user: User = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    return await svc.get_bookmark(user.id, bookmark_id)


@router.patch("/{bookmark_id}", response_model=BookmarkRead)
async def update_bookmark(
    bookmark_id: int,
    body: BookmarkUpdate,
    user: User = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    """Update only the fields present in the request body."""
    return await svc.update_bookmark(
        user.id, bookmark_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: int,
    user: User = Depends(get_current_user),
    svc: BookmarkService = Depends(_svc),
):
    await svc.delete_bookmark(user.id, bookmark_id)
    return Response(status_code=204)
