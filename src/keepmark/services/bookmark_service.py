"""Bookmark service — CRUD scoped to the owning user.

Learn: Every single-record operation starts with one query filtered on
BOTH the bookmark id and the caller's user id. There is no separate
"does it exist?" step, so a bookmark that belongs to someone else is
indistinguishable from one that doesn't exist: both are NotFound.
Which of the two it actually was is only written to the log.
"""

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from keepmark.db.models import MAX_ID, Bookmark
from keepmark.errors import NotFound

logger = structlog.get_logger()

BOOKMARK_NOT_FOUND = "Bookmark not found"

_EDITABLE_FIELDS = ("title", "description", "link")


class BookmarkService:
    """Business logic for a user's bookmarks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_bookmarks(self, user_id: int) -> list[Bookmark]:
        result = await self.db.execute(
            select(Bookmark).where(Bookmark.user_id == user_id).order_by(Bookmark.id)
        )
        return list(result.scalars().all())

    async def get_bookmark(self, user_id: int, bookmark_id: int) -> Bookmark:
        if not 1 <= bookmark_id <= MAX_ID:
            logger.info(
                "bookmark.not_found",
                bookmark_id=bookmark_id,
                user_id=user_id,
                reason="out_of_range",
            )
            raise NotFound(BOOKMARK_NOT_FOUND)
        result = await self.db.execute(
            select(Bookmark).where(
                Bookmark.id == bookmark_id,
                Bookmark.user_id == user_id,
            )
        )
        bookmark = result.scalars().first()
        if bookmark is None:
            await self._log_miss(user_id, bookmark_id)
            raise NotFound(BOOKMARK_NOT_FOUND)
        return bookmark

    async def create_bookmark(self, user_id: int, data: dict[str, Any]) -> Bookmark:
        """Create a bookmark owned by user_id.

        Only known fields are read from data; any owner the caller tried
        to smuggle in is ignored.
        """
        bookmark = Bookmark(
            user_id=user_id,
            title=data["title"],
            description=data.get("description"),
            link=str(data["link"]),
        )
        self.db.add(bookmark)
        await self.db.commit()
        await self.db.refresh(bookmark)
        logger.info("bookmark.created", bookmark_id=bookmark.id, user_id=user_id)
        return bookmark

    async def update_bookmark(
        self, user_id: int, bookmark_id: int, changes: dict[str, Any]
    ) -> Bookmark:
        """Apply a partial update to one of the user's bookmarks."""
        bookmark = await self.get_bookmark(user_id, bookmark_id)
        for field in _EDITABLE_FIELDS:
            if field in changes:
                value = changes[field]
                if field == "link":
                    value = str(value)
                setattr(bookmark, field, value)
        await self.db.commit()
        await self.db.refresh(bookmark)
        logger.info(
            "bookmark.updated",
            bookmark_id=bookmark.id,
            user_id=user_id,
            fields=sorted(f for f in changes if f in _EDITABLE_FIELDS),
        )
        return bookmark

    async def delete_bookmark(self, user_id: int, bookmark_id: int) -> None:
        bookmark = await self.get_bookmark(user_id, bookmark_id)
        await self.db.delete(bookmark)
        await self.db.commit()
        logger.info("bookmark.deleted", bookmark_id=bookmark_id, user_id=user_id)

    async def _log_miss(self, user_id: int, bookmark_id: int) -> None:
        """Record why a lookup missed. Never changes what the caller sees."""
        owner = await self.db.scalar(
            select(Bookmark.user_id).where(Bookmark.id == bookmark_id)
        )
        logger.info(
            "bookmark.not_found",
            bookmark_id=bookmark_id,
            user_id=user_id,
            reason="missing" if owner is None else "foreign",
        )
