"""Pydantic schemas for bookmarks.

Learn: Separate "Create" schemas (input) from "Read" schemas (output).
There is no owner field on any input schema: the owner always comes
from the authenticated identity, so a client-supplied `user_id` is
dropped with the other unknown fields.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator


def _clean_title(v: Optional[str]) -> str:
    if v is None:
        raise ValueError("title cannot be null")
    v = v.strip()
    if not v:
        raise ValueError("title must not be empty")
    return v


class BookmarkCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    # HttpUrl rejects anything that isn't an absolute http(s) URL. The stored
    # link is its normalised form, e.g. "https://x.io" becomes "https://x.io/".
    link: HttpUrl

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _clean_title(v)


class BookmarkUpdate(BaseModel):
    """Partial update. Only fields present in the body are applied."""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    link: Optional[HttpUrl] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> str:
        return _clean_title(v)

    @field_validator("link")
    @classmethod
    def link_not_null(cls, v: Optional[HttpUrl]) -> HttpUrl:
        if v is None:
            raise ValueError("link cannot be null")
        return v


class BookmarkRead(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    link: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
