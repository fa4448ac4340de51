"""Data models for Helix stream payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .base import HelixModel, Pagination
from .subscription import parse_timestamp


class Stream(HelixModel):
    """A live stream as reported by GET /streams."""

    id: str
    user_id: str
    user_login: str
    user_name: str
    game_id: str
    game_name: str
    type: str
    title: str
    viewer_count: int
    started_at: str
    language: str
    thumbnail_url: str
    # tag_ids is deprecated by Twitch and sent as an empty list
    tag_ids: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_mature: bool

    @field_validator("tag_ids", "tags", mode="before")
    @classmethod
    def null_is_empty(cls, v):
        return [] if v is None else v

    @property
    def started(self) -> datetime:
        return parse_timestamp(self.started_at)

    def thumbnail(self, width: int = 1280, height: int = 720) -> str:
        return self.thumbnail_url.replace("{width}", str(width)).replace("{height}", str(height))


class StreamsResponse(HelixModel):
    """Body of GET /streams."""

    data: list[Stream]
    pagination: Pagination
