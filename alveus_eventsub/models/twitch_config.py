"""Desired notification configuration per channel."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .subscription import Identity

EVENT_STREAM_ONLINE = "stream.online"
EVENT_CHANNEL_UPDATE = "channel.update"

# Notification flag -> EventSub type. Title and category changes both arrive
# as channel.update, so either flag requires that subscription.
NOTIFICATION_EVENT_TYPES: dict[str, str] = {
    "live": EVENT_STREAM_ONLINE,
    "stream_title_change": EVENT_CHANNEL_UPDATE,
    "stream_category_change": EVENT_CHANNEL_UPDATE,
}


class NotificationFlags(BaseModel):
    """Which notifications are wanted for a channel (unset = off)."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    live: bool | None = None
    stream_title_change: bool | None = Field(default=None, alias="streamTitleChange")
    stream_category_change: bool | None = Field(default=None, alias="streamCategoryChange")

    def event_types(self) -> set[str]:
        return {
            event_type
            for flag, event_type in NOTIFICATION_EVENT_TYPES.items()
            if getattr(self, flag)
        }


class ChannelConfig(BaseModel):
    """Twitch channel entry."""

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    notifications: NotificationFlags = Field(default_factory=NotificationFlags)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        # Channel ids are numeric strings; accept bare numbers from JSON
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class TwitchConfig(BaseModel):
    """Channel name -> notification settings."""

    model_config = ConfigDict(extra="forbid")

    channels: dict[str, ChannelConfig]

    def desired_identities(self) -> set[Identity]:
        """Every (event type, broadcaster id) pair that should be subscribed."""
        return {
            (event_type, channel.id)
            for channel in self.channels.values()
            for event_type in channel.notifications.event_types()
        }

    def channel_ids(self) -> list[str]:
        return [channel.id for channel in self.channels.values()]

    def channel_name_for_id(self, channel_id: str) -> str | None:
        for name, channel in self.channels.items():
            if channel.id == channel_id:
                return name
        return None
