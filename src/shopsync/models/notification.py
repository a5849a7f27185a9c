"""Notification feed item."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field, field_validator

from shopsync.ingestion.normalize import safe_bool, safe_int
from shopsync.models._base import ServerTimestamp, ShopSyncBaseModel, SyncEnum, lenient_optional_int, lenient_str


class NotificationType(SyncEnum):
    UNKNOWN = -1
    DEFAULT = 0
    WARNING = 1
    PROMOTION = 2
    SUGGESTION = 3
    SUCCESS = 4


class Notification(ShopSyncBaseModel):
    """One entry of the paginated notification feed."""

    id: int = Field(validation_alias=AliasChoices("notificationId", "id"))
    shop_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("shopId", "shop_id"),
    )
    user_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("userId", "user_id"),
    )
    title: Annotated[str, lenient_str("")] = Field(default="", validation_alias=AliasChoices("title"))
    content: Annotated[str, lenient_str("")] = Field(default="", validation_alias=AliasChoices("content", "message"))
    type: NotificationType = Field(default=NotificationType.DEFAULT, validation_alias=AliasChoices("type"))
    is_read: bool = Field(default=False, validation_alias=AliasChoices("isRead", "is_read"))
    """Mutable status field; flipped optimistically by mark-read."""
    created_at: ServerTimestamp = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> NotificationType:
        parsed = safe_int(value)
        return NotificationType.UNKNOWN if parsed is None else NotificationType(parsed)

    @field_validator("is_read", mode="before")
    @classmethod
    def _coerce_read(cls, value: Any) -> bool:
        return safe_bool(value)
