"""Cashier shift model."""

from __future__ import annotations

from typing import Annotated

from pydantic import AliasChoices, BeforeValidator, Field

from shopsync.models._base import ServerTimestamp, ShopSyncBaseModel, lenient_optional_int


class Shift(ShopSyncBaseModel):
    """A cashier shift. A shift is open until the server records ``closedDate``."""

    id: int = Field(validation_alias=AliasChoices("shiftId", "id"))
    shop_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("shopId", "shop_id"),
    )
    user_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("userId", "user_id"),
    )
    start_date: ServerTimestamp = Field(default=None, validation_alias=AliasChoices("startDate", "start_date"))
    closed_date: ServerTimestamp = Field(default=None, validation_alias=AliasChoices("closedDate", "closed_date"))

    @property
    def is_open(self) -> bool:
        return self.closed_date is None
