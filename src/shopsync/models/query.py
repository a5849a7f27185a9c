"""Query keys identifying independent accumulation streams."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class QueryResource(StrEnum):
    NOTIFICATIONS = "notifications"
    SHIFTS = "shifts"
    ORDERS = "orders"
    ORDER_LINES = "order_lines"
    PRODUCTS = "products"
    PRODUCT_UNITS = "product_units"


class QueryKey(BaseModel):
    """Hashable parameter tuple for one paginated stream.

    Two keys that differ in any field are separate streams with separate
    cached lists.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    resource: QueryResource
    shop_id: int
    user_id: int | None = None
    shift_id: int | None = None
    order_id: int | None = None
    product_id: int | None = None

    def with_updates(self, **changes: Any) -> QueryKey:
        return self.model_copy(update=changes)

    def __str__(self) -> str:
        params = ",".join(
            f"{name}={value}"
            for name, value in self.model_dump(exclude={"resource"}, exclude_none=True).items()
        )
        return f"{self.resource.value}[{params}]"
