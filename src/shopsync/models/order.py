"""Order and order line models."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field, field_validator

from shopsync.ingestion.normalize import safe_float, safe_int
from shopsync.models._base import (
    ServerTimestamp,
    ShopSyncBaseModel,
    SyncEnum,
    lenient_float,
    lenient_optional_int,
    lenient_str,
)

WALK_IN_CUSTOMER = "Khách lẻ"

_PAYMENT_METHOD_NAMES: dict[str, int] = {
    "cash": 1,
    "banktransfer": 2,
    "bank_transfer": 2,
    "nfccard": 3,
    "nfc_card": 3,
    "nfc": 3,
}


class PaymentMethod(SyncEnum):
    UNKNOWN = -1
    CASH = 1
    BANK_TRANSFER = 2
    NFC_CARD = 3

    @classmethod
    def from_code(cls, value: Any) -> PaymentMethod:
        """Accept numeric codes or the API's method names."""
        parsed = safe_int(value)
        if parsed is not None:
            return cls(parsed)
        if isinstance(value, str):
            code = _PAYMENT_METHOD_NAMES.get(value.strip().lower())
            if code is not None:
                return cls(code)
        return cls.UNKNOWN


class Order(ShopSyncBaseModel):
    """A sales order as listed for a shift."""

    id: int = Field(validation_alias=AliasChoices("orderId", "id"))
    shift_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("shiftId", "shift_id"),
    )
    customer_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("customerId", "customer_id"),
    )
    customer_name: Annotated[str, lenient_str(WALK_IN_CUSTOMER)] = Field(
        default=WALK_IN_CUSTOMER,
        validation_alias=AliasChoices("customerName", "customer_name"),
    )
    created_at: ServerTimestamp = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "datetime", "created_at"),
    )
    total: Annotated[float, lenient_float(0.0)] = Field(
        default=0.0,
        validation_alias=AliasChoices("finalPrice", "totalPrice", "totalAmount", "total"),
    )
    discount: Annotated[float, lenient_float(0.0)] = Field(default=0.0, validation_alias=AliasChoices("discount"))
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.UNKNOWN,
        validation_alias=AliasChoices("paymentMethod", "paymentMethodCode", "payment_method"),
    )
    status: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("status", "orderStatus"),
    )
    voucher_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("voucherId", "voucher_id"),
    )
    note: Annotated[str, lenient_str("")] = Field(default="", validation_alias=AliasChoices("note"))

    @property
    def code(self) -> str:
        return f"#{self.id}"

    @field_validator("payment_method", mode="before")
    @classmethod
    def _coerce_method(cls, value: Any) -> PaymentMethod:
        return PaymentMethod.from_code(value)


class OrderLine(ShopSyncBaseModel):
    """One product line of an order."""

    id: int = Field(validation_alias=AliasChoices("orderDetailId", "id"))
    order_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("orderId", "order_id"),
    )
    product_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("productId", "product_id"),
    )
    product_name: Annotated[str, lenient_str("")] = Field(
        default="",
        validation_alias=AliasChoices("productName", "name"),
    )
    quantity: Annotated[float, lenient_float(0.0)] = Field(default=0.0, validation_alias=AliasChoices("quantity", "qty"))
    price: Annotated[float, lenient_float(0.0)] = Field(default=0.0, validation_alias=AliasChoices("price", "unitPrice"))
    unit_name: Annotated[str, lenient_str("")] = Field(default="", validation_alias=AliasChoices("unitName", "unit"))
    discount_amount: Annotated[float, lenient_float(0.0)] = Field(
        default=0.0,
        validation_alias=AliasChoices("discountAmount", "discount_amount"),
    )
    final_price: Annotated[float | None, BeforeValidator(safe_float)] = Field(
        default=None,
        validation_alias=AliasChoices("finalPrice", "final_price"),
    )

    @property
    def amount(self) -> float:
        """Line total, preferring the server's discounted figure."""
        if self.final_price is not None:
            return self.final_price
        return self.quantity * self.price
