"""Product catalogue models."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field, field_validator

from shopsync.ingestion.normalize import safe_bool, safe_float
from shopsync.models._base import ShopSyncBaseModel, lenient_float, lenient_optional_int, lenient_str

DEFAULT_PRODUCT_NAME = "Sản phẩm"
DEFAULT_CATEGORY_NAME = "Chưa phân loại"
DEFAULT_UNIT_NAME = "Cái"


class ProductUnit(ShopSyncBaseModel):
    """A sellable unit of a product (e.g. bottle, crate)."""

    id: int = Field(validation_alias=AliasChoices("productUnitId", "id"))
    product_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("productId", "product_id"),
    )
    unit_name: Annotated[str, lenient_str(DEFAULT_UNIT_NAME)] = Field(
        default=DEFAULT_UNIT_NAME,
        validation_alias=AliasChoices("unitName", "name"),
    )
    price: Annotated[float, lenient_float(0.0)] = Field(default=0.0, validation_alias=AliasChoices("price"))
    quantity_in_base_unit: Annotated[float, lenient_float(1.0)] = Field(
        default=1.0,
        validation_alias=AliasChoices("quantityInBaseUnit", "conversionFactor"),
    )
    is_base_unit: bool = Field(default=False, validation_alias=AliasChoices("isBaseUnit", "is_base_unit"))

    @field_validator("is_base_unit", mode="before")
    @classmethod
    def _coerce_base(cls, value: Any) -> bool:
        return safe_bool(value)


class Product(ShopSyncBaseModel):
    """A catalogue product. ``units`` is filled by a separate fan-out call."""

    id: int = Field(validation_alias=AliasChoices("id", "productId"))
    name: Annotated[str, lenient_str(DEFAULT_PRODUCT_NAME)] = Field(
        default=DEFAULT_PRODUCT_NAME,
        validation_alias=AliasChoices("productName", "name"),
    )
    price: Annotated[float, lenient_float(0.0)] = Field(
        default=0.0,
        validation_alias=AliasChoices("price", "defaultPrice"),
    )
    barcode: Annotated[str, lenient_str("")] = Field(default="", validation_alias=AliasChoices("barcode", "code"))
    category_id: Annotated[int | None, BeforeValidator(lenient_optional_int)] = Field(
        default=None,
        validation_alias=AliasChoices("categoryId", "category_id"),
    )
    category_name: Annotated[str, lenient_str(DEFAULT_CATEGORY_NAME)] = Field(
        default=DEFAULT_CATEGORY_NAME,
        validation_alias=AliasChoices("categoryName", "category_name"),
    )
    quantity: Annotated[float | None, BeforeValidator(safe_float)] = Field(
        default=None,
        validation_alias=AliasChoices("quantity", "stock"),
    )
    image_url: Annotated[str, lenient_str("")] = Field(
        default="",
        validation_alias=AliasChoices("imageUrl", "productImageURL"),
    )
    units: list[ProductUnit] = Field(default_factory=list)

    @property
    def base_unit(self) -> ProductUnit | None:
        for unit in self.units:
            if unit.is_base_unit:
                return unit
        return self.units[0] if self.units else None

    def matches(self, text: str) -> bool:
        """Case-insensitive substring match over name, code and category."""
        needle = text.strip().lower()
        if not needle:
            return True
        return any(needle in field.lower() for field in (self.name, self.barcode, self.category_name))


def filter_products(products: list[Product], text: str) -> list[Product]:
    """Filter the product listing by free text, preserving order."""
    return [product for product in products if product.matches(text)]
