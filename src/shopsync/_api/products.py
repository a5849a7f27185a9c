"""Product endpoints.

Endpoints:
  - GET /api/products        (catalogue listing)
  - GET /api/product-units   (units of one product)
"""

from __future__ import annotations

import asyncio
import logging

from shopsync._api._common import fetch_page
from shopsync._constants import PRODUCT_UNITS_ENDPOINT, PRODUCTS_ENDPOINT
from shopsync._transport import Transport
from shopsync.exceptions import ShopSyncError
from shopsync.models.page import Page
from shopsync.models.product import Product, ProductUnit
from shopsync.session import Session

_logger = logging.getLogger(__name__)


async def fetch_products(
    session: Session,
    transport: Transport,
    *,
    page_number: int,
    page_size: int,
) -> Page[Product]:
    return await fetch_page(
        endpoint=PRODUCTS_ENDPOINT,
        session=session,
        transport=transport,
        params={"ShopId": session.shop_id},
        model=Product,
        page_number=page_number,
        page_size=page_size,
    )


async def fetch_product_units(
    session: Session,
    transport: Transport,
    product_id: int,
    *,
    page_number: int = 1,
    page_size: int,
) -> Page[ProductUnit]:
    return await fetch_page(
        endpoint=PRODUCT_UNITS_ENDPOINT,
        session=session,
        transport=transport,
        params={"ShopId": session.shop_id, "ProductId": product_id},
        model=ProductUnit,
        page_number=page_number,
        page_size=page_size,
    )


async def attach_units(
    session: Session,
    transport: Transport,
    products: list[Product],
    *,
    page_size: int,
) -> list[Product]:
    """Fan out one unit lookup per product and attach the results.

    Units are sorted smallest first. A failed lookup leaves that product
    without units rather than failing the whole listing.
    """

    async def _units_for(product: Product) -> list[ProductUnit]:
        try:
            page = await fetch_product_units(session, transport, product.id, page_size=page_size)
        except ShopSyncError:
            _logger.debug("Unit lookup failed for product %d", product.id, exc_info=True)
            return []
        return sorted(page.items, key=lambda unit: unit.quantity_in_base_unit or 1.0)

    unit_lists = await asyncio.gather(*(_units_for(product) for product in products))
    return [
        product.model_copy(update={"units": units})
        for product, units in zip(products, unit_lists, strict=True)
    ]
