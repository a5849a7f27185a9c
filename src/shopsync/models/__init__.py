"""Data models for shop API records."""

from shopsync.models._base import ShopSyncBaseModel, SyncEnum
from shopsync.models.notification import Notification, NotificationType
from shopsync.models.order import Order, OrderLine, PaymentMethod
from shopsync.models.page import Page
from shopsync.models.product import Product, ProductUnit, filter_products
from shopsync.models.query import QueryKey, QueryResource
from shopsync.models.shift import Shift

__all__ = [
    "Notification",
    "NotificationType",
    "Order",
    "OrderLine",
    "Page",
    "PaymentMethod",
    "Product",
    "ProductUnit",
    "QueryKey",
    "QueryResource",
    "Shift",
    "ShopSyncBaseModel",
    "SyncEnum",
    "filter_products",
]
