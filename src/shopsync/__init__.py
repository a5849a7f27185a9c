"""shopsync - Async client-side sync layer for the shop point-of-sale API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("shopsync")
except PackageNotFoundError:
    __version__ = "0+local"
from shopsync.client import ShopSyncClient
from shopsync.config import ShopSyncConfig
from shopsync.datetime_codec import EPOCH, DateTimeCodec, DisplayDateTime
from shopsync.exceptions import (
    AccessForbiddenError,
    IdentifierUnparseableError,
    MalformedPayloadError,
    NetworkError,
    SessionMissingError,
    ShopSyncConfigError,
    ShopSyncError,
)
from shopsync.models import (
    Notification,
    NotificationType,
    Order,
    OrderLine,
    Page,
    PaymentMethod,
    Product,
    ProductUnit,
    QueryKey,
    QueryResource,
    Shift,
    filter_products,
)
from shopsync.session import Session, SessionProvider, StaticSessionProvider
from shopsync.state.cache import CacheSnapshot, FetchState, PageCache
from shopsync.state.counter import BroadcastCounter
from shopsync.sync.coordinator import QueryCoordinator
from shopsync.sync.debounce import DebounceGate
from shopsync.sync.mutator import Mutation, OptimisticMutator, RollbackPolicy

__all__ = [
    "__version__",
    "EPOCH",
    "AccessForbiddenError",
    "BroadcastCounter",
    "CacheSnapshot",
    "DateTimeCodec",
    "DebounceGate",
    "DisplayDateTime",
    "FetchState",
    "IdentifierUnparseableError",
    "MalformedPayloadError",
    "Mutation",
    "NetworkError",
    "Notification",
    "NotificationType",
    "OptimisticMutator",
    "Order",
    "OrderLine",
    "Page",
    "PageCache",
    "PaymentMethod",
    "Product",
    "ProductUnit",
    "QueryCoordinator",
    "QueryKey",
    "QueryResource",
    "RollbackPolicy",
    "Session",
    "SessionMissingError",
    "SessionProvider",
    "Shift",
    "ShopSyncClient",
    "ShopSyncConfig",
    "ShopSyncConfigError",
    "ShopSyncError",
    "StaticSessionProvider",
    "filter_products",
]
