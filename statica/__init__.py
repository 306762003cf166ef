from statica._engine import StaticCache as StaticCache
from statica._exceptions import ConfigurationError as ConfigurationError, StaticaError as StaticaError
from statica._headers import Headers as Headers
from statica._lru_cache import LRUCache as LRUCache
from statica._options import StaticCacheOptions as StaticCacheOptions
from statica._store import (
    BaseStore as BaseStore,
    ExternalStore as ExternalStore,
    MappingStore as MappingStore,
    make_store as make_store,
)
from statica.models import (
    CacheEntry as CacheEntry,
    Handled as Handled,
    NotHandled as NotHandled,
    Request as Request,
    Response as Response,
)

__all__ = (
    # Engine
    "StaticCache",
    "StaticCacheOptions",
    ## Models
    "CacheEntry",
    "Request",
    "Response",
    "Handled",
    "NotHandled",
    ## Headers
    "Headers",
    ## Stores
    "BaseStore",
    "MappingStore",
    "ExternalStore",
    "LRUCache",
    "make_store",
    ## Exceptions
    "StaticaError",
    "ConfigurationError",
)
