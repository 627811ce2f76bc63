"""
Bounded in-memory cache shared by entity reads and log task tracking.

One ``CacheStore`` is created by the composition root and passed to every
consumer. Capacity is enforced by clearing the whole store when a new key
arrives at the limit; there is no TTL and no access-order tracking.

Key layout:
    <Type>::<id>                identity key (by-name lookups use <Type>::name=<name>)
    <Type>::ALL                 "get all" key
    <Type>::QUERY::a=1;b=x,y    filtered-read key (canonical, order-independent)
"""

import logging
import threading
from typing import Any, Generic, Iterable, Mapping, Optional, Type, TypeVar

from .utils.metrics import SimpleMetrics

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "::"
GET_ALL_KEY_SUFFIX = "ALL"
QUERY_NAMESPACE = "QUERY"
NULL_PLACEHOLDER = "__NULL__"
PARAM_SEPARATOR = ";"
LIST_SEPARATOR = ","

T = TypeVar("T")


def generate_key(entity_type: str, identifier: Any) -> str:
    """Identity key for one entity, e.g. ``Build::42`` or ``Build::Castle``."""
    return f"{entity_type}{KEY_SEPARATOR}{identifier}"


def generate_get_all_key(entity_type: str) -> str:
    """Key under which the full list of an entity type is cached."""
    return f"{entity_type}{KEY_SEPARATOR}{GET_ALL_KEY_SUFFIX}"


def query_prefix(entity_type: str) -> str:
    return f"{entity_type}{KEY_SEPARATOR}{QUERY_NAMESPACE}{KEY_SEPARATOR}"


def _canonical_value(value: Any) -> str:
    if value is None:
        return NULL_PLACEHOLDER
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(NULL_PLACEHOLDER if v is None else str(v) for v in value)
        return LIST_SEPARATOR.join(items)
    return str(value)


def generate_query_key(entity_type: str, params: Optional[Mapping[str, Any]]) -> str:
    """
    Canonical key for a filtered read.

    Parameter names are sorted, ``None`` becomes a fixed placeholder and
    list values are sorted by their string form, so neither parameter order
    nor list order changes the key.

    Example:
        >>> generate_query_key("Build", {"color": ["Red", "Blue"], "name": None})
        'Build::QUERY::color=Blue,Red;name=__NULL__'
    """
    params = params or {}
    parts = [f"{name}={_canonical_value(params[name])}" for name in sorted(params)]
    return query_prefix(entity_type) + PARAM_SEPARATOR.join(parts)


class CacheStore:
    """
    Thread-safe bounded key/value store.

    Thread-safe: every read and write takes the same lock, so the
    capacity check and the clear in put() cannot interleave with another
    writer.

    Usage:
        cache = CacheStore(max_size=1000)
        cache.put(generate_key("Build", 1), build)
        build = cache.get(generate_key("Build", 1), Build)
    """

    def __init__(self, max_size: int = 1000, metrics: Optional[SimpleMetrics] = None) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be greater than 0")
        self._max_size = max_size
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._metrics = metrics

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def put(self, key: Optional[str], value: Any) -> None:
        """
        Store a value.

        A None key or value is rejected with a warning. Inserting a new key
        while the store is full clears every entry first; overwriting an
        existing key never clears.
        """
        if key is None or value is None:
            logger.warning(f"Rejected cache put with missing key or value (key={key!r})")
            return
        with self._lock:
            if len(self._data) >= self._max_size and key not in self._data:
                logger.info(
                    f"Cache reached max size {self._max_size}; clearing "
                    f"{len(self._data)} entries before inserting {key}"
                )
                self._data.clear()
                self._count("cache_clears")
            self._data[key] = value
        logger.debug(f"Cached item with key: {key}")

    def get(self, key: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """
        Look up a value.

        Returns None on a miss. If ``expected_type`` is given and the stored
        value is not an instance of it, the entry is treated as corrupt:
        it is evicted and None is returned.
        """
        with self._lock:
            value = self._data.get(key)
            if value is not None and expected_type is not None and not isinstance(value, expected_type):
                del self._data[key]
                mismatch = type(value).__name__
            else:
                mismatch = None

        if mismatch is not None:
            logger.error(
                f"Cache type mismatch for key {key}: expected "
                f"{expected_type.__name__}, found {mismatch}; entry evicted"
            )
            self._count("cache_type_mismatches")
            return None
        if value is None:
            logger.debug(f"Cache miss for key: {key}")
            self._count("cache_misses")
            return None
        logger.debug(f"Cache hit for key: {key}")
        self._count("cache_hits")
        return value

    def evict(self, key: Optional[str]) -> None:
        """Remove one key; no-op if absent."""
        if key is None:
            return
        with self._lock:
            removed = self._data.pop(key, None) is not None
        if removed:
            logger.debug(f"Evicted cache key: {key}")

    def evict_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._data.pop(key, None)

    def evict_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``. Returns the count removed."""
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for k in doomed:
                del self._data[k]
        if doomed:
            logger.debug(f"Evicted {len(doomed)} cache entries with prefix {prefix}")
        return len(doomed)

    def evict_by_type(self, entity_type: str) -> int:
        """Remove identity, "get all" and query entries of one entity type."""
        return self.evict_by_prefix(f"{entity_type}{KEY_SEPARATOR}")

    def evict_query_cache_by_type(self, entity_type: str) -> int:
        """Remove cached filtered-read results of one entity type."""
        return self.evict_by_prefix(query_prefix(entity_type))

    def clear(self) -> None:
        logger.info("Clearing entire cache")
        with self._lock:
            self._data.clear()

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(name)


class TypedCacheView(Generic[T]):
    """
    A namespace of a CacheStore that only accepts one value type.

    Values are validated when they are stored, so readers of this view never
    have to discover a type mismatch at read time.

    Usage:
        tasks = TypedCacheView(cache, TaskStatus, namespace="BuildLogTask")
        tasks.put(task_id, status)
        tasks.get(task_id)
    """

    def __init__(self, store: CacheStore, value_type: Type[T], namespace: str) -> None:
        self._store = store
        self._value_type = value_type
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def key_for(self, identifier: Any) -> str:
        return generate_key(self._namespace, identifier)

    def put(self, identifier: Any, value: T) -> None:
        if not isinstance(value, self._value_type):
            raise TypeError(
                f"{self._namespace} cache accepts {self._value_type.__name__}, "
                f"got {type(value).__name__}"
            )
        self._store.put(self.key_for(identifier), value)

    def get(self, identifier: Any) -> Optional[T]:
        return self._store.get(self.key_for(identifier), self._value_type)

    def evict(self, identifier: Any) -> None:
        self._store.evict(self.key_for(identifier))
