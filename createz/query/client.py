"""
Keyed query cache.

Every query is identified by a tuple key. The client guarantees at most one
in-flight fetch per key: callers arriving while a fetch is loading await the
same task. invalidate() starts a new generation for a key; a fetch started
under an older generation still completes for its own callers, but its
outcome is never written to the cache.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from eth_utils.address import is_hex_address

from ..config import ClientConfig, get_config
from ..types import normalize_address
from .retry import ErrorHandler, retry_operation

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]
Fetcher = Callable[[], Awaitable[Any]]
StateListener = Callable[[QueryKey, "QueryState"], None]


def query_key(operation: str, *args: Any) -> QueryKey:
    """Build a cache key; address arguments are checksum normalized."""
    return (operation,) + tuple(
        normalize_address(arg) if isinstance(arg, str) and is_hex_address(arg) else arg
        for arg in args
    )


class QueryStatus(Enum):
    """Query status."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class QueryState:
    """Immutable view of one cache entry."""
    key: Optional[QueryKey] = None
    status: QueryStatus = QueryStatus.IDLE
    data: Any = None
    error: Optional[BaseException] = None
    version: int = 0  # bumped on every applied success
    updated_at: Optional[float] = None

    @property
    def is_idle(self) -> bool:
        return self.status == QueryStatus.IDLE

    @property
    def is_loading(self) -> bool:
        return self.status == QueryStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status == QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == QueryStatus.ERROR


@dataclass
class _CacheEntry:
    state: QueryState
    generation: int = 0
    task: Optional[asyncio.Task] = None


class QueryClient:
    """
    Shared cache of query results.

    Transient fetch failures are retried with exponential backoff following
    ErrorHandler's classification; domain errors fail on the first attempt.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.config = config or get_config().client
        self.error_handler = error_handler or ErrorHandler(logger)
        self._entries: Dict[QueryKey, _CacheEntry] = {}
        self._listeners: List[StateListener] = []
        self.logger = logging.getLogger(__name__)

    def _entry(self, key: QueryKey) -> _CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _CacheEntry(state=QueryState(key=key))
            self._entries[key] = entry
        return entry

    def state(self, key: QueryKey) -> QueryState:
        entry = self._entries.get(key)
        return entry.state if entry else QueryState(key=key)

    def generation(self, key: QueryKey) -> int:
        entry = self._entries.get(key)
        return entry.generation if entry else 0

    def is_fresh(self, key: QueryKey) -> bool:
        """True if key holds a success younger than QUERY_STALE_TIME."""
        state = self.state(key)
        if not state.is_success or state.updated_at is None:
            return False
        return time.monotonic() - state.updated_at < self.config.QUERY_STALE_TIME

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register listener for every state change.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_state(self, entry: _CacheEntry, state: QueryState) -> None:
        entry.state = state
        for listener in list(self._listeners):
            try:
                listener(state.key, state)
            except Exception:
                self.logger.exception(f"Query listener failed for {state.key}")

    async def fetch(self, key: QueryKey, fetcher: Fetcher, force: bool = False) -> Any:
        """
        Resolve key, fetching unless the cached result is still fresh.

        Args:
            key: Cache key
            fetcher: Coroutine function producing the value
            force: Fetch even when the cached result is fresh

        Returns:
            The fetched (or cached) value

        Raises:
            Whatever the last fetch attempt raised
        """
        entry = self._entry(key)

        if entry.task is not None and not entry.task.done():
            self.logger.debug(f"Joining in-flight fetch for {key}")
            return await asyncio.shield(entry.task)

        if not force and self.is_fresh(key):
            return entry.state.data

        generation = entry.generation
        self._set_state(entry, replace(entry.state, status=QueryStatus.LOADING, error=None))

        task = asyncio.ensure_future(self._run(key, fetcher, generation))
        task.add_done_callback(_consume_result)
        entry.task = task
        return await asyncio.shield(task)

    async def _run(self, key: QueryKey, fetcher: Fetcher, generation: int) -> Any:
        entry = self._entry(key)
        try:
            result = await retry_operation(
                fetcher,
                max_retries=self.config.QUERY_MAX_RETRIES,
                retry_delay=self.config.QUERY_RETRY_DELAY,
                error_handler=self.error_handler,
                context={"query": key[0]},
            )
        except Exception as e:
            if entry.generation == generation:
                self._set_state(entry, replace(
                    entry.state, status=QueryStatus.ERROR, error=e,
                    updated_at=time.monotonic(),
                ))
            else:
                self.logger.debug(f"Discarding failure of superseded fetch for {key}")
            raise

        if entry.generation != generation:
            self.logger.debug(f"Discarding result of superseded fetch for {key}")
            return result

        self._set_state(entry, QueryState(
            key=key,
            status=QueryStatus.SUCCESS,
            data=result,
            version=entry.state.version + 1,
            updated_at=time.monotonic(),
        ))
        return result

    def invalidate(self, key: QueryKey) -> None:
        """
        Start a new generation for key.

        A fetch in flight keeps running for the callers awaiting it, but its
        outcome is not applied. The cached value stays visible until the
        next fetch replaces it.
        """
        entry = self._entries.get(key)
        if entry is None:
            return
        entry.generation += 1
        entry.task = None
        self.logger.debug(f"Invalidated {key} (generation {entry.generation})")
        state = replace(entry.state, updated_at=None)
        if state.is_loading:
            state = replace(state, status=QueryStatus.SUCCESS if state.version else QueryStatus.IDLE)
        self._set_state(entry, state)

    def invalidate_matching(self, prefix: QueryKey) -> int:
        """
        Invalidate every key starting with prefix.

        Returns:
            Number of invalidated keys
        """
        matched = [key for key in self._entries if key[:len(prefix)] == prefix]
        for key in matched:
            self.invalidate(key)
        return len(matched)


def _consume_result(task: asyncio.Task) -> None:
    # Failures are recorded in the cache; mark them retrieved
    if not task.cancelled():
        task.exception()
