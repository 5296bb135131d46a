"""
Dependency graph of queries.

Nodes are declared in dependency order. Each evaluation walks the nodes in
that order and decides per node:

* disabled (an upstream failed or holds no data yet, or the enabled
  predicate is false): the node is idle and exposes no data;
* enabled and its fetch signature changed (key, upstream success versions,
  refresh generation or cache generation): a fetch is started through the
  shared QueryClient;
* otherwise nothing happens.

Cache updates schedule the next evaluation on the running loop, so results
propagate downstream without the caller driving it. settle() evaluates until
no fetch is left in flight.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set, Tuple

from .client import QueryClient, QueryKey, QueryState, QueryStatus

logger = logging.getLogger(__name__)

Upstream = Mapping[str, QueryState]
NodeListener = Callable[[QueryState], None]


class DependencyError(ValueError):
    """Raised when a node depends on an undeclared node."""
    pass


def has_data(state: QueryState) -> bool:
    """True once a query produced a result that was not superseded by an error."""
    return state.version > 0 and not state.is_error


@dataclass
class QueryNode:
    """
    Declaration of one query in a graph.

    key, fetch and enabled receive the current states of the declared
    upstream nodes, by node name. A node is only enabled once every upstream
    holds data and none failed; enabled adds a further condition.
    """
    name: str
    key: Callable[[Upstream], QueryKey]
    fetch: Callable[[Upstream], Awaitable[Any]]
    depends_on: List[str] = field(default_factory=list)
    enabled: Optional[Callable[[Upstream], bool]] = None
    refetch_interval: Optional[float] = None  # seconds

    # Bumped by refresh() to force a fetch under the same key
    generation: int = 0


@dataclass
class _NodeRuntime:
    key: Optional[QueryKey] = None
    signature: Optional[Tuple[Any, ...]] = None
    interval_elapsed: bool = False
    timer: Optional[asyncio.TimerHandle] = None
    listeners: List[NodeListener] = field(default_factory=list)
    last_state: QueryState = field(default_factory=QueryState)


class QueryGraph:
    """Evaluates a set of dependent query nodes against a QueryClient."""

    def __init__(self, client: Optional[QueryClient] = None):
        self.client = client or QueryClient()
        self.nodes: Dict[str, QueryNode] = {}
        self._runtime: Dict[str, _NodeRuntime] = {}
        self._pending: Set[asyncio.Task] = set()
        self._scheduled = False
        self._unsubscribe = self.client.subscribe(self._on_client_change)

    def add_node(self, node: QueryNode) -> QueryNode:
        """
        Declare a node. Its dependencies must already be declared.

        Raises:
            DependencyError: If a dependency is unknown or the name is taken
        """
        if node.name in self.nodes:
            raise DependencyError(f"Duplicate query node: {node.name}")
        missing = [dep for dep in node.depends_on if dep not in self.nodes]
        if missing:
            raise DependencyError(f"Query node {node.name} depends on undeclared {missing}")

        self.nodes[node.name] = node
        self._runtime[node.name] = _NodeRuntime()
        logger.debug(f"Added query node: {node.name}")
        return node

    def handle(self, name: str) -> "QueryHandle":
        if name not in self.nodes:
            raise KeyError(f"Unknown query node: {name}")
        return QueryHandle(self, name)

    def state(self, name: str) -> QueryState:
        """Current state of a node; idle with no data while disabled."""
        runtime = self._runtime[name]
        if runtime.key is None:
            return QueryState()
        return self.client.state(runtime.key)

    def is_enabled(self, name: str) -> bool:
        """Whether the node was enabled at the last evaluation."""
        return self._runtime[name].key is not None

    def _upstream(self, node: QueryNode) -> Dict[str, QueryState]:
        return {dep: self.state(dep) for dep in node.depends_on}

    def _is_enabled(self, node: QueryNode, upstream: Upstream) -> bool:
        if any(state.is_error for state in upstream.values()):
            return False
        # Upstream data stays readable while an upstream refetches
        if not all(has_data(state) for state in upstream.values()):
            return False
        return node.enabled is None or bool(node.enabled(upstream))

    def evaluate(self) -> None:
        """
        Walk the graph once, starting the fetches that are due.

        Must be called with a running event loop.
        """
        self._scheduled = False

        for name, node in self.nodes.items():
            runtime = self._runtime[name]
            upstream = self._upstream(node)

            if not self._is_enabled(node, upstream):
                if runtime.key is not None:
                    logger.debug(f"Query node {name} disabled")
                runtime.key = None
                runtime.signature = None
                runtime.interval_elapsed = False
                self._cancel_timer(runtime)
                self._notify(name)
                continue

            key = node.key(upstream)
            signature = (
                key,
                tuple((state.key, state.version) for state in upstream.values()),
                node.generation,
                self.client.generation(key),
            )
            previous = runtime.signature
            runtime.key = key

            if signature != previous or runtime.interval_elapsed:
                # Same key means a refetch: bypass the stale-time cache
                force = previous is not None and previous[0] == key
                runtime.signature = signature
                runtime.interval_elapsed = False
                self._start_fetch(node, key, upstream, force)
                self._schedule_interval(node, runtime)

            self._notify(name)

    def _start_fetch(self, node: QueryNode, key: QueryKey, upstream: Upstream, force: bool) -> None:
        snapshot = dict(upstream)

        async def _fetcher():
            return await node.fetch(snapshot)

        logger.debug(f"Fetching query node {node.name}: {key}")
        task = asyncio.ensure_future(self.client.fetch(key, _fetcher, force=force))
        self._pending.add(task)
        task.add_done_callback(self._fetch_done)

    def _fetch_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        # Failures are exposed through the node state
        if not task.cancelled():
            task.exception()
        self._schedule()

    def _schedule_interval(self, node: QueryNode, runtime: _NodeRuntime) -> None:
        self._cancel_timer(runtime)
        if node.refetch_interval is None:
            return
        loop = asyncio.get_running_loop()
        runtime.timer = loop.call_later(node.refetch_interval, self._interval_elapsed, runtime)

    def _interval_elapsed(self, runtime: _NodeRuntime) -> None:
        runtime.timer = None
        runtime.interval_elapsed = True
        self._schedule()

    @staticmethod
    def _cancel_timer(runtime: _NodeRuntime) -> None:
        if runtime.timer is not None:
            runtime.timer.cancel()
            runtime.timer = None

    def _schedule(self) -> None:
        if self._scheduled:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._scheduled = True
        loop.call_soon(self.evaluate)

    def _on_client_change(self, key: QueryKey, state: QueryState) -> None:
        for name, runtime in self._runtime.items():
            if runtime.key == key:
                self._notify(name)
        self._schedule()

    def _notify(self, name: str) -> None:
        runtime = self._runtime[name]
        state = self.state(name)
        if state == runtime.last_state:
            return
        runtime.last_state = state
        for listener in list(runtime.listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(f"Listener of query node {name} failed")

    def subscribe(self, name: str, listener: NodeListener) -> Callable[[], None]:
        """
        Call listener with the node state whenever it changes.

        Returns:
            Function removing the listener
        """
        listeners = self._runtime[name].listeners
        listeners.append(listener)

        def _unsubscribe():
            if listener in listeners:
                listeners.remove(listener)

        return _unsubscribe

    def refresh(self, name: str) -> None:
        """Force the node to fetch again under its current key."""
        node = self.nodes[name]
        node.generation += 1
        runtime = self._runtime[name]
        logger.debug(f"Refreshing query node {name} (generation {node.generation})")
        if runtime.key is not None:
            self.client.invalidate(runtime.key)
        self._schedule()

    async def settle(self) -> None:
        """Evaluate until no fetch started by this graph is in flight."""
        while True:
            self.evaluate()
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.wait(pending)

    def close(self) -> None:
        """Detach from the client and stop interval refetches."""
        self._unsubscribe()
        for runtime in self._runtime.values():
            self._cancel_timer(runtime)


class QueryHandle:
    """Live view of one node of a QueryGraph."""

    def __init__(self, graph: QueryGraph, name: str):
        self.graph = graph
        self.name = name

    def __repr__(self) -> str:
        return f"QueryHandle({self.name!r}, status={self.status.value})"

    @property
    def state(self) -> QueryState:
        return self.graph.state(self.name)

    @property
    def status(self) -> QueryStatus:
        return self.state.status

    @property
    def data(self) -> Any:
        return self.state.data

    @property
    def error(self) -> Optional[BaseException]:
        return self.state.error

    @property
    def enabled(self) -> bool:
        return self.graph.is_enabled(self.name)

    def refresh(self) -> None:
        self.graph.refresh(self.name)

    def subscribe(self, listener: NodeListener) -> Callable[[], None]:
        return self.graph.subscribe(self.name, listener)

    async def result(self) -> Any:
        """
        Settle the graph and return the node's data.

        Returns:
            The data, or None if the node is disabled

        Raises:
            The node's error if its fetch failed
        """
        await self.graph.settle()
        state = self.state
        if state.is_error:
            raise state.error
        return state.data
