"""KD-tree spatial index built by recursive mean splits."""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from beartype import beartype
from jaxtyping import jaxtyped

from . import _dense
from ._partition import BuildStats, build_mean_split_tree, log_build_stats
from .config import IndexConfig, KnnBackend
from .errors import IndexNotBuiltError
from .index import SpatialIndex
from .nodes import LeafNode, Node, Probe, iter_leaves, key_distance
from .pair import CoordinatePair
from .protocols import VectorLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TreeState:
    """Everything a query reads, swapped as one reference on rebuild."""

    root: Optional[Node]
    size: int
    stats: BuildStats


def _search_nearest(root: Optional[Node], probe: Probe) -> tuple[Optional[LeafNode], float]:
    """Iterative branch-and-bound search for the single closest leaf."""

    best: Optional[LeafNode] = None
    best_distance = math.inf
    if root is None:
        return best, best_distance

    stack: list[Node] = [root]
    while stack:
        current = stack.pop()
        distance = current.distance_bound(probe)

        if isinstance(current, LeafNode):
            if distance > best_distance:
                continue
            best = current
            best_distance = distance
            continue

        near, far = current.trace(probe)
        # The far side can only hold a closer point if the hyperplane is
        # nearer than the best match so far.
        if (far is not None) and (distance < best_distance):
            stack.append(far)
        if near is not None:
            stack.append(near)

    return best, best_distance


def _search_k(root: Optional[Node], probe: Probe, k: int) -> list[tuple[float, int, LeafNode]]:
    """Return up to ``k`` ``(distance, order, leaf)`` entries, closest first.

    A max-heap of size ``k`` holds the current candidates; its worst distance
    plays the role of the pruning radius once the heap is full.
    """

    heap: list[tuple[float, int, LeafNode]] = []
    if root is None:
        return []

    order = 0
    stack: list[Node] = [root]
    while stack:
        current = stack.pop()
        distance = current.distance_bound(probe)
        radius = -heap[0][0] if len(heap) == k else math.inf

        if isinstance(current, LeafNode):
            if len(heap) < k:
                heapq.heappush(heap, (-distance, order, current))
            elif distance < radius:
                heapq.heapreplace(heap, (-distance, order, current))
            order += 1
            continue

        near, far = current.trace(probe)
        if (far is not None) and (distance < radius):
            stack.append(far)
        if near is not None:
            stack.append(near)

    return sorted((-neg, seq, leaf) for neg, seq, leaf in heap)


class KDTreeIndex(SpatialIndex):
    """KD-tree over buffered insertions.

    ``add`` only buffers pairs. ``build`` gathers the pairs already in the tree
    plus the buffer and partitions them by cycling axes, splitting each
    working set at its mean along the current axis. Queries walk the tree with
    an explicit stack and prune every far side whose splitting hyperplane is
    farther away than the best match found so far.

    Once built, an index that is no longer mutated may be queried from several
    threads. ``build`` swaps in the new tree with a single assignment, so a
    query racing a rebuild sees either the old tree or the new one.
    """

    def __init__(self, dimension: int, *, config: Optional[IndexConfig] = None):
        super().__init__(dimension, config=config)
        self._pending: list[CoordinatePair] = []
        self._state: Optional[_TreeState] = None

    @property
    def build_required(self) -> bool:
        return (self._state is None) or bool(self._pending)

    @property
    def count(self) -> int:
        built = 0 if self._state is None else self._state.size
        return built + len(self._pending)

    @property
    def root(self) -> Optional[Node]:
        """Root of the current tree (``None`` when unbuilt or built empty)."""

        return None if self._state is None else self._state.root

    @property
    def build_stats(self) -> Optional[BuildStats]:
        """Statistics of the last build, ``None`` before the first one."""

        return None if self._state is None else self._state.stats

    @jaxtyped(typechecker=beartype)
    def add(self, vector: VectorLike, value: Any) -> None:
        """Buffer ``(vector, value)``; vectors shorter than ``dimension`` fail."""

        self._pending.append(self._make_pair(vector, value))

    def build(self) -> None:
        """Rebuild the tree from the indexed pairs plus the pending buffer."""

        state = self._state
        pairs = [leaf.pair for leaf in iter_leaves(state.root)] if state is not None else []
        pairs.extend(self._pending)

        keys = _dense.stack_keys(pairs, self._dimension, self._config.dtype)
        root, stats = build_mean_split_tree(pairs, keys, self._dimension)

        self._state = _TreeState(root=root, size=len(pairs), stats=stats)
        self._pending = []
        log_build_stats(stats, level=self._config.log_level, logger=logger)

    def clear(self) -> None:
        self._pending = []
        self._state = None

    @jaxtyped(typechecker=beartype)
    def nearest(self, probe: VectorLike) -> Optional[CoordinatePair]:
        """Return the pair closest to ``probe``.

        Raises:
            IndexNotBuiltError: If ``build()`` has not run since construction
                or the last ``clear()``.
            InvalidDimensionError: If ``probe`` is shorter than ``dimension``.
        """

        state = self._require_state()
        query = self._make_probe(probe)
        leaf, best_distance = _search_nearest(state.root, query)
        best = None if leaf is None else leaf.pair

        # Pairs added since the last build are not in the tree yet.
        for pair in tuple(self._pending):
            distance = key_distance(pair.key(self._dimension), query)
            if distance < best_distance:
                best, best_distance = pair, distance

        return None if best is None else self._copy_pair(best)

    @jaxtyped(typechecker=beartype)
    def nearest_k(
        self,
        probe: VectorLike,
        k: int,
        *,
        backend: Optional[KnnBackend] = None,
    ) -> list[CoordinatePair]:
        """Return up to ``k`` pairs ordered by ascending distance to ``probe``.

        Args:
            probe: Query vector.
            k: Number of neighbours; fewer are returned if fewer are stored.
            backend: ``tree`` walks the index with a bounded heap, ``dense``
                scores every stored pair. Defaults to ``config.knn_backend``.
        """

        k = self._check_k(k)
        resolved = self._resolve_backend(backend)
        state = self._require_state()
        query = self._make_probe(probe)

        if resolved == "dense":
            pairs = [leaf.pair for leaf in iter_leaves(state.root)]
            pairs.extend(self._pending)
            if not pairs:
                return []
            keys = _dense.stack_keys(pairs, self._dimension, self._config.dtype)
            rows, _distances = _dense.top_k_dense(keys, query.key, k)
            return [self._copy_pair(pairs[int(row)]) for row in rows.tolist()]

        candidates = [(distance, leaf.pair) for distance, _seq, leaf in _search_k(state.root, query, k)]
        pending = tuple(self._pending)
        if pending:
            candidates.extend(
                (key_distance(pair.key(self._dimension), query), pair) for pair in pending
            )
            candidates.sort(key=lambda item: item[0])
        return [self._copy_pair(pair) for _distance, pair in candidates[:k]]

    def __iter__(self) -> Iterator[CoordinatePair]:
        state = self._state
        if state is not None:
            for leaf in iter_leaves(state.root):
                yield leaf.pair
        yield from tuple(self._pending)

    def _require_state(self) -> _TreeState:
        state = self._state
        if state is None:
            raise IndexNotBuiltError()
        return state

    def _copy_pair(self, pair: CoordinatePair) -> CoordinatePair:
        return CoordinatePair(pair.value, pair.location, dtype=self._config.dtype)


__all__ = ["KDTreeIndex"]
