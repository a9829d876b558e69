from __future__ import annotations

from ..domain import Path, Pool, Token
from ..logger import get_logger
from .pool_graph import PoolGraph

logger = get_logger(__name__)

DEFAULT_MAX_HOPS = 4


class PathFinder:
    """Enumerates simple pool paths from a token to the anchor."""

    def __init__(self, graph: PoolGraph, max_hops: int = DEFAULT_MAX_HOPS):
        if max_hops < 1:
            raise ValueError("max_hops must be at least 1")
        self.graph = graph
        self.max_hops = max_hops

    def find_paths(
        self, from_token: str, anchor_token: str, max_hops: int | None = None
    ) -> list[Path]:
        """Collect every simple path of at most ``max_hops`` hops.

        Args:
            from_token: Token id to start from
            anchor_token: Token id every path must end at
            max_hops: Optional override of the configured hop budget

        Returns:
            Paths in discovery order. Empty when ``from_token`` is the anchor,
            when either token is not in the graph, or when no route exists
            within the hop budget.
        """
        budget = self.max_hops if max_hops is None else max_hops
        if from_token == anchor_token:
            return []

        start = self.graph.token(from_token)
        target = self.graph.token(anchor_token)
        if start is None or target is None:
            return []

        results: list[Path] = []
        self._walk(start, target.id, [start], [], {start.id}, results, budget)

        logger.debug(
            "Found %d paths from %s to %s within %d hops",
            len(results),
            start.label,
            target.label,
            budget,
        )
        return results

    def _walk(
        self,
        current: Token,
        target_id: str,
        tokens: list[Token],
        pools: list[Pool],
        visited: set[str],
        results: list[Path],
        budget: int,
    ) -> None:
        if len(pools) >= budget:
            return

        for pool, next_token in self.graph.neighbors(current.id):
            if next_token.id in visited:
                continue

            tokens.append(next_token)
            pools.append(pool)

            if next_token.id == target_id:
                results.append(Path(tokens=tuple(tokens), pools=tuple(pools)))
            else:
                visited.add(next_token.id)
                self._walk(next_token, target_id, tokens, pools, visited, results, budget)
                visited.discard(next_token.id)

            tokens.pop()
            pools.pop()


def find_paths(
    graph: PoolGraph,
    from_token: str,
    anchor_token: str,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> list[Path]:
    """Convenience wrapper around ``PathFinder.find_paths``."""
    return PathFinder(graph, max_hops).find_paths(from_token, anchor_token)
