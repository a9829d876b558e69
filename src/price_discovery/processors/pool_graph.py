from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..domain import Pool, PoolSnapshot, Token
from ..logger import get_logger

logger = get_logger(__name__)


class MalformedPoolError(ValueError):
    """Raised for a pool record that cannot be placed in the graph."""


@dataclass(frozen=True)
class GraphStats:
    total_tokens: int
    total_pools: int
    skipped_pools: int
    empty_pools: int
    anchor_pair_count: int


def validate_pool(pool: Pool, tokens: dict[str, Token]) -> None:
    """Raise MalformedPoolError when ``pool`` is structurally invalid.

    Zero reserves are not malformed; they are filtered separately.
    """
    if pool.token_a.id == pool.token_b.id:
        raise MalformedPoolError(f"pool {pool.id} pairs {pool.token_a.id} with itself")
    for token in (pool.token_a, pool.token_b):
        if token.id not in tokens:
            raise MalformedPoolError(f"pool {pool.id} references unknown token {token.id}")
    if pool.reserve_a < 0 or pool.reserve_b < 0:
        raise MalformedPoolError(
            f"pool {pool.id} has negative reserves: A={pool.reserve_a}, B={pool.reserve_b}"
        )
    if not 0 <= pool.fee_rate < 1:
        raise MalformedPoolError(f"pool {pool.id} has fee {pool.fee_rate} outside [0, 1)")


class PoolGraph:
    """Undirected liquidity graph: tokens are nodes, pools are edges.

    Built once per snapshot and never mutated afterwards. Pools with an
    empty side are left out so every edge can be priced without dividing
    by zero.
    """

    def __init__(
        self,
        tokens: dict[str, Token],
        pools: Iterable[Pool],
        *,
        skipped: int = 0,
        empty: int = 0,
    ):
        self._tokens = dict(tokens)
        self._pools: dict[str, Pool] = {}
        self._edges: dict[str, list[tuple[Pool, Token]]] = {}
        self._skipped = skipped
        self._empty = empty
        for pool in pools:
            self._pools[pool.id] = pool
            self._edges.setdefault(pool.token_a.id, []).append((pool, pool.token_b))
            self._edges.setdefault(pool.token_b.id, []).append((pool, pool.token_a))

    @classmethod
    def build(cls, snapshot: PoolSnapshot) -> PoolGraph:
        """Build the graph from a snapshot, skipping unusable pools.

        Args:
            snapshot: Token registry and pool reserves for one pricing cycle

        Returns:
            A read-only PoolGraph

        Malformed records are logged and skipped; they never abort the build.
        """
        usable: list[Pool] = []
        seen: set[str] = set()
        skipped = 0
        empty = 0

        for pool in snapshot.pools:
            try:
                validate_pool(pool, snapshot.tokens)
            except MalformedPoolError as exc:
                logger.warning("Skipping malformed pool: %s", exc)
                skipped += 1
                continue

            if pool.id in seen:
                logger.warning("Skipping duplicate pool record %s", pool.id)
                skipped += 1
                continue

            if pool.reserve_a == 0 or pool.reserve_b == 0:
                logger.debug(
                    "Excluding empty pool %s (A=%d, B=%d)",
                    pool.id,
                    pool.reserve_a,
                    pool.reserve_b,
                )
                empty += 1
                continue

            seen.add(pool.id)
            usable.append(pool)

        graph = cls(snapshot.tokens, usable, skipped=skipped, empty=empty)
        logger.info(
            "Built pool graph: %d tokens, %d pools (%d skipped, %d empty)",
            len(graph.tokens),
            len(graph.pools),
            skipped,
            empty,
        )
        return graph

    @property
    def tokens(self) -> dict[str, Token]:
        return dict(self._tokens)

    @property
    def pools(self) -> tuple[Pool, ...]:
        return tuple(self._pools.values())

    def token(self, token_id: str) -> Token | None:
        return self._tokens.get(token_id)

    def pool(self, pool_id: str) -> Pool | None:
        return self._pools.get(pool_id)

    def neighbors(self, token_id: str) -> list[tuple[Pool, Token]]:
        """Return (pool, other_token) pairs reachable in one hop from ``token_id``."""
        return list(self._edges.get(token_id, ()))

    def anchor(self) -> Token | None:
        for token in self._tokens.values():
            if token.is_anchor:
                return token
        return None

    def stats(self) -> GraphStats:
        anchor = self.anchor()
        anchor_pairs = len(self._edges.get(anchor.id, ())) if anchor else 0
        return GraphStats(
            total_tokens=len(self._tokens),
            total_pools=len(self._pools),
            skipped_pools=self._skipped,
            empty_pools=self._empty,
            anchor_pair_count=anchor_pairs,
        )
