from __future__ import annotations

from dataclasses import dataclass, field

from ..cache import PriceCache
from ..checks import CheckResult
from ..domain import AnchorQuote, PoolSnapshot, PriceResult
from ..processors import PriceDiscoveryEngine
from ..state import AppState


@dataclass
class PipelineContext:
    state: AppState
    token_ids: list[str] = field(default_factory=list)
    cache: PriceCache | None = None
    snapshot: PoolSnapshot | None = None
    anchor_quote: AnchorQuote | None = None
    engine: PriceDiscoveryEngine | None = None
    check_results: list[CheckResult] = field(default_factory=list)
    results: dict[str, PriceResult] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def snapshot_required(self) -> PoolSnapshot:
        if self.snapshot is None:
            raise RuntimeError(
                "Snapshot has not been set. Ensure load_inputs() is called before accessing this property."
            )
        return self.snapshot

    @property
    def anchor_quote_required(self) -> AnchorQuote:
        if self.anchor_quote is None:
            raise RuntimeError(
                "Anchor quote has not been set. Ensure load_inputs() is called before accessing this property."
            )
        return self.anchor_quote

    @property
    def engine_required(self) -> PriceDiscoveryEngine:
        if self.engine is None:
            raise RuntimeError(
                "Engine has not been built. Ensure load_inputs() is called before accessing this property."
            )
        return self.engine
