from __future__ import annotations

from ..domain import PathPriceEstimate, WeightedEstimate
from ..settings import WeightingSettings


class PathWeighter:
    """Scores how much a path should influence the aggregated price.

    weight = max(reliability * confidence, floor)
             * hop_penalty ** (hops - 1)
             * liquidity_boost
             * recency_factor

    Every factor multiplies, so one bad factor is enough to mute a path.
    """

    def __init__(self, settings: WeightingSettings | None = None):
        self.settings = settings or WeightingSettings()

    def base_weight(self, estimate: PathPriceEstimate) -> float:
        return max(estimate.reliability * estimate.confidence, self.settings.weight_floor)

    def hop_factor(self, hop_count: int) -> float:
        return self.settings.hop_penalty ** max(0, hop_count - 1)

    def liquidity_boost(self, total_liquidity: float) -> float:
        """1.0 for an empty path, growing linearly up to the configured cap."""
        boost = 1.0 + max(0.0, total_liquidity) / self.settings.liquidity_boost_scale_usd
        return min(self.settings.liquidity_boost_cap, boost)

    def recency_factor(self, age_seconds: float) -> float:
        """Halves every half-life, never dropping below the floor."""
        decay = 0.5 ** (max(0.0, age_seconds) / self.settings.recency_half_life_seconds)
        return max(self.settings.recency_floor, decay)

    def weight(self, estimate: PathPriceEstimate) -> float:
        return (
            self.base_weight(estimate)
            * self.hop_factor(estimate.hop_count)
            * self.liquidity_boost(estimate.total_liquidity)
            * self.recency_factor(estimate.age_seconds)
        )

    def rank(self, estimates: list[PathPriceEstimate]) -> list[WeightedEstimate]:
        """Weight every estimate and sort by descending weight.

        Ties keep discovery order so repeated runs rank identically.
        """
        weighted = [WeightedEstimate(estimate, self.weight(estimate)) for estimate in estimates]
        return sorted(weighted, key=lambda item: item.weight, reverse=True)
