from __future__ import annotations

from dataclasses import dataclass
from statistics import median_high

from ..domain import PathPriceEstimate
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilterOutcome:
    kept: list[PathPriceEstimate]
    dropped: list[PathPriceEstimate]
    median_rate: float | None


class OutlierFilter:
    """Drops path estimates that disagree too much with the cross-path median.

    A single thin or manipulated pool should not be able to set a price on
    its own, so every rate is checked against the median of all paths.
    The median is always one of the observed rates (the upper middle one
    for an even count), so at least one path survives. With fewer than
    two estimates there is nothing to compare against and
    the input is returned unchanged.
    """

    def __init__(self, max_deviation: float = 0.5):
        if max_deviation <= 0:
            raise ValueError("max_deviation must be positive")
        self.max_deviation = max_deviation

    def evaluate(self, estimates: list[PathPriceEstimate]) -> FilterOutcome:
        if len(estimates) < 2:
            return FilterOutcome(kept=list(estimates), dropped=[], median_rate=None)

        median_rate = median_high(estimate.implied_rate for estimate in estimates)
        kept: list[PathPriceEstimate] = []
        dropped: list[PathPriceEstimate] = []

        for estimate in estimates:
            deviation = abs(estimate.implied_rate - median_rate) / median_rate
            if deviation <= self.max_deviation:
                kept.append(estimate)
            else:
                dropped.append(estimate)
                logger.debug(
                    "Dropping outlier path %s: rate %g deviates %.1f%% from median %g",
                    estimate.path.describe(),
                    estimate.implied_rate,
                    deviation * 100,
                    median_rate,
                )

        return FilterOutcome(kept=kept, dropped=dropped, median_rate=median_rate)

    def filter(self, estimates: list[PathPriceEstimate]) -> list[PathPriceEstimate]:
        return self.evaluate(estimates).kept
