"""
Per-node, per-period results.

A NodeTimeline has exactly one PeriodResult slot per configured period, in
configured order. Periods without a receipt keep the neutral default.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence

from .exceptions import DuplicateReceiptError, UnknownPeriodError


@dataclass(frozen=True)
class PeriodResult:
    """Outcome of one node in one period."""

    farming_policy: int = 0
    uptime_percentage: int = 0  # scaled by PERCENTAGE_PRECISION
    expected_payout: int = 0  # TFT units
    actual_payout: int = 0  # TFT units
    is_certified: bool = False


NEUTRAL_RESULT = PeriodResult()


class PeriodSet:
    """Ordered, fixed set of recognized period identifiers."""

    def __init__(self, periods: Sequence[str]):
        self.periods = tuple(str(p) for p in periods)
        if not self.periods:
            raise ValueError("At least one period is required")
        if len(set(self.periods)) != len(self.periods):
            raise ValueError(f"Duplicate period identifiers: {self.periods}")
        self._index = {period: i for i, period in enumerate(self.periods)}

    def index(self, period: str) -> int:
        """Slot index of a period; raises UnknownPeriodError if not recognized."""
        try:
            return self._index[str(period)]
        except KeyError:
            raise UnknownPeriodError(str(period)) from None

    def __contains__(self, period: object) -> bool:
        return str(period) in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)

    def __repr__(self) -> str:
        return f"<PeriodSet({','.join(self.periods)})>"


class NodeTimeline:
    """Fixed-length sequence of PeriodResult for one node, indexed by period."""

    def __init__(self, node_id: int, periods: PeriodSet):
        self.node_id = node_id
        self.periods = periods
        self._results: List[PeriodResult] = [NEUTRAL_RESULT] * len(periods)
        self._filled = [False] * len(periods)

    def set(self, period: str, result: PeriodResult) -> None:
        """Fill a period slot. Each slot can only be filled once."""
        index = self.periods.index(period)
        if self._filled[index]:
            raise DuplicateReceiptError(self.node_id, str(period))
        self._results[index] = result
        self._filled[index] = True

    def __getitem__(self, period: str) -> PeriodResult:
        return self._results[self.periods.index(period)]

    def __iter__(self) -> Iterator[PeriodResult]:
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)

    @property
    def results(self) -> List[PeriodResult]:
        return list(self._results)

    def items(self) -> Iterator:
        """(period, PeriodResult) pairs in period order."""
        return zip(self.periods, self._results)

    @property
    def total_expected(self) -> int:
        return sum(r.expected_payout for r in self._results)

    @property
    def total_received(self) -> int:
        return sum(r.actual_payout for r in self._results)

    @property
    def difference(self) -> int:
        """Total expected minus total received; negative if overpaid."""
        return self.total_expected - self.total_received

    def __repr__(self) -> str:
        return f"<NodeTimeline(node_id={self.node_id}, periods={len(self)})>"
