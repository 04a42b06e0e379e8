"""
Period aggregation.

Groups (period, receipt) pairs by node and builds one NodeTimeline per node.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from config.settings import CERTIFIED_NODE_TYPE

from .receipt import MintingReceipt, ResourceRewards
from .reward_calculator import TITAN_SCHEDULE, calculate_expected_reward, calculate_uptime_percentage
from .timeline import NodeTimeline, PeriodResult, PeriodSet

logger = logging.getLogger(__name__)


def build_period_result(
    receipt: MintingReceipt,
    schedule: ResourceRewards = TITAN_SCHEDULE,
    period: Optional[str] = None,
) -> PeriodResult:
    """
    Derive the PeriodResult of a single receipt.

    The actual payout is copied from the receipt; the expected payout is
    always recomputed under `schedule`.
    """
    return PeriodResult(
        farming_policy=receipt.farming_policy_id,
        uptime_percentage=calculate_uptime_percentage(receipt.measured_uptime),
        expected_payout=calculate_expected_reward(receipt, schedule, period),
        actual_payout=receipt.reward.tft,
        is_certified=receipt.node_type == CERTIFIED_NODE_TYPE,
    )


def build_timeline(
    node_id: int,
    receipts: Iterable[Tuple[str, MintingReceipt]],
    periods: Union[PeriodSet, Sequence[str]],
    schedule: ResourceRewards = TITAN_SCHEDULE,
) -> NodeTimeline:
    """
    Build the timeline of one node from all its receipts.

    Args:
        node_id: Node the receipts belong to
        receipts: (period, receipt) pairs for this node
        periods: Recognized periods
        schedule: Reference schedule for expected payouts

    Returns:
        NodeTimeline with absent periods left at the neutral default

    Raises:
        UnknownPeriodError: for a period outside `periods`
        DuplicateReceiptError: for a second receipt in the same period
        RewardCalculationError: for a receipt with a zero connection price
    """
    if not isinstance(periods, PeriodSet):
        periods = PeriodSet(periods)

    timeline = NodeTimeline(node_id, periods)
    for period, receipt in receipts:
        # Validate the slot before computing anything for it
        periods.index(period)
        if receipt.node_id != node_id:
            raise ValueError(f"Receipt for node {receipt.node_id} passed to timeline of node {node_id}")
        timeline.set(period, build_period_result(receipt, schedule, str(period)))
    return timeline


def aggregate_receipts(
    receipts: Iterable[Tuple[str, MintingReceipt]],
    periods: Union[PeriodSet, Sequence[str]],
    schedule: ResourceRewards = TITAN_SCHEDULE,
) -> Dict[int, NodeTimeline]:
    """
    Group receipts by node and build a timeline for every node.

    Args:
        receipts: (period, receipt) pairs from the receipt source
        periods: Recognized periods
        schedule: Reference schedule for expected payouts

    Returns:
        Dict of node_id -> NodeTimeline, ordered by ascending node_id
    """
    if not isinstance(periods, PeriodSet):
        periods = PeriodSet(periods)

    node_receipts: Dict[int, List[Tuple[str, MintingReceipt]]] = defaultdict(list)
    count = 0
    for period, receipt in receipts:
        # Fail on unknown periods before any computation
        periods.index(period)
        node_receipts[receipt.node_id].append((str(period), receipt))
        count += 1

    logger.info(f"Grouped {count} receipts into {len(node_receipts)} nodes")

    return {
        node_id: build_timeline(node_id, node_receipts[node_id], periods, schedule)
        for node_id in sorted(node_receipts)
    }
