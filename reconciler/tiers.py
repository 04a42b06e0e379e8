"""Titan tier classification."""

from typing import Union

from config.settings import LEGACY_TITAN_FARMING_POLICY_ID, TITAN_FARMING_POLICY_ID

from .timeline import NodeTimeline, PeriodResult


def is_titan_period(farming_policy: int, is_certified: bool) -> bool:
    """Policy 2 is always titan; policy 1 is titan only for certified nodes."""
    return farming_policy == TITAN_FARMING_POLICY_ID or (
        farming_policy == LEGACY_TITAN_FARMING_POLICY_ID and is_certified
    )


def is_titan(result: Union[PeriodResult, NodeTimeline]) -> bool:
    """
    Titan classification of a single period or of a whole node.

    A node is titan if any of its periods is. Such a node is audited for
    every period, including those where it was not titan.

    Args:
        result: PeriodResult or NodeTimeline

    Returns:
        True if titan
    """
    if isinstance(result, NodeTimeline):
        return any(is_titan(r) for r in result)
    return is_titan_period(result.farming_policy, result.is_certified)
