"""
Expected reward calculator.

Recomputes a receipt's payout as if the node had been enrolled in the
reference (titan) farming policy for its whole measured uptime:
  1. Scale each usage quantity to TFT precision and truncate, per dimension
  2. Multiply by the schedule rate and sum -> mUSD, upscaled by TFT precision
  3. Floor-divide by the connection price (mUSD per TFT unit) -> TFT units
  4. Scale by measured uptime / standard period duration (multiply first)

The order of operations above is part of the contract: reordering it
changes the result on historical receipts.
"""

import logging
from typing import Optional

from config.settings import (
    PERCENTAGE_PRECISION,
    STANDARD_PERIOD_DURATION,
    TFT_PRECISION,
    TITAN_RESOURCE_REWARDS,
)

from .exceptions import RewardCalculationError
from .receipt import MintingReceipt, ResourceRewards

logger = logging.getLogger(__name__)

TITAN_SCHEDULE = ResourceRewards(**TITAN_RESOURCE_REWARDS)

MAX_UPTIME_PERCENTAGE = 100 * PERCENTAGE_PRECISION


def _upscale(quantity: float) -> int:
    """Convert a usage quantity to TFT precision, truncating toward zero."""
    return int(quantity * TFT_PRECISION)


def calculate_expected_reward(
    receipt: MintingReceipt,
    schedule: ResourceRewards = TITAN_SCHEDULE,
    period: Optional[str] = None,
) -> int:
    """
    Calculate the expected reward of a receipt under a reward schedule.

    Formula:
        full_musd = trunc(cu * P) * cu_rate + trunc(su * P) * su_rate
                  + trunc(nu * P) * nu_rate + trunc(ip * P) * ipv4_rate
        full_tft = full_musd // tft_connection_price
        reward = full_tft * measured_uptime // STANDARD_PERIOD_DURATION

    The connection price is expressed in mUSD per TFT unit, so full_musd is
    not divided by P.

    Args:
        receipt: Minting receipt to recompute
        schedule: Reward rates to apply, the titan schedule by default
        period: Period identifier, only used in error messages

    Returns:
        Expected reward in TFT units

    Raises:
        RewardCalculationError: if the receipt has a zero connection price
    """
    if receipt.tft_connection_price == 0:
        raise RewardCalculationError("Zero TFT connection price", receipt.node_id, period)

    full_musd_reward_upscaled = (
        _upscale(receipt.cloud_units.cu) * schedule.cu
        + _upscale(receipt.cloud_units.su) * schedule.su
        + _upscale(receipt.cloud_units.nu) * schedule.nu
        + _upscale(receipt.resource_utilization.ip) * schedule.ipv4
    )
    full_tft_reward = full_musd_reward_upscaled // receipt.tft_connection_price

    # Standard duration so nodes which came online mid period get a partial reward
    expected = full_tft_reward * receipt.measured_uptime // STANDARD_PERIOD_DURATION
    logger.debug(
        f"Node {receipt.node_id} period {period}: full={full_tft_reward} "
        f"uptime={receipt.measured_uptime} expected={expected}"
    )
    return expected


def calculate_uptime_percentage(measured_uptime: int) -> int:
    """
    Uptime as a percentage of the standard period, with 3 decimals of precision.

    Args:
        measured_uptime: Measured uptime in seconds

    Returns:
        Percentage scaled by PERCENTAGE_PRECISION, clamped to 100.000%
    """
    percentage = measured_uptime * 100 * PERCENTAGE_PRECISION // STANDARD_PERIOD_DURATION
    return min(percentage, MAX_UPTIME_PERCENTAGE)
