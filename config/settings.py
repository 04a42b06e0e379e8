"""
Configuration constants and settings for the Titan payout reconciler.

Centralizes all fixed values including:
- Reward-unit and percentage precision
- Standard period duration
- Farming policy codes and resource reward schedules
- Default period identifiers
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ═══ Receipts ═══
RECEIPTS_DIR = os.getenv("RECEIPTS_DIR", ".")

# ═══ Precision ═══
TFT_PRECISION = 10_000_000  # 1 TFT -> 1e7 units
PERCENTAGE_PRECISION = 1_000  # 3 decimals on percentages

# ═══ Periods ═══
# 1/12th of an average year (365.25 days), in seconds
STANDARD_PERIOD_DURATION = 24 * 60 * 60 * (365 * 3 + 366) // 4 // 12
DEFAULT_PERIODS = ("52", "53", "54", "55", "56", "57")

# ═══ Nodes ═══
CERTIFIED_NODE_TYPE = "CERTIFIED"

# ═══ Farming Policies ═══
TITAN_FARMING_POLICY_ID = 2
LEGACY_TITAN_FARMING_POLICY_ID = 1
DEFAULT_FARMING_POLICY_ID = 1

# Farming policy 2, as recorded on chain
TITAN_RESOURCE_REWARDS = {"cu": 3000, "su": 1250, "nu": 38, "ipv4": 6}
# Initial farming policy (1), applied to receipts without a schedule
DEFAULT_RESOURCE_REWARDS = {"cu": 2400, "su": 1000, "nu": 30, "ipv4": 5}
