"""Test fixtures: receipt factories and on-disk receipt directories."""

import json
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import DEFAULT_PERIODS, STANDARD_PERIOD_DURATION
from reconciler.receipt import MintingReceipt


def make_receipt_dict(
    node_id: int = 1,
    farming_policy_id: int = 2,
    node_type: str = "DIY",
    measured_uptime: int = STANDARD_PERIOD_DURATION,
    tft_connection_price: int = 80,
    cu: float = 1.0,
    su: float = 2.0,
    nu: float = 0.5,
    ip: float = 1.0,
    reward_tft: int = 0,
) -> dict:
    """Create a receipt in its JSON form with all required fields."""
    data = {
        "period": {"start": 1_650_000_000, "end": 1_650_000_000 + STANDARD_PERIOD_DURATION},
        "node_id": node_id,
        "twin_id": 10 + node_id,
        "farm_id": 1,
        "farm_name": "test-farm",
        "stellar_payout_address": "GTESTADDRESS",
        "measured_uptime": measured_uptime,
        "tft_connection_price": tft_connection_price,
        "cloud_units": {"cu": cu, "su": su, "nu": nu},
        "resource_units": {"cru": 4.0, "mru": 8.0, "hru": 0.0, "sru": 250.0},
        "resource_utilization": {"cru": 0.0, "mru": 0.0, "hru": 0.0, "sru": 0.0, "ip": ip},
        "reward": {"musd": 0, "tft": reward_tft},
        "carbon_offset": {"musd": 0, "tft": 0},
        "node_type": node_type,
    }
    if farming_policy_id is not None:
        data["farming_policy_id"] = farming_policy_id
    return data


def make_receipt(**kwargs) -> MintingReceipt:
    """Create a parsed receipt."""
    return MintingReceipt.from_dict(make_receipt_dict(**kwargs))


def write_receipt(root, period: str, data: dict, name: str = None) -> None:
    """Store a receipt as JSON under <root>/<period>/."""
    period_dir = root / period
    period_dir.mkdir(parents=True, exist_ok=True)
    name = name or f"{data['node_id']}.json"
    (period_dir / name).write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def receipts_dir(tmp_path):
    """Empty receipt directory with one folder per default period."""
    root = tmp_path / "receipts"
    for period in DEFAULT_PERIODS:
        (root / period).mkdir(parents=True)
    return root
