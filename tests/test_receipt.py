"""
Tests for reconciler/receipt.py and reconciler/receipt_source.py

Tests parsing of minting receipts and their discovery on disk.
"""

import pytest

from config.settings import DEFAULT_PERIODS
from reconciler.exceptions import (
    InputIntegrityError,
    ReceiptFormatError,
    ReceiptSourceError,
    UnknownPeriodError,
)
from reconciler.receipt import CloudUnits, MintingReceipt, ReceiptPeriod, ResourceRewards, Reward
from reconciler.receipt_source import iter_receipts, load_receipt

from conftest import make_receipt_dict, write_receipt


# ============================================================================
# PARSING
# ============================================================================

class TestMintingReceipt:
    """Tests for MintingReceipt.from_dict."""

    def test_full_record(self):
        receipt = MintingReceipt.from_dict(make_receipt_dict(node_id=9, reward_tft=55))
        assert receipt.node_id == 9
        assert receipt.cloud_units == CloudUnits(cu=1.0, su=2.0, nu=0.5)
        assert receipt.resource_utilization.ip == 1.0
        assert receipt.reward == Reward(musd=0, tft=55)
        assert receipt.farm_name == "test-farm"
        assert isinstance(receipt.period, ReceiptPeriod)

    def test_old_receipt_defaults(self):
        """Receipts without a farming policy get policy 1 and its schedule."""
        receipt = MintingReceipt.from_dict(make_receipt_dict(farming_policy_id=None))
        assert receipt.farming_policy_id == 1
        assert receipt.resource_rewards == ResourceRewards(cu=2400, su=1000, nu=30, ipv4=5)

    def test_declared_schedule(self):
        data = make_receipt_dict()
        data["resource_rewards"] = {"cu": 3000, "su": 1250, "nu": 38, "ipv4": 6}
        assert MintingReceipt.from_dict(data).resource_rewards.su == 1250

    def test_minimal_record(self):
        data = make_receipt_dict()
        for key in ("period", "twin_id", "farm_id", "farm_name", "stellar_payout_address",
                    "resource_units", "carbon_offset"):
            del data[key]
        receipt = MintingReceipt.from_dict(data)
        assert receipt.period is None
        assert receipt.carbon_offset == Reward()

    def test_integer_usage_accepted(self):
        receipt = MintingReceipt.from_dict(make_receipt_dict(cu=3))
        assert receipt.cloud_units.cu == 3.0

    @pytest.mark.parametrize("field", ["node_id", "measured_uptime", "tft_connection_price",
                                       "cloud_units", "resource_utilization", "reward", "node_type"])
    def test_missing_required_field(self, field):
        data = make_receipt_dict()
        del data[field]
        with pytest.raises(ReceiptFormatError) as excinfo:
            MintingReceipt.from_dict(data, source="52/1.json")
        assert excinfo.value.field == field
        assert "52/1.json" in str(excinfo.value)

    def test_missing_nested_field(self):
        data = make_receipt_dict()
        del data["cloud_units"]["su"]
        with pytest.raises(ReceiptFormatError) as excinfo:
            MintingReceipt.from_dict(data)
        assert excinfo.value.field == "cloud_units.su"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("node_id", "7"),
            ("node_id", True),
            ("node_id", -1),
            ("measured_uptime", 1.5),
            ("node_type", 1),
            ("reward", [1, 2]),
        ],
    )
    def test_wrong_types(self, field, value):
        data = make_receipt_dict()
        data[field] = value
        with pytest.raises(ReceiptFormatError):
            MintingReceipt.from_dict(data)

    @pytest.mark.parametrize("value", [-0.5, float("nan"), float("inf"), "1.0"])
    def test_invalid_usage(self, value):
        data = make_receipt_dict()
        data["cloud_units"]["cu"] = value
        with pytest.raises(ReceiptFormatError):
            MintingReceipt.from_dict(data)

    def test_not_an_object(self):
        with pytest.raises(InputIntegrityError):
            MintingReceipt.from_dict([1, 2, 3])


class TestValueTypes:
    """Arithmetic on receipt value types."""

    def test_reward_subtraction_saturates(self):
        assert Reward(musd=10, tft=5) - Reward(musd=3, tft=9) == Reward(musd=7, tft=0)

    def test_cloud_units_subtraction(self):
        assert CloudUnits(2.0, 3.0, 1.0) - CloudUnits(1.0, 1.5, 1.0) == CloudUnits(1.0, 1.5, 0.0)


# ============================================================================
# DISCOVERY
# ============================================================================

class TestReceiptSource:
    """Tests for iter_receipts and load_receipt."""

    def test_iterates_in_period_and_name_order(self, receipts_dir):
        write_receipt(receipts_dir, "53", make_receipt_dict(node_id=2), "b.json")
        write_receipt(receipts_dir, "53", make_receipt_dict(node_id=1), "a.json")
        write_receipt(receipts_dir, "52", make_receipt_dict(node_id=3))
        found = [(period, r.node_id) for period, r in iter_receipts(receipts_dir, DEFAULT_PERIODS)]
        assert found == [("52", 3), ("53", 1), ("53", 2)]

    def test_rejects_other_files(self, receipts_dir):
        """Every entry of a period directory must be a receipt."""
        write_receipt(receipts_dir, "52", make_receipt_dict(node_id=3))
        (receipts_dir / "52" / "notes.txt").write_text("not a receipt")
        with pytest.raises(ReceiptFormatError) as excinfo:
            list(iter_receipts(receipts_dir, DEFAULT_PERIODS))
        assert excinfo.value.source.endswith("notes.txt")

    def test_rejects_nested_directory(self, receipts_dir):
        (receipts_dir / "53" / "old.json").mkdir()
        with pytest.raises(ReceiptFormatError):
            list(iter_receipts(receipts_dir, DEFAULT_PERIODS))

    def test_missing_period_directory(self, tmp_path):
        (tmp_path / "52").mkdir()
        with pytest.raises(ReceiptSourceError):
            list(iter_receipts(tmp_path, ["52", "53"]))

    def test_invalid_json(self, receipts_dir):
        path = receipts_dir / "52" / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ReceiptFormatError) as excinfo:
            load_receipt(path)
        assert excinfo.value.source == str(path)

    def test_invalid_utf8(self, receipts_dir):
        path = receipts_dir / "52" / "bad.json"
        path.write_bytes(b"\xff\xfe{}")
        with pytest.raises(ReceiptFormatError) as excinfo:
            list(iter_receipts(receipts_dir, DEFAULT_PERIODS))
        assert excinfo.value.source == str(path)

    def test_usage_too_large_for_float(self, receipts_dir):
        data = make_receipt_dict(node_id=4)
        data["cloud_units"]["cu"] = 10 ** 400
        write_receipt(receipts_dir, "54", data)
        with pytest.raises(ReceiptFormatError) as excinfo:
            list(iter_receipts(receipts_dir, DEFAULT_PERIODS))
        assert excinfo.value.field == "cloud_units.cu"
        assert "4.json" in str(excinfo.value)

    def test_unlisted_period_directory(self, receipts_dir):
        """Receipts of a period outside the list are an error, not dropped."""
        write_receipt(receipts_dir, "52", make_receipt_dict(node_id=1))
        write_receipt(receipts_dir, "58", make_receipt_dict(node_id=1))
        with pytest.raises(UnknownPeriodError) as excinfo:
            list(iter_receipts(receipts_dir, DEFAULT_PERIODS))
        assert excinfo.value.period == "58"

    def test_unlisted_period_fails_before_loading(self, receipts_dir):
        write_receipt(receipts_dir, "57", make_receipt_dict(node_id=1))
        with pytest.raises(UnknownPeriodError):
            next(iter_receipts(receipts_dir, ["57"]))

    def test_skip_unlisted_periods(self, receipts_dir):
        write_receipt(receipts_dir, "52", make_receipt_dict(node_id=1))
        write_receipt(receipts_dir, "57", make_receipt_dict(node_id=1))
        found = [period for period, _ in iter_receipts(receipts_dir, ["57"], skip_unlisted=True)]
        assert found == ["57"]

    def test_hidden_directories_ignored(self, receipts_dir):
        (receipts_dir / ".cache").mkdir()
        write_receipt(receipts_dir, "52", make_receipt_dict(node_id=1))
        assert len(list(iter_receipts(receipts_dir, DEFAULT_PERIODS))) == 1
