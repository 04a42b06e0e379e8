"""
Minting receipt model.

A receipt is the authoritative record of one node's measured usage and paid
reward for one period. Receipts are parsed once from their JSON form and
never mutated afterwards.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from config.settings import DEFAULT_FARMING_POLICY_ID, DEFAULT_RESOURCE_REWARDS

from .exceptions import ReceiptFormatError


@dataclass(frozen=True)
class ResourceRewards:
    """Per-unit reward rates of a farming policy, in mUSD."""

    cu: int
    su: int
    nu: int
    ipv4: int

    @classmethod
    def default(cls) -> "ResourceRewards":
        """Rates of the initial farming policy."""
        return cls(**DEFAULT_RESOURCE_REWARDS)


@dataclass(frozen=True)
class CloudUnits:
    """Cloud units for a node."""

    cu: float
    su: float
    nu: float

    def __sub__(self, other: "CloudUnits") -> "CloudUnits":
        return CloudUnits(
            cu=self.cu - other.cu,
            su=self.su - other.su,
            nu=self.nu - other.nu,
        )


@dataclass(frozen=True)
class ResourceUnits:
    """Resource units as reported by the node."""

    cru: float = 0.0
    mru: float = 0.0
    hru: float = 0.0
    sru: float = 0.0


@dataclass(frozen=True)
class ResourceUtilization:
    """Utilization of resources on a node, measured through capacity reports."""

    cru: float
    mru: float
    hru: float
    sru: float
    ip: float


@dataclass(frozen=True)
class Reward:
    """Payout for a node. `tft` is in TFT units (1 TFT -> 1e7 units)."""

    musd: int = 0
    tft: int = 0

    def __sub__(self, other: "Reward") -> "Reward":
        # Saturate at 0
        return Reward(
            musd=self.musd - other.musd if self.musd >= other.musd else 0,
            tft=self.tft - other.tft if self.tft >= other.tft else 0,
        )


@dataclass(frozen=True)
class ReceiptPeriod:
    """Start and end of the minting period a receipt covers (unix seconds)."""

    start: int
    end: int


@dataclass(frozen=True)
class MintingReceipt:
    """A receipt stored to validate the payout of a node for one period."""

    node_id: int
    measured_uptime: int
    tft_connection_price: int  # mUSD per TFT
    cloud_units: CloudUnits
    resource_utilization: ResourceUtilization
    reward: Reward
    node_type: str  # "CERTIFIED" or "DIY"
    farming_policy_id: int = DEFAULT_FARMING_POLICY_ID
    resource_rewards: ResourceRewards = field(default_factory=ResourceRewards.default)
    period: Optional[ReceiptPeriod] = None
    twin_id: int = 0
    farm_id: int = 0
    farm_name: str = ""
    stellar_payout_address: str = ""
    resource_units: ResourceUnits = field(default_factory=ResourceUnits)
    carbon_offset: Reward = field(default_factory=Reward)

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> "MintingReceipt":
        """
        Build a receipt from its decoded JSON form.

        Args:
            data: Decoded JSON object
            source: Where the record came from, used in error messages

        Returns:
            MintingReceipt

        Raises:
            ReceiptFormatError: on a missing required field or a wrong type
        """
        parser = _FieldParser(source)
        if not isinstance(data, dict):
            raise ReceiptFormatError("receipt must be a JSON object", source)

        cloud_units = parser.obj(data, "cloud_units")
        utilization = parser.obj(data, "resource_utilization")
        reward = parser.obj(data, "reward")

        optional = {}
        if "period" in data:
            period = parser.obj(data, "period")
            optional["period"] = ReceiptPeriod(
                start=parser.integer(period, "start", "period", signed=True),
                end=parser.integer(period, "end", "period", signed=True),
            )
        for name in ("twin_id", "farm_id"):
            if name in data:
                optional[name] = parser.integer(data, name)
        for name in ("farm_name", "stellar_payout_address"):
            if name in data:
                optional[name] = parser.string(data, name)
        if "resource_units" in data:
            units = parser.obj(data, "resource_units")
            optional["resource_units"] = ResourceUnits(
                **{k: parser.number(units, k, "resource_units") for k in ("cru", "mru", "hru", "sru")}
            )
        if "carbon_offset" in data:
            offset = parser.obj(data, "carbon_offset")
            optional["carbon_offset"] = Reward(
                musd=parser.integer(offset, "musd", "carbon_offset"),
                tft=parser.integer(offset, "tft", "carbon_offset"),
            )
        # Old receipts predate farming policies and their schedules
        if "farming_policy_id" in data:
            optional["farming_policy_id"] = parser.integer(data, "farming_policy_id")
        if "resource_rewards" in data:
            rates = parser.obj(data, "resource_rewards")
            optional["resource_rewards"] = ResourceRewards(
                **{k: parser.integer(rates, k, "resource_rewards") for k in ("cu", "su", "nu", "ipv4")}
            )

        return cls(
            node_id=parser.integer(data, "node_id"),
            measured_uptime=parser.integer(data, "measured_uptime"),
            tft_connection_price=parser.integer(data, "tft_connection_price"),
            cloud_units=CloudUnits(
                cu=parser.number(cloud_units, "cu", "cloud_units"),
                su=parser.number(cloud_units, "su", "cloud_units"),
                nu=parser.number(cloud_units, "nu", "cloud_units"),
            ),
            resource_utilization=ResourceUtilization(
                **{
                    k: parser.number(utilization, k, "resource_utilization")
                    for k in ("cru", "mru", "hru", "sru", "ip")
                }
            ),
            reward=Reward(
                musd=parser.integer(reward, "musd", "reward"),
                tft=parser.integer(reward, "tft", "reward"),
            ),
            node_type=parser.string(data, "node_type"),
            **optional,
        )


class _FieldParser:
    """Typed field access on decoded JSON, raising ReceiptFormatError."""

    def __init__(self, source: Optional[str]):
        self.source = source

    def _get(self, data: Dict[str, Any], name: str, parent: Optional[str]) -> Tuple[str, Any]:
        path = f"{parent}.{name}" if parent else name
        if name not in data:
            raise ReceiptFormatError(f"missing field {path!r}", self.source, path)
        return path, data[name]

    def obj(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        path, value = self._get(data, name, None)
        if not isinstance(value, dict):
            raise ReceiptFormatError(f"field {path!r} must be an object", self.source, path)
        return value

    def integer(
        self, data: Dict[str, Any], name: str, parent: Optional[str] = None, signed: bool = False
    ) -> int:
        path, value = self._get(data, name, parent)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ReceiptFormatError(f"field {path!r} must be an integer", self.source, path)
        if value < 0 and not signed:
            raise ReceiptFormatError(f"field {path!r} must not be negative", self.source, path)
        return value

    def number(self, data: Dict[str, Any], name: str, parent: Optional[str] = None) -> float:
        path, value = self._get(data, name, parent)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ReceiptFormatError(f"field {path!r} must be a number", self.source, path)
        try:
            value = float(value)
        except OverflowError:
            raise ReceiptFormatError(f"field {path!r} is too large", self.source, path) from None
        if not math.isfinite(value) or value < 0:
            raise ReceiptFormatError(
                f"field {path!r} must be a finite, non-negative number", self.source, path
            )
        return value

    def string(self, data: Dict[str, Any], name: str, parent: Optional[str] = None) -> str:
        path, value = self._get(data, name, parent)
        if not isinstance(value, str):
            raise ReceiptFormatError(f"field {path!r} must be a string", self.source, path)
        return value
