"""
Errors raised while reconciling minting receipts.

Input-integrity errors mean the audit data itself is suspect; the run must
stop rather than produce a report from it.
"""

from typing import Optional


class ReconciliationError(Exception):
    """Base class for all reconciliation failures."""


class InputIntegrityError(ReconciliationError):
    """The receipt set is corrupted or inconsistent."""


class ReceiptFormatError(InputIntegrityError):
    """A receipt record is missing a field or has a field of the wrong type."""

    def __init__(self, message: str, source: Optional[str] = None, field: Optional[str] = None):
        self.source = source
        self.field = field
        location = f"{source}: " if source else ""
        super().__init__(f"{location}{message}")


class DuplicateReceiptError(InputIntegrityError):
    """More than one receipt for the same node in the same period."""

    def __init__(self, node_id: int, period: str):
        self.node_id = node_id
        self.period = period
        super().__init__(f"Duplicate receipt for node {node_id} in period {period}")


class UnknownPeriodError(InputIntegrityError):
    """A period identifier outside the configured period set."""

    def __init__(self, period: str):
        self.period = period
        super().__init__(f"Unrecognized period identifier: {period!r}")


class ReceiptSourceError(InputIntegrityError):
    """The receipt directory layout does not match the configured periods."""


class RewardCalculationError(ReconciliationError):
    """Expected reward cannot be computed for a receipt."""

    def __init__(self, message: str, node_id: int, period: Optional[str] = None):
        self.node_id = node_id
        self.period = period
        where = f"node {node_id}" + (f" in period {period}" if period is not None else "")
        super().__init__(f"{message} ({where})")
