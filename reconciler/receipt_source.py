"""
Receipt discovery.

Receipts are stored one JSON file per node, in one directory per period:

    <receipts_dir>/52/<anything>.json
    <receipts_dir>/53/<anything>.json
    ...

Every entry of a period directory must be a receipt, and every period
directory must belong to a configured period.
"""

import json
import logging
from pathlib import Path
from typing import Iterator, Sequence, Tuple, Union

from .exceptions import ReceiptFormatError, ReceiptSourceError, UnknownPeriodError
from .receipt import MintingReceipt

logger = logging.getLogger(__name__)


def load_receipt(path: Path) -> MintingReceipt:
    """
    Parse a single receipt file.

    Args:
        path: Path to a JSON receipt

    Returns:
        Parsed MintingReceipt
    """
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise ReceiptFormatError(f"invalid JSON: {e}", str(path)) from e
    return MintingReceipt.from_dict(data, source=str(path))


def check_period_directories(
    receipts_dir: Union[str, Path], periods: Sequence[str]
) -> None:
    """
    Fail on period directories that are not configured.

    Hidden directories are not period directories.

    Raises:
        UnknownPeriodError: for the first unlisted directory, in name order
    """
    root = Path(receipts_dir)
    if not root.is_dir():
        raise ReceiptSourceError(f"Receipt directory not found: {root}")
    known = set(periods)
    for entry in sorted(root.iterdir()):
        if entry.is_dir() and not entry.name.startswith(".") and entry.name not in known:
            raise UnknownPeriodError(entry.name)


def iter_receipts(
    receipts_dir: Union[str, Path],
    periods: Sequence[str],
    skip_unlisted: bool = False,
) -> Iterator[Tuple[str, MintingReceipt]]:
    """
    Yield (period, receipt) for every receipt of the given periods.

    Periods are walked in the given order and files in name order, so two
    runs over the same directory yield the same sequence.

    Args:
        receipts_dir: Root directory holding one folder per period
        periods: Period identifiers to scan
        skip_unlisted: Ignore period directories outside `periods`
            instead of failing on them

    Yields:
        Tuples of (period identifier, MintingReceipt)

    Raises:
        UnknownPeriodError: for a period directory outside `periods`
        ReceiptSourceError: for a missing period directory
        ReceiptFormatError: for an entry that is not a valid JSON receipt
    """
    root = Path(receipts_dir)
    if skip_unlisted:
        logger.warning("Ignoring period directories outside the configured periods")
    else:
        check_period_directories(root, periods)

    for period in periods:
        period_dir = root / period
        if not period_dir.is_dir():
            raise ReceiptSourceError(f"Missing receipt directory for period {period}: {period_dir}")

        count = 0
        for path in sorted(period_dir.iterdir()):
            if not path.is_file() or path.suffix != ".json":
                raise ReceiptFormatError("not a JSON receipt file", str(path))
            yield period, load_receipt(path)
            count += 1
        logger.info(f"Loaded {count} receipts for period {period}")
