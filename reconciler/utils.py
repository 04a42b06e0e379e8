"""
Utility functions for the Titan payout reconciler.
"""

import logging
from typing import Optional

from config.settings import PERCENTAGE_PRECISION, TFT_PRECISION


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def format_tft(amount: int) -> str:
    """
    Format an amount of TFT units.

    Args:
        amount: Non-negative amount in TFT units (1 TFT = 1e7 units)

    Returns:
        Formatted string with 7 decimals (e.g., "12.0500000")
    """
    return f"{amount // TFT_PRECISION}.{amount % TFT_PRECISION:07d}"


def format_diff_tft(amount: int) -> str:
    """
    Format a signed amount of TFT units.

    The sign is applied to the absolute value, so amounts between -1 and 0
    TFT keep their sign (e.g., -1 unit -> "-0.0000001").

    Args:
        amount: Amount in TFT units, possibly negative

    Returns:
        Formatted string with 7 decimals
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{format_tft(abs(amount))}"


def format_percentage(value: int) -> str:
    """
    Format a percentage with 3 decimal places.

    Args:
        value: Percentage scaled by PERCENTAGE_PRECISION (0-100000)

    Returns:
        Formatted string (e.g., "99.050%")
    """
    return f"{value // PERCENTAGE_PRECISION}.{value % PERCENTAGE_PRECISION:03d}%"
