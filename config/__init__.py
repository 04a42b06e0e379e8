"""Configuration compatibility layer and shared exports."""

import logging
import os
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .settings import DEFAULT_PERIODS, RECEIPTS_DIR

load_dotenv()


def parse_periods(value: str) -> Tuple[str, ...]:
	return tuple(part.strip() for part in value.split(",") if part.strip())


class Config:
	RECEIPTS_DIR = RECEIPTS_DIR
	PERIODS = parse_periods(os.getenv("RECONCILE_PERIODS", ",".join(DEFAULT_PERIODS)))

	LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
	LOG_FILE = os.getenv("LOG_FILE", "")

	@classmethod
	def validate(cls, periods: Optional[Tuple[str, ...]] = None, log_level: Optional[str] = None) -> List[str]:
		"""
		Validate configuration and return list of errors.

		Returns:
			List of error messages, empty if valid
		"""
		periods = cls.PERIODS if periods is None else periods
		log_level = cls.LOG_LEVEL if log_level is None else log_level
		errors = []

		if not periods:
			errors.append("RECONCILE_PERIODS is empty")
		elif len(set(periods)) != len(periods):
			errors.append(f"RECONCILE_PERIODS contains duplicates: {','.join(periods)}")

		if not isinstance(logging.getLevelName(log_level.upper()), int):
			errors.append(f"LOG_LEVEL {log_level!r} is not a logging level")

		return errors


__all__ = ["Config", "parse_periods"]
