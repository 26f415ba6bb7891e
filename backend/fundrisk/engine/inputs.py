"""Input resolution for engine computations.

Missing numeric inputs are replaced by documented defaults and out-of-range
values are clamped. Every substitution is logged at DEBUG and recorded so the
result can report which fields were not taken from the caller.
"""
from __future__ import annotations

import calendar
import logging
import math
from datetime import date

from fundrisk.models.parameters import RiskParameters
from fundrisk.parameters.registry import get_parameters

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def add_months(start: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's end."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def resolve_params(params: RiskParameters | None) -> RiskParameters:
    return params if params is not None else get_parameters()


class InputResolver:
    """Tracks defaults applied while reading one record set."""

    def __init__(self, context: str) -> None:
        self.context = context
        self.defaults_applied: list[str] = []

    def _record(self, entry: str) -> None:
        if entry not in self.defaults_applied:
            self.defaults_applied.append(entry)

    def missing(self, field: str) -> None:
        """Record a field that was absent without substituting a value."""
        logger.debug("%s: %s missing", self.context, field)
        self._record(field)

    def number(self, field: str, value: float | None, default: float) -> float:
        if value is None:
            logger.debug("%s: %s missing, using default %s", self.context, field, default)
            self._record(field)
            return float(default)
        return float(value)

    def optional(self, field: str, value: float | None) -> float | None:
        """Return the value or None, recording the field as missing."""
        if value is None:
            self.missing(field)
            return None
        return float(value)

    def bounded(
        self,
        field: str,
        value: float | None,
        default: float,
        low: float,
        high: float,
    ) -> float:
        resolved = self.number(field, value, default)
        clamped = clamp(resolved, low, high)
        if clamped != resolved:
            logger.debug("%s: %s=%s clamped to %s", self.context, field, resolved, clamped)
            self._record(f"{field}:clamped")
        return clamped

    def non_negative(self, field: str, value: float | None, default: float = 0.0) -> float:
        resolved = self.number(field, value, default)
        if resolved < 0:
            logger.debug("%s: %s=%s clamped to 0", self.context, field, resolved)
            self._record(f"{field}:clamped")
            return 0.0
        return resolved
