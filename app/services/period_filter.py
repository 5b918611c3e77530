"""Period filter: resolve a named token or explicit date pair into a window.

Named tokens (`today`, `week`, `month`, `year`) resolve to an open-ended
window starting at 00:00 UTC of "now minus lookback". `all` (and any token
we don't recognise) resolves to the epoch. Explicit dates win over the token
whenever one is supplied.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.config import PERIOD_SETTINGS
from app.services.exceptions import InvalidPeriodError
from app.utils import get_logger
from app.utils.time import EPOCH, end_of_day, ensure_utc, start_of_day, subtract_months, utc_now

logger = get_logger(__name__)

ALL_PERIOD = "all"
CUSTOM_PERIOD = "custom"


@dataclass(frozen=True)
class PeriodWindow:
    start: datetime
    end: Optional[datetime] = None
    period: str = ALL_PERIOD

    def contains(self, moment: datetime) -> bool:
        """True when ``moment`` is inside the window (end=None means no upper bound)."""
        moment = ensure_utc(moment)
        if moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    @property
    def is_unbounded(self) -> bool:
        return self.start <= EPOCH and self.end is None

    @property
    def date_bucket(self) -> str:
        """Snapshot grouping label (`now` for all-time, the token for named periods)."""
        if self.period == ALL_PERIOD:
            return "now"
        if self.period == CUSTOM_PERIOD:
            end_label = self.end.date().isoformat() if self.end is not None else "now"
            return f"{self.start.date().isoformat()}_{end_label}"
        return self.period


def parse_iso_datetime(raw: str, *, end_of_range: bool = False) -> datetime:
    """Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    A bare date used as range end is widened to the end of that day so the
    whole day is included.
    """
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidPeriodError(f"Invalid ISO date: {raw!r}") from exc
    parsed = ensure_utc(parsed)
    if end_of_range and len(text) == 10:
        parsed = end_of_day(parsed)
    return parsed


def _named_start(period: str, now: datetime) -> datetime:
    lookback = PERIOD_SETTINGS[period]
    start = now - timedelta(days=int(lookback.get("days", 0)))
    months = int(lookback.get("months", 0))
    if months:
        start = subtract_months(start, months)
    return start_of_day(start)


def resolve_period(
    period: Optional[str] = ALL_PERIOD,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> PeriodWindow:
    """Resolve request parameters into an immutable PeriodWindow."""
    now = ensure_utc(now) if now is not None else utc_now()

    if start_date or end_date:
        start = parse_iso_datetime(start_date) if start_date else EPOCH
        end = parse_iso_datetime(end_date, end_of_range=True) if end_date else None
        if end is not None and end < start:
            raise InvalidPeriodError(f"endDate {end_date!r} is before startDate {start_date!r}")
        return PeriodWindow(start=start, end=end, period=CUSTOM_PERIOD)

    token = (period or ALL_PERIOD).strip().lower()
    if token == ALL_PERIOD:
        return PeriodWindow(start=EPOCH, period=ALL_PERIOD)
    if token not in PERIOD_SETTINGS:
        logger.warning("Unrecognised period token, defaulting to all", period=period)
        return PeriodWindow(start=EPOCH, period=ALL_PERIOD)
    return PeriodWindow(start=_named_start(token, now), period=token)


__all__ = ["PeriodWindow", "resolve_period", "parse_iso_datetime", "ALL_PERIOD", "CUSTOM_PERIOD"]
