from datetime import datetime, timezone

import pytest

from app.services.exceptions import InvalidPeriodError
from app.services.period_filter import PeriodWindow, resolve_period
from app.utils.time import EPOCH

NOW = datetime(2024, 3, 31, 15, 30, tzinfo=timezone.utc)


def test_all_and_missing_period_resolve_to_epoch():
    assert resolve_period("all", now=NOW).start == EPOCH
    assert resolve_period(None, now=NOW).start == EPOCH
    assert resolve_period("all", now=NOW).is_unbounded


def test_unknown_token_falls_back_to_all():
    window = resolve_period("fortnight", now=NOW)
    assert window.start == EPOCH
    assert window.period == "all"


def test_named_tokens_start_at_midnight_utc():
    assert resolve_period("today", now=NOW).start == datetime(2024, 3, 31, tzinfo=timezone.utc)
    assert resolve_period("week", now=NOW).start == datetime(2024, 3, 24, tzinfo=timezone.utc)
    # Mar 31 minus one month clamps to the end of February (leap year)
    assert resolve_period("month", now=NOW).start == datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert resolve_period("year", now=NOW).start == datetime(2023, 3, 31, tzinfo=timezone.utc)
    assert resolve_period("TODAY", now=NOW).period == "today"


def test_named_windows_have_no_upper_bound():
    window = resolve_period("week", now=NOW)
    assert window.end is None
    assert window.contains(datetime(2030, 1, 1, tzinfo=timezone.utc))


def test_explicit_dates_take_precedence_over_token():
    window = resolve_period("today", "2024-01-01", "2024-01-31", now=NOW)
    assert window.period == "custom"
    assert window.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    # date-only end covers the whole day
    assert window.contains(datetime(2024, 1, 31, 23, 0, tzinfo=timezone.utc))
    assert not window.contains(datetime(2024, 2, 1, 0, 0, 1, tzinfo=timezone.utc))


def test_only_start_date_is_open_ended():
    window = resolve_period(None, "2024-02-01", None, now=NOW)
    assert window.end is None
    assert not window.contains(datetime(2024, 1, 31, tzinfo=timezone.utc))
    assert window.contains(NOW)


def test_only_end_date_starts_at_epoch():
    window = resolve_period(None, None, "2024-02-01T00:00:00Z", now=NOW)
    assert window.start == EPOCH
    assert window.end == datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("start,end", [("not-a-date", None), ("2024-02-10", "2024-02-01")])
def test_invalid_dates_raise(start, end):
    with pytest.raises(InvalidPeriodError):
        resolve_period("all", start, end, now=NOW)


def test_date_bucket_labels():
    assert resolve_period("all", now=NOW).date_bucket == "now"
    assert resolve_period("month", now=NOW).date_bucket == "month"
    assert resolve_period(None, "2024-01-01", "2024-01-31", now=NOW).date_bucket == "2024-01-01_2024-01-31"
    assert PeriodWindow(start=datetime(2024, 1, 1, tzinfo=timezone.utc), period="custom").date_bucket == "2024-01-01_now"


def test_contains_treats_naive_datetimes_as_utc():
    window = resolve_period("today", now=NOW)
    assert window.contains(datetime(2024, 3, 31, 0, 0))
    assert not window.contains(datetime(2024, 3, 30, 23, 59))
