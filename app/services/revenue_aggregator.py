"""Revenue aggregation engine.

Pure functions of (records, window, pricing table, now): no database access,
so the whole computation can be exercised without a data store.

Rules
-----
* A record contributes revenue when it is paid, not expired (no expiry date
  or expiry >= now) and, for the top-level totals only, its effective date is
  inside the period window.
* Per-plan counts ignore the window entirely.
* District figures are always lifetime (validity rule without the window);
  the district list is a stable leaderboard independent of the period.
* Agent commission is taken as stored on the record, never derived.
* One malformed record is logged and skipped, never fatal.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from itertools import chain
from typing import Any, Iterable, Optional, Sequence

from app.config import DISTRICT_SETTINGS
from app.models.db.enums import PlanType
from app.services.district_normalizer import matches_district_filter, normalize_district
from app.services.exceptions import ShopRecordError
from app.services.period_filter import PeriodWindow
from app.services.plan_pricing import PlanPricingTable
from app.services.shop_adapter import ShopRecord
from app.utils import get_logger
from app.utils.time import ensure_utc, utc_now

logger = get_logger(__name__)

# Errors that mark a single record as unusable
RECORD_ERRORS = (ShopRecordError, ArithmeticError, TypeError, ValueError)

# (source, id) identifies a record across the totals and district passes
RecordKey = tuple[str, Any]


def record_key(record: ShopRecord) -> RecordKey:
    return (record.source.value, record.id if record.id is not None else id(record))


def _zero_revenue() -> dict[PlanType, float]:
    return {plan: 0.0 for plan in PlanType}


def _zero_counts() -> dict[PlanType, int]:
    return {plan: 0 for plan in PlanType}


@dataclass
class Totals:
    per_plan_revenue: dict[PlanType, float] = field(default_factory=_zero_revenue)
    per_plan_count: dict[PlanType, int] = field(default_factory=_zero_counts)
    total_agent_commission: float = 0.0
    # Populated outside this engine; kept out of total_revenue.
    advertisement_revenue: float = 0.0

    @property
    def total_revenue(self) -> float:
        return sum(self.per_plan_revenue.values())

    @property
    def net_revenue(self) -> float:
        return self.total_revenue - self.total_agent_commission

    @property
    def total_count(self) -> int:
        return sum(self.per_plan_count.values())

    def as_flat_dict(self) -> dict[str, float | int]:
        """snake_case flat form (``basic_plan_revenue``, ``basic_plan_count``, ...)."""
        flat: dict[str, float | int] = {}
        for plan in PlanType:
            flat[f"{plan.field_prefix}_plan_revenue"] = self.per_plan_revenue.get(plan, 0.0)
        flat["advertisement_revenue"] = self.advertisement_revenue
        flat["total_agent_commission"] = self.total_agent_commission
        flat["total_revenue"] = self.total_revenue
        flat["net_revenue"] = self.net_revenue
        for plan in PlanType:
            flat[f"{plan.field_prefix}_plan_count"] = self.per_plan_count.get(plan, 0)
        return flat


@dataclass
class DistrictAggregate:
    name: str
    state: str = field(default_factory=lambda: str(DISTRICT_SETTINGS["default_state"]))
    area: str = ""
    per_plan_count: dict[PlanType, int] = field(default_factory=_zero_counts)
    per_plan_revenue: dict[PlanType, float] = field(default_factory=_zero_revenue)
    total_agent_commission: float = 0.0
    target_shops: int = field(default_factory=lambda: int(DISTRICT_SETTINGS["target_shops"]))

    @property
    def total_shops(self) -> int:
        return sum(self.per_plan_count.values())

    @property
    def total_revenue(self) -> float:
        return sum(self.per_plan_revenue.values())

    @property
    def net_revenue(self) -> float:
        return self.total_revenue - self.total_agent_commission

    @property
    def progress_percentage(self) -> float:
        if self.target_shops <= 0:
            return 0.0
        pct = round(self.total_shops / self.target_shops * 100, int(DISTRICT_SETTINGS["progress_decimals"]))
        return min(100.0, pct)

    def as_totals(self) -> Totals:
        """District figures in Totals form (used for snapshot rows)."""
        return Totals(
            per_plan_revenue=dict(self.per_plan_revenue),
            per_plan_count=dict(self.per_plan_count),
            total_agent_commission=self.total_agent_commission,
        )


@dataclass
class RevenueReport:
    totals: Totals
    districts: list[DistrictAggregate]
    window: PeriodWindow
    skipped_records: int = 0


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def is_valid_for_revenue(record: ShopRecord, now: datetime) -> bool:
    """Paid and not expired. The period window is applied separately."""
    if not record.is_paid:
        return False
    if record.payment_expiry_date is not None and ensure_utc(record.payment_expiry_date) < now:
        return False
    return True


def _log_skip(record: ShopRecord, stage: str, exc: Exception) -> None:
    logger.warning(
        "Skipping shop record during aggregation",
        stage=stage,
        record_id=record.id,
        source=record.source.value,
        error=str(exc),
        error_type=type(exc).__name__,
    )


# ---------------------------------------------------------------------------
# Totals (period scoped revenue, period independent counts)
# ---------------------------------------------------------------------------

def aggregate_totals(
    admin_records: Iterable[ShopRecord],
    agent_records: Iterable[ShopRecord],
    window: PeriodWindow,
    pricing: PlanPricingTable,
    *,
    district_filter: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[Totals, set[RecordKey]]:
    """Return (totals, keys of the records skipped as malformed)."""
    now = ensure_utc(now) if now is not None else utc_now()
    totals = Totals()
    skipped: set[RecordKey] = set()
    for record in chain(admin_records, agent_records):
        try:
            if district_filter and not matches_district_filter(record, district_filter):
                continue
            amount = pricing.effective_amount(record.plan_type, record.plan_amount)
            counts_for_revenue = is_valid_for_revenue(record, now) and window.contains(record.effective_date)
            commission = float(record.agent_commission or 0.0)
        except RECORD_ERRORS as exc:
            skipped.add(record_key(record))
            _log_skip(record, "totals", exc)
            continue

        totals.per_plan_count[record.plan_type] += 1
        if counts_for_revenue:
            totals.per_plan_revenue[record.plan_type] += amount
            totals.total_agent_commission += commission
    return totals, skipped


# ---------------------------------------------------------------------------
# District breakdown (always lifetime)
# ---------------------------------------------------------------------------

def aggregate_districts(
    records: Iterable[ShopRecord],
    pricing: PlanPricingTable,
    *,
    now: Optional[datetime] = None,
) -> tuple[list[DistrictAggregate], set[RecordKey]]:
    """Group by canonical district; sorted by total revenue desc, ties in encounter order."""
    now = ensure_utc(now) if now is not None else utc_now()
    by_name: dict[str, DistrictAggregate] = {}
    skipped: set[RecordKey] = set()
    for record in records:
        try:
            name = normalize_district(record)
            if name is None:
                continue
            amount = pricing.effective_amount(record.plan_type, record.plan_amount)
            valid = is_valid_for_revenue(record, now)
            commission = float(record.agent_commission or 0.0)
        except RECORD_ERRORS as exc:
            skipped.add(record_key(record))
            _log_skip(record, "districts", exc)
            continue

        district = by_name.get(name)
        if district is None:
            district = DistrictAggregate(name=name)
            by_name[name] = district
        area = (record.area_raw or "").strip()
        if area and not district.area:
            district.area = area

        district.per_plan_count[record.plan_type] += 1
        if valid:
            district.per_plan_revenue[record.plan_type] += amount
            district.total_agent_commission += commission

    # sorted() is stable: equal revenue keeps first-seen order
    ordered = sorted(by_name.values(), key=lambda d: d.total_revenue, reverse=True)
    return ordered, skipped


def filter_districts(districts: Sequence[DistrictAggregate], district_filter: Optional[str]) -> list[DistrictAggregate]:
    """Districts whose name or area equals the filter; everything for `all`/empty."""
    if not district_filter or district_filter.strip().lower() == "all":
        return list(districts)
    wanted = district_filter.strip().upper()
    return [d for d in districts if d.name.upper() == wanted or (d.area and d.area.upper() == wanted)]


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def aggregate_revenue(
    admin_records: Sequence[ShopRecord],
    agent_records: Sequence[ShopRecord],
    window: PeriodWindow,
    pricing: PlanPricingTable,
    *,
    district_filter: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RevenueReport:
    """Compute period-scoped totals and the lifetime district breakdown."""
    now = ensure_utc(now) if now is not None else utc_now()
    if district_filter and district_filter.strip().lower() == "all":
        district_filter = None

    totals, skipped_totals = aggregate_totals(
        admin_records, agent_records, window, pricing, district_filter=district_filter, now=now
    )
    districts, skipped_districts = aggregate_districts(chain(admin_records, agent_records), pricing, now=now)

    logger.debug(
        "Revenue aggregated",
        period=window.period,
        district_filter=district_filter,
        total_revenue=totals.total_revenue,
        districts=len(districts),
    )
    return RevenueReport(
        totals=totals,
        districts=districts,
        window=window,
        skipped_records=len(skipped_totals | skipped_districts),
    )


def compute_daily_totals(
    records: Iterable[ShopRecord],
    day_window: PeriodWindow,
    pricing: PlanPricingTable,
    *,
    now: Optional[datetime] = None,
) -> tuple[Totals, set[RecordKey]]:
    """Totals for records whose effective date falls inside ``day_window``.

    Unlike the report totals, counts here are scoped to the day too: only the
    day's records are considered at all.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    on_day: list[ShopRecord] = []
    skipped: set[RecordKey] = set()
    for record in records:
        try:
            if day_window.contains(record.effective_date):
                on_day.append(record)
        except RECORD_ERRORS as exc:
            skipped.add(record_key(record))
            _log_skip(record, "daily", exc)
    all_time = PeriodWindow(start=day_window.start)
    totals, skipped_totals = aggregate_totals(on_day, (), all_time, pricing, now=now)
    return totals, skipped | skipped_totals


__all__ = [
    "Totals",
    "DistrictAggregate",
    "RevenueReport",
    "RecordKey",
    "record_key",
    "is_valid_for_revenue",
    "aggregate_totals",
    "aggregate_districts",
    "filter_districts",
    "aggregate_revenue",
    "compute_daily_totals",
]
