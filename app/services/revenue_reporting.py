"""Revenue reporting boundary.

Thin orchestration: resolve the period, read both shop sources, aggregate,
persist snapshots (best-effort) and shape the response. Any failure turns into
the zero-filled payload so the dashboard can always render its cards.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.config import REPORTING_SETTINGS
from app.models.db import RevenueSnapshot
from app.models.db.enums import ShopSourceKind
from app.models.schemas.revenue import (
    DistrictAggregateRead,
    RevenueReportResponse,
    RevenueSnapshotRead,
    RevenueTotalsRead,
)
from app.services.exceptions import DataStoreUnavailable, InvalidPeriodError
from app.services.period_filter import CUSTOM_PERIOD, PeriodWindow, resolve_period
from app.services.plan_pricing import PlanPricingTable, default_pricing_table
from app.services.revenue_aggregator import aggregate_revenue, compute_daily_totals, filter_districts
from app.services.shop_adapter import AdaptedBatch, adapt_many
from app.services.shop_sources import AdminShopSource, AgentShopSource
from app.services.snapshot_persister import fetch_revenue_history, persist_report_snapshots, upsert_snapshot
from app.utils import get_logger, log_timing
from app.utils.time import ensure_utc, start_of_day, utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class RevenueQuery:
    district: Optional[str] = None
    period: Optional[str] = "all"
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @property
    def district_filter(self) -> Optional[str]:
        if not self.district or self.district.strip().lower() == "all":
            return None
        return self.district.strip()


def load_shop_records(
    session: Session,
    *,
    district: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[AdaptedBatch, AdaptedBatch]:
    """Read and adapt both shop collections. Raises DataStoreUnavailable."""
    now = now or utc_now()
    # Same session for both reads; sessions are not shared across threads.
    admin_raw = AdminShopSource(session).query(district=district)
    agent_raw = AgentShopSource(session).query(district=district)
    return (
        adapt_many(admin_raw, ShopSourceKind.ADMIN, now=now),
        adapt_many(agent_raw, ShopSourceKind.AGENT, now=now),
    )


def build_revenue_report(
    session: Session,
    query: RevenueQuery,
    *,
    pricing: Optional[PlanPricingTable] = None,
    now: Optional[datetime] = None,
    persist: Optional[bool] = None,
) -> RevenueReportResponse:
    """Compute the full revenue report for one request."""
    started = time.time()
    now = ensure_utc(now) if now is not None else utc_now()
    pricing = pricing or default_pricing_table()
    persist = bool(REPORTING_SETTINGS["persist_snapshots"]) if persist is None else persist
    district_filter = query.district_filter

    try:
        window = resolve_period(query.period, query.start_date, query.end_date, now=now)
        admin_batch, agent_batch = load_shop_records(session, now=now)
        report = aggregate_revenue(
            admin_batch.records,
            agent_batch.records,
            window,
            pricing,
            district_filter=district_filter,
            now=now,
        )
    except InvalidPeriodError as exc:
        logger.warning("Revenue report rejected: invalid period", error=str(exc))
        return RevenueReportResponse.failure("Invalid date range", str(exc))
    except DataStoreUnavailable as exc:
        logger.error("Revenue report failed: shop data unavailable", source=exc.source, error=str(exc))
        return RevenueReportResponse.failure("Database connection failed", str(exc))
    except Exception as exc:
        logger.error("Revenue report failed", error=str(exc), error_type=type(exc).__name__, exc_info=True)
        return RevenueReportResponse.failure("Internal server error", str(exc) or type(exc).__name__)

    if persist:
        persist_report_snapshots(session, report, computed_at=now, district_filter=district_filter)

    revenues = fetch_revenue_history(session, district=district_filter, window=window)

    districts = [DistrictAggregateRead.from_aggregate(d) for d in report.districts]
    filtered = [DistrictAggregateRead.from_aggregate(d) for d in filter_districts(report.districts, district_filter)]

    log_timing(
        "build_revenue_report",
        started,
        period=window.period,
        district=district_filter,
        admin_shops=len(admin_batch.records),
        agent_shops=len(agent_batch.records),
        skipped_records=admin_batch.skipped + agent_batch.skipped + report.skipped_records,
    )

    return RevenueReportResponse(
        success=True,
        revenues=[RevenueSnapshotRead.model_validate(r) for r in revenues],
        totals=RevenueTotalsRead.from_totals(report.totals),
        districts=districts,
        filtered_districts=filtered,
        count=len(revenues),
    )


def day_window(target_day: date) -> PeriodWindow:
    start = ensure_utc(datetime(target_day.year, target_day.month, target_day.day))
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return PeriodWindow(start=start, end=end, period=CUSTOM_PERIOD)


def recalculate_district_day(
    session: Session,
    district: str,
    target_day: Optional[date] = None,
    *,
    pricing: Optional[PlanPricingTable] = None,
    now: Optional[datetime] = None,
) -> RevenueSnapshot:
    """Recompute one district's figures for one UTC day and upsert its snapshot.

    Raises DataStoreUnavailable / SnapshotPersistenceError; the caller decides
    how to report them.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    pricing = pricing or default_pricing_table()
    target_day = target_day or start_of_day(now).date()
    district_key = district.strip().upper()

    admin_batch, agent_batch = load_shop_records(session, district=district_key, now=now)
    totals, skipped = compute_daily_totals(
        [*admin_batch.records, *agent_batch.records],
        day_window(target_day),
        pricing,
        now=now,
    )
    snapshot = upsert_snapshot(session, district_key, target_day.isoformat(), totals, computed_at=now)
    logger.info(
        "District revenue recalculated",
        district=district_key,
        day=target_day.isoformat(),
        total_revenue=totals.total_revenue,
        shops=totals.total_count,
        skipped_records=len(skipped) + admin_batch.skipped + agent_batch.skipped,
    )
    return snapshot


__all__ = [
    "RevenueQuery",
    "load_shop_records",
    "build_revenue_report",
    "day_window",
    "recalculate_district_day",
]
