"""Revenue snapshot persistence.

Snapshots are a cache of the last computed view, keyed by
``(district, date_bucket)``. Each upsert overwrites every figure on the row
(never increments), so repeating a computation is idempotent and concurrent
writers converge on whichever lands last.

``persist_report_snapshots`` is best-effort: failures are logged and
swallowed so they never affect the caller's response.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import REPORTING_SETTINGS
from app.models.db import RevenueSnapshot
from app.services.exceptions import SnapshotPersistenceError
from app.services.period_filter import PeriodWindow
from app.services.revenue_aggregator import RevenueReport, Totals
from app.utils import get_logger
from app.utils.time import utc_now

logger = get_logger(__name__)


def snapshot_values(totals: Totals) -> dict[str, float | int]:
    """Flatten Totals into RevenueSnapshot column values."""
    return totals.as_flat_dict()


def _find(session: Session, district: str, date_bucket: str) -> Optional[RevenueSnapshot]:
    return (
        session.query(RevenueSnapshot)
        .filter(RevenueSnapshot.district == district, RevenueSnapshot.date_bucket == date_bucket)
        .one_or_none()
    )


def upsert_snapshot(
    session: Session,
    district: str,
    date_bucket: str,
    totals: Totals,
    *,
    computed_at: Optional[datetime] = None,
) -> RevenueSnapshot:
    """Create or fully overwrite the snapshot row for ``(district, date_bucket)``.

    Commits on success. Raises SnapshotPersistenceError (after rolling back)
    on any database failure.
    """
    district = district.strip().upper()
    values = snapshot_values(totals)
    values["computed_at"] = computed_at or utc_now()
    try:
        snapshot = _find(session, district, date_bucket)
        if snapshot is None:
            snapshot = RevenueSnapshot(district=district, date_bucket=date_bucket, **values)
            session.add(snapshot)
            try:
                session.flush()
            except IntegrityError:
                # Lost an insert race on the unique key; overwrite the winner
                session.rollback()
                snapshot = _find(session, district, date_bucket)
                if snapshot is None:
                    raise
                for column, value in values.items():
                    setattr(snapshot, column, value)
        else:
            for column, value in values.items():
                setattr(snapshot, column, value)
        session.commit()
        return snapshot
    except SQLAlchemyError as exc:
        session.rollback()
        raise SnapshotPersistenceError(district, date_bucket, exc) from exc


def persist_report_snapshots(
    session: Session,
    report: RevenueReport,
    date_bucket: Optional[str] = None,
    *,
    computed_at: Optional[datetime] = None,
    district_filter: Optional[str] = None,
) -> int:
    """Upsert the overall row plus one row per district. Returns rows written.

    Totals scoped by ``district_filter`` are not overall figures, so the
    ``ALL`` row is only written for unfiltered reports. District rows hold
    lifetime figures and are written either way.

    Never raises: each failed row is logged and skipped.
    """
    bucket = date_bucket or report.window.date_bucket
    computed_at = computed_at or utc_now()
    overall_key = str(REPORTING_SETTINGS["overall_district_key"])
    filtered = bool(district_filter) and district_filter.strip().lower() != "all"

    rows: list[tuple[str, Totals]] = []
    if not filtered:
        rows.append((overall_key, report.totals))
    rows.extend((district.name, district.as_totals()) for district in report.districts)

    written = 0
    for district_name, totals in rows:
        try:
            upsert_snapshot(session, district_name, bucket, totals, computed_at=computed_at)
            written += 1
        except SnapshotPersistenceError as exc:
            logger.error(
                "Revenue snapshot upsert failed",
                district=exc.district,
                date_bucket=exc.date_bucket,
                error=str(exc.original_error or exc),
                exc_info=True,
            )
    logger.info("Revenue snapshots persisted", date_bucket=bucket, written=written, attempted=len(rows))
    return written


def fetch_revenue_history(
    session: Session,
    *,
    district: Optional[str] = None,
    window: Optional[PeriodWindow] = None,
    limit: Optional[int] = None,
) -> list[RevenueSnapshot]:
    """Persisted snapshots, newest first. Read failures degrade to an empty list."""
    limit = limit or int(REPORTING_SETTINGS["revenue_history_limit"])
    query = session.query(RevenueSnapshot)
    if district and district.strip().lower() != "all":
        query = query.filter(RevenueSnapshot.district == district.strip().upper())
    if window is not None and not window.is_unbounded:
        query = query.filter(RevenueSnapshot.computed_at >= window.start)
        if window.end is not None:
            query = query.filter(RevenueSnapshot.computed_at <= window.end)
    try:
        return query.order_by(RevenueSnapshot.computed_at.desc(), RevenueSnapshot.id.desc()).limit(limit).all()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Revenue history read failed", district=district, error=str(exc), exc_info=True)
        return []


__all__ = [
    "snapshot_values",
    "upsert_snapshot",
    "persist_report_snapshots",
    "fetch_revenue_history",
]
