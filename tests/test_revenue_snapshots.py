from datetime import datetime, timedelta, timezone

from app.models.db import RevenueSnapshot
from app.models.db.enums import PlanType
from app.services import snapshot_persister
from app.services.exceptions import SnapshotPersistenceError
from app.services.period_filter import PeriodWindow, resolve_period
from app.services.revenue_aggregator import DistrictAggregate, RevenueReport, Totals
from app.services.snapshot_persister import fetch_revenue_history, persist_report_snapshots, upsert_snapshot

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_totals(basic_revenue: float, basic_count: int, commission: float = 0.0) -> Totals:
    totals = Totals(total_agent_commission=commission)
    totals.per_plan_revenue[PlanType.BASIC] = basic_revenue
    totals.per_plan_count[PlanType.BASIC] = basic_count
    return totals


def test_upsert_is_idempotent(db_session):
    totals = make_totals(300, 3, commission=50)
    upsert_snapshot(db_session, "patna", "now", totals, computed_at=NOW)
    upsert_snapshot(db_session, "PATNA", "now", totals, computed_at=NOW)

    rows = db_session.query(RevenueSnapshot).filter(RevenueSnapshot.district == "PATNA").all()
    assert len(rows) == 1
    row = rows[0]
    assert float(row.basic_plan_revenue) == 300
    assert row.basic_plan_count == 3
    assert float(row.total_revenue) == 300
    assert float(row.net_revenue) == 250


def test_upsert_overwrites_instead_of_incrementing(db_session):
    upsert_snapshot(db_session, "GAYA", "week", make_totals(500, 5), computed_at=NOW)
    upsert_snapshot(db_session, "GAYA", "week", make_totals(200, 2), computed_at=NOW + timedelta(minutes=5))

    row = db_session.query(RevenueSnapshot).filter_by(district="GAYA", date_bucket="week").one()
    assert float(row.total_revenue) == 200
    assert row.basic_plan_count == 2


def test_same_district_different_buckets_are_separate_rows(db_session):
    upsert_snapshot(db_session, "GAYA", "week", make_totals(100, 1), computed_at=NOW)
    upsert_snapshot(db_session, "GAYA", "month", make_totals(100, 1), computed_at=NOW)
    assert db_session.query(RevenueSnapshot).filter_by(district="GAYA").count() == 2


def test_persist_report_writes_overall_and_district_rows(db_session):
    district = DistrictAggregate(name="PATNA")
    district.per_plan_count[PlanType.HERO] = 1
    district.per_plan_revenue[PlanType.HERO] = 500
    report = RevenueReport(totals=make_totals(100, 1), districts=[district], window=resolve_period("month", now=NOW))

    written = persist_report_snapshots(db_session, report, computed_at=NOW)

    assert written == 2
    buckets = {(r.district, r.date_bucket) for r in db_session.query(RevenueSnapshot).all()}
    assert buckets == {("ALL", "month"), ("PATNA", "month")}
    patna = db_session.query(RevenueSnapshot).filter_by(district="PATNA").one()
    assert float(patna.hero_plan_revenue) == 500


def test_filtered_report_does_not_write_overall_row(db_session):
    district = DistrictAggregate(name="PATNA")
    district.per_plan_count[PlanType.BASIC] = 1
    district.per_plan_revenue[PlanType.BASIC] = 250
    report = RevenueReport(totals=make_totals(250, 1), districts=[district], window=resolve_period("all", now=NOW))

    written = persist_report_snapshots(db_session, report, computed_at=NOW, district_filter="patna")

    assert written == 1
    assert [r.district for r in db_session.query(RevenueSnapshot).all()] == ["PATNA"]
    assert persist_report_snapshots(db_session, report, computed_at=NOW, district_filter="all") == 2


def test_persistence_failure_is_swallowed(db_session, monkeypatch):
    def failing_upsert(session, district, date_bucket, totals, *, computed_at=None):
        raise SnapshotPersistenceError(district, date_bucket, RuntimeError("disk full"))

    monkeypatch.setattr(snapshot_persister, "upsert_snapshot", failing_upsert)
    report = RevenueReport(totals=make_totals(100, 1), districts=[], window=resolve_period("all", now=NOW))

    assert persist_report_snapshots(db_session, report, computed_at=NOW) == 0
    assert db_session.query(RevenueSnapshot).count() == 0


def test_history_newest_first_and_filtered(db_session):
    upsert_snapshot(db_session, "PATNA", "2024-06-01", make_totals(1, 1), computed_at=NOW - timedelta(days=14))
    upsert_snapshot(db_session, "PATNA", "2024-06-14", make_totals(2, 1), computed_at=NOW - timedelta(days=1))
    upsert_snapshot(db_session, "GAYA", "2024-06-15", make_totals(3, 1), computed_at=NOW)

    everything = fetch_revenue_history(db_session)
    assert [r.date_bucket for r in everything] == ["2024-06-15", "2024-06-14", "2024-06-01"]

    patna = fetch_revenue_history(db_session, district="patna")
    assert {r.district for r in patna} == {"PATNA"}

    recent = fetch_revenue_history(db_session, window=PeriodWindow(start=NOW - timedelta(days=2), period="custom"))
    assert [r.date_bucket for r in recent] == ["2024-06-15", "2024-06-14"]

    assert len(fetch_revenue_history(db_session, limit=1)) == 1
