from __future__ import annotations
"""SQLAlchemy model for persisted revenue snapshots.

One row per ``(district, date_bucket)``; every reporting request overwrites
the row with the latest computed figures. ``district="ALL"`` holds the
overall totals.
"""
from sqlalchemy import Integer, String, DateTime, Numeric, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from app.database import Base

class RevenueSnapshot(Base):
    __tablename__ = "revenue_snapshots"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    district: Mapped[str] = mapped_column(String, nullable=False, index=True)
    date_bucket: Mapped[str] = mapped_column(String, nullable=False, index=True)

    # Plan-wise revenue
    basic_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    premium_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    featured_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    left_bar_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    right_side_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    bottom_rail_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    banner_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    hero_plan_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    advertisement_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)

    # Plan-wise counts
    basic_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    premium_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    featured_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    left_bar_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    right_side_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    bottom_rail_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    banner_plan_count: Mapped[int] = mapped_column(Integer, default=0)
    hero_plan_count: Mapped[int] = mapped_column(Integer, default=0)

    total_agent_commission: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    total_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    net_revenue: Mapped[float] = mapped_column(Numeric(12, 2), default=0)

    computed_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("district", "date_bucket", name="unique_district_date_bucket"),
        Index("ix_revenue_snapshots_district_computed", "district", "computed_at"),
    )
