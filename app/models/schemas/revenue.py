"""
Pydantic schemas for the revenue reporting endpoints.

Field names are snake_case in Python and camelCase on the wire
(``basic_plan_revenue`` <-> ``basicPlanRevenue``), matching what the
dashboard already consumes.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.db.enums import PlanType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RevenueTotalsRead(CamelModel):
    """Overall totals. Revenue is period scoped; counts are not."""
    basic_plan_revenue: float = 0
    premium_plan_revenue: float = 0
    featured_plan_revenue: float = 0
    left_bar_plan_revenue: float = 0
    right_side_plan_revenue: float = 0
    bottom_rail_plan_revenue: float = 0
    banner_plan_revenue: float = 0
    hero_plan_revenue: float = 0
    advertisement_revenue: float = 0
    total_agent_commission: float = 0
    total_revenue: float = 0
    net_revenue: float = 0
    basic_plan_count: int = 0
    premium_plan_count: int = 0
    featured_plan_count: int = 0
    left_bar_plan_count: int = 0
    right_side_plan_count: int = 0
    bottom_rail_plan_count: int = 0
    banner_plan_count: int = 0
    hero_plan_count: int = 0

    @classmethod
    def from_totals(cls, totals: Any) -> "RevenueTotalsRead":
        return cls(**totals.as_flat_dict())


class DistrictAggregateRead(CamelModel):
    """Lifetime district figures (independent of the requested period)."""
    name: str
    state: str
    area: str = ""
    total_shops: int = 0
    basic_plan_shops: int = 0
    premium_plan_shops: int = 0
    featured_plan_shops: int = 0
    left_bar_plan_shops: int = 0
    right_side_plan_shops: int = 0
    bottom_rail_plan_shops: int = 0
    banner_plan_shops: int = 0
    hero_plan_shops: int = 0
    basic_plan_revenue: float = 0
    premium_plan_revenue: float = 0
    featured_plan_revenue: float = 0
    left_bar_plan_revenue: float = 0
    right_side_plan_revenue: float = 0
    bottom_rail_plan_revenue: float = 0
    banner_plan_revenue: float = 0
    hero_plan_revenue: float = 0
    total_revenue: float = 0
    total_agent_commission: float = 0
    net_revenue: float = 0
    target_shops: int
    progress_percentage: float = Field(0, ge=0, le=100)

    @classmethod
    def from_aggregate(cls, district: Any) -> "DistrictAggregateRead":
        data: dict[str, Any] = {
            "name": district.name,
            "state": district.state,
            "area": district.area,
            "total_shops": district.total_shops,
            "total_revenue": district.total_revenue,
            "total_agent_commission": district.total_agent_commission,
            "net_revenue": district.net_revenue,
            "target_shops": district.target_shops,
            "progress_percentage": district.progress_percentage,
        }
        for plan in PlanType:
            data[f"{plan.field_prefix}_plan_shops"] = district.per_plan_count.get(plan, 0)
            data[f"{plan.field_prefix}_plan_revenue"] = district.per_plan_revenue.get(plan, 0.0)
        return cls(**data)


class RevenueSnapshotRead(RevenueTotalsRead):
    """Persisted snapshot row."""
    id: int
    district: str
    date_bucket: str
    computed_at: datetime
    created_at: Optional[datetime] = None


class RevenueReportResponse(CamelModel):
    """Reporting payload. Always fully populated, even when ``success`` is false."""
    success: bool = True
    revenues: List[RevenueSnapshotRead] = Field(default_factory=list)
    totals: RevenueTotalsRead = Field(default_factory=RevenueTotalsRead)
    districts: List[DistrictAggregateRead] = Field(default_factory=list)
    filtered_districts: List[DistrictAggregateRead] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def failure(cls, error: str, details: Optional[str] = None) -> "RevenueReportResponse":
        return cls(success=False, error=error, details=details)


class RevenueCalculateRequest(CamelModel):
    """Recompute one district for one calendar day (defaults to today, UTC)."""
    district: str = Field(description="District name (case-insensitive)")
    target_date: Optional[date] = Field(None, alias="date", description="Target day (YYYY-MM-DD)")


class RevenueCalculateResponse(CamelModel):
    success: bool = True
    message: str
    revenue: RevenueSnapshotRead
