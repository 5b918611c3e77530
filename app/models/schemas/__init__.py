from .revenue import (
    RevenueTotalsRead,
    DistrictAggregateRead,
    RevenueSnapshotRead,
    RevenueReportResponse,
    RevenueCalculateRequest,
    RevenueCalculateResponse,
)

__all__ = [
    # Revenue
    "RevenueTotalsRead",
    "DistrictAggregateRead",
    "RevenueSnapshotRead",
    "RevenueReportResponse",
    "RevenueCalculateRequest",
    "RevenueCalculateResponse",
]
