"""
Revenue reporting endpoints (admin only).
"""
from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from app.api.deps import get_db, require_admin
from app.models.db import User
from app.models.schemas.revenue import (
    RevenueCalculateRequest,
    RevenueCalculateResponse,
    RevenueReportResponse,
    RevenueSnapshotRead,
)
from app.services.exceptions import DataStoreUnavailable, SnapshotPersistenceError
from app.services.revenue_reporting import RevenueQuery, build_revenue_report, recalculate_district_day
from app.utils import get_logger, log_revenue_event

router = APIRouter()
logger = get_logger(__name__)


@router.get(
    "/",
    response_model=RevenueReportResponse,
    summary="Revenue totals, district breakdown and snapshot history",
)
async def get_revenue_report(
    request: Request,
    district: Optional[str] = Query("all", description="District name or 'all'"),
    period: Optional[str] = Query("all", description="all | today | week | month | year"),
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO start date"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO end date"),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Compute revenue for the requested period.

    Totals revenue is period scoped; plan counts and the district list are
    not. The response keeps its full shape on failure (``success=false``,
    zeroed totals, empty district lists) with HTTP 500.
    """
    request_id = getattr(request.state, "request_id", None)
    query = RevenueQuery(district=district, period=period, start_date=start_date, end_date=end_date)

    report = build_revenue_report(db, query)

    log_revenue_event(
        "revenue_report_generated",
        user_id=current_user.id,
        request_id=request_id,
        district=district,
        period=period,
        start_date=start_date,
        end_date=end_date,
        success=report.success,
        total_revenue=report.totals.total_revenue,
    )

    status_code = status.HTTP_200_OK if report.success else status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=status_code,
        content=report.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.post(
    "/calculate",
    response_model=RevenueCalculateResponse,
    response_model_by_alias=True,
    summary="Recalculate one district for one day",
)
async def calculate_district_revenue(
    payload: RevenueCalculateRequest,
    request: Request,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RevenueCalculateResponse:
    """Recompute and upsert the ``(district, YYYY-MM-DD)`` snapshot from live shop data."""
    request_id = getattr(request.state, "request_id", None)
    if not payload.district or not payload.district.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="District is required")

    try:
        snapshot = recalculate_district_day(db, payload.district, payload.target_date)
    except DataStoreUnavailable as exc:
        logger.error("Revenue recalculation failed: shop data unavailable", error=str(exc), request_id=request_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Shop data unavailable")
    except SnapshotPersistenceError as exc:
        logger.error("Revenue recalculation failed: snapshot not saved", error=str(exc), request_id=request_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save revenue snapshot")

    log_revenue_event(
        "revenue_recalculated",
        user_id=current_user.id,
        request_id=request_id,
        district=snapshot.district,
        date_bucket=snapshot.date_bucket,
        total_revenue=float(snapshot.total_revenue or 0),
    )

    return RevenueCalculateResponse(
        success=True,
        message="Revenue calculated and updated",
        revenue=RevenueSnapshotRead.model_validate(snapshot),
    )
