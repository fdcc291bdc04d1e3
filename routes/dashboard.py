"""
Dashboard API routes.

Time-bucketed product and visitor trends for the dashboard charts.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.trends import ProductTrendResponse, VisitorStatsResponse
from services.trend_service import get_trend_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception, operation: str) -> JSONResponse:
    """
    Log the failure and answer with the generic error body.

    Trend queries never expose the underlying error, including for bad
    dates or ranges.
    """
    logger.error(
        "trend_query_failed",
        operation=operation,
        code=e.code if isinstance(e, AppError) else "INTERNAL_ERROR",
        error=str(e),
        type=type(e).__name__
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal Server Error"
            }
        }
    )


# ===================
# TREND ROUTES
# ===================

@router.get("/products", response_model=ProductTrendResponse)
async def get_product_trends(
    start_date: Optional[str] = Query(None, alias="startDate", description="First day (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Last day (YYYY-MM-DD)"),
    bucket: Optional[str] = Query("day", description="day, week or month")
):
    """
    Get products added, removed and total per bucket.

    Defaults to the last 7 days in daily buckets. Unknown bucket values
    fall back to day.
    """
    try:
        service = get_trend_service()
        return service.get_product_trends(
            start_date=start_date,
            end_date=end_date,
            bucket=bucket
        )

    except Exception as e:
        return handle_error(e, "get_product_trends")


@router.get("/visitors", response_model=VisitorStatsResponse)
async def get_visitor_stats(
    start_date: Optional[str] = Query(None, alias="startDate", description="First day (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Last day (YYYY-MM-DD)"),
    bucket: Optional[str] = Query("day", description="day, week or month")
):
    """
    Get unique visitors per bucket and distinct visitors over the range.
    """
    try:
        service = get_trend_service()
        return service.get_visitor_stats(
            start_date=start_date,
            end_date=end_date,
            bucket=bucket
        )

    except Exception as e:
        return handle_error(e, "get_visitor_stats")
