"""
Trend models for the dashboard.

Value objects flowing through the bucketing engine (ranges, buckets, raw
events) and the response shapes of the two dashboard endpoints.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from models.base import BaseSchema, ValueSchema


class Granularity(str, Enum):
    """Calendar unit a trend is bucketed by."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Granularity":
        """
        Resolve a caller-supplied bucket name.

        Only the exact names day, week and month are recognized; anything
        else, including other casings, falls back to DAY.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.DAY
        try:
            return cls(value)
        except ValueError:
            return cls.DAY


class InventoryAction(str, Enum):
    """Recognized product_trends actions."""

    ADDED = "added"
    REMOVED = "removed"


# ===================
# ENGINE VALUE OBJECTS
# ===================

class TimeRange(ValueSchema):
    """Closed query window, day-normalized before use."""

    start: datetime
    end: datetime


class Bucket(ValueSchema):
    """Calendar-aligned interval; an instant equal to `end` belongs here."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


class InventoryEvent(ValueSchema):
    """One row of product_trends."""

    entity_id: str = Field(..., description="Product the change applies to")
    action: str = Field(..., description="added, removed, or anything else (ignored)")
    count: int = Field(..., gt=0, description="Units added or removed")
    occurred_at: datetime = Field(..., description="trend_date of the row")


class VisitEvent(ValueSchema):
    """One row of visitor_logs."""

    session_id: str = Field(..., min_length=1, description="Opaque visitor session identity")
    occurred_at: datetime = Field(..., description="visit_date of the row")


# ===================
# PRODUCT TRENDS RESPONSE
# ===================

class InventoryBucket(BaseSchema):
    """Products added, removed and the running total for one bucket."""

    start_date: date = Field(..., alias="startDate", description="Bucket start (calendar date)")
    end_date: date = Field(..., alias="endDate", description="Bucket end (calendar date)")
    products_added: int = Field(0, alias="productsAdded", ge=0)
    products_removed: int = Field(0, alias="productsRemoved", ge=0)
    total_products: int = Field(
        ..., alias="totalProducts", description="Active products once this bucket closes"
    )


class ProductTrendResponse(BaseSchema):
    """Response for GET /api/dashboard/products."""

    current_total: int = Field(..., alias="currentTotal", description="Running total after the last bucket")
    trend: List[InventoryBucket] = Field(default_factory=list)


# ===================
# VISITOR STATS RESPONSE
# ===================

class VisitorBucket(BaseSchema):
    """Unique sessions seen in one bucket."""

    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    visitors: int = Field(0, ge=0, description="Distinct session ids within this bucket only")


class VisitorStatsResponse(BaseSchema):
    """Response for GET /api/dashboard/visitors."""

    total_visitors: int = Field(
        ..., alias="totalVisitors", ge=0, description="Distinct session ids over the whole range"
    )
    visitors_by_bucket: List[VisitorBucket] = Field(default_factory=list, alias="visitorsByBucket")
