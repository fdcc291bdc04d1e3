"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    ValueSchema,
)
from models.trends import (
    Granularity,
    InventoryAction,
    TimeRange,
    Bucket,
    InventoryEvent,
    VisitEvent,
    InventoryBucket,
    ProductTrendResponse,
    VisitorBucket,
    VisitorStatsResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "ValueSchema",

    # Trends
    "Granularity",
    "InventoryAction",
    "TimeRange",
    "Bucket",
    "InventoryEvent",
    "VisitEvent",
    "InventoryBucket",
    "ProductTrendResponse",
    "VisitorBucket",
    "VisitorStatsResponse",
]
