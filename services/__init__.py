"""
Business logic services.

The bucketing engine (calendar, aggregator, running totals) is pure;
TrendQueryService wires it to an EventStore.
"""

from services.bucket_calendar import bucket_containing, generate_buckets
from services.event_aggregator import (
    InventoryCounts,
    InventoryRule,
    VisitRule,
    assign,
    count_unique_sessions,
)
from services.running_total import reconstruct
from services.event_store import EventStore, SupabaseEventStore
from services.trend_service import TrendQueryService, get_trend_service
from services.visitor_log_service import VisitorLogService, get_visitor_log_service

__all__ = [
    "bucket_containing",
    "generate_buckets",
    "InventoryCounts",
    "InventoryRule",
    "VisitRule",
    "assign",
    "count_unique_sessions",
    "reconstruct",
    "EventStore",
    "SupabaseEventStore",
    "TrendQueryService",
    "get_trend_service",
    "VisitorLogService",
    "get_visitor_log_service",
]
