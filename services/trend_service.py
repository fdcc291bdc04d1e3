"""
Trend query service for the dashboard.

Orchestrates the bucketing engine for the two dashboard queries:
- product trends: products added/removed per bucket plus a running total
- visitor stats: unique sessions per bucket plus distinct sessions overall
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional, Union

import structlog

from config import get_supabase_client, settings
from exceptions import InvalidDateFormatError, InvalidRangeError, StoreUnavailableError
from models.trends import (
    Granularity,
    InventoryBucket,
    ProductTrendResponse,
    TimeRange,
    VisitorBucket,
    VisitorStatsResponse,
)
from services.bucket_calendar import bucket_dates, end_of_day, ensure_utc, generate_buckets, start_of_day
from services.event_aggregator import aggregate_inventory, aggregate_visits, count_unique_sessions
from services.event_store import EventStore, SupabaseEventStore
from services.running_total import reconstruct

logger = structlog.get_logger(__name__)

DateParam = Union[str, date, None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date_param(value: DateParam, field: str) -> Optional[date]:
    """
    Parse a startDate/endDate query value.

    Accepts YYYY-MM-DD or a full ISO datetime (truncated to its UTC date).
    Empty values mean "not provided".

    Raises:
        InvalidDateFormatError: If the value is not an ISO date
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, date):
        return value

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        try:
            return ensure_utc(datetime.fromisoformat(text.replace("Z", "+00:00"))).date()
        except ValueError:
            raise InvalidDateFormatError(field, value)


class TrendQueryService:
    """Time-bucketed product and visitor trends over an injected event store."""

    def __init__(
        self,
        store: EventStore,
        clock: Optional[Callable[[], datetime]] = None,
        default_range_days: Optional[int] = None,
    ):
        self.store = store
        self.clock = clock or _utc_now
        self.default_range_days = default_range_days or settings.default_range_days

    # ==================
    # RANGE RESOLUTION
    # ==================

    def resolve_range(self, start_date: DateParam = None, end_date: DateParam = None) -> TimeRange:
        """
        Resolve the effective, day-aligned query range.

        Missing start defaults to today minus (default_range_days - 1), missing
        end defaults to today. The range is always day-aligned, whatever the
        bucket granularity.

        Raises:
            InvalidDateFormatError: If either date is unparsable
            InvalidRangeError: If start falls after end
        """
        today = ensure_utc(self.clock()).date()

        start = parse_date_param(start_date, "startDate")
        end = parse_date_param(end_date, "endDate")
        if start is None:
            start = today - timedelta(days=self.default_range_days - 1)
        if end is None:
            end = today

        if start > end:
            raise InvalidRangeError(start, end)

        return TimeRange(
            start=start_of_day(datetime.combine(start, time.min, tzinfo=timezone.utc)),
            end=end_of_day(datetime.combine(end, time.min, tzinfo=timezone.utc)),
        )

    # ==================
    # PRODUCT TRENDS
    # ==================

    def get_product_trends(
        self,
        start_date: DateParam = None,
        end_date: DateParam = None,
        bucket: Union[Granularity, str, None] = None,
    ) -> ProductTrendResponse:
        """
        Products added and removed per bucket with a running total.

        The running total starts from the active products created before the
        range, so it reflects the absolute count rather than the window delta.

        Args:
            start_date: First day of the range (YYYY-MM-DD)
            end_date: Last day of the range (YYYY-MM-DD)
            bucket: day, week or month (unknown values mean day)

        Returns:
            ProductTrendResponse with one entry per bucket
        """
        granularity = Granularity.parse(bucket)
        time_range = self.resolve_range(start_date, end_date)

        logger.info(
            "calculating_product_trends",
            start=time_range.start.isoformat(),
            end=time_range.end.isoformat(),
            bucket=granularity.value,
        )

        buckets = generate_buckets(time_range.start, time_range.end, granularity)
        events = self._from_store(
            "find_inventory_events",
            self.store.find_inventory_events,
            time_range.start,
            time_range.end,
        )
        deltas = aggregate_inventory(events, buckets)

        baseline = self._from_store(
            "count_active_products_before",
            self.store.count_active_products_before,
            time_range.start,
        )
        totals, current_total = reconstruct(baseline, deltas)

        trend = []
        for item, counts, total in zip(buckets, deltas, totals):
            start_day, end_day = bucket_dates(item)
            trend.append(InventoryBucket(
                start_date=start_day,
                end_date=end_day,
                products_added=counts.added,
                products_removed=counts.removed,
                total_products=total,
            ))

        logger.info(
            "product_trends_calculated",
            buckets=len(trend),
            events=len(events),
            baseline=baseline,
            current_total=current_total,
        )
        return ProductTrendResponse(current_total=current_total, trend=trend)

    # ==================
    # VISITOR STATS
    # ==================

    def get_visitor_stats(
        self,
        start_date: DateParam = None,
        end_date: DateParam = None,
        bucket: Union[Granularity, str, None] = None,
    ) -> VisitorStatsResponse:
        """
        Unique visitors per bucket and over the whole range.

        A session seen in two buckets counts in both, but only once in
        total_visitors, so the bucket counts can add up to more than the total.
        """
        granularity = Granularity.parse(bucket)
        time_range = self.resolve_range(start_date, end_date)

        logger.info(
            "calculating_visitor_stats",
            start=time_range.start.isoformat(),
            end=time_range.end.isoformat(),
            bucket=granularity.value,
        )

        buckets = generate_buckets(time_range.start, time_range.end, granularity)
        visits = self._from_store(
            "find_visit_events",
            self.store.find_visit_events,
            time_range.start,
            time_range.end,
        )
        per_bucket = aggregate_visits(visits, buckets)

        visitors_by_bucket = []
        for item, visitors in zip(buckets, per_bucket):
            start_day, end_day = bucket_dates(item)
            visitors_by_bucket.append(VisitorBucket(
                start_date=start_day,
                end_date=end_day,
                visitors=visitors,
            ))

        total_visitors = count_unique_sessions(visits)

        logger.info(
            "visitor_stats_calculated",
            buckets=len(visitors_by_bucket),
            visits=len(visits),
            total_visitors=total_visitors,
        )
        return VisitorStatsResponse(
            total_visitors=total_visitors,
            visitors_by_bucket=visitors_by_bucket,
        )

    # ==================
    # HELPERS
    # ==================

    @staticmethod
    def _from_store(operation: str, call: Callable, *args):
        """Run one store call; any failure surfaces as StoreUnavailableError."""
        try:
            return call(*args)
        except StoreUnavailableError:
            raise
        except Exception as e:
            logger.error(
                "store_call_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__
            )
            raise StoreUnavailableError(operation, str(e)) from e


# Singleton instance
_trend_service: Optional[TrendQueryService] = None


def get_trend_service() -> TrendQueryService:
    """Get singleton instance of TrendQueryService backed by Supabase."""
    global _trend_service
    if _trend_service is None:
        store = SupabaseEventStore(get_supabase_client(), page_size=settings.store_page_size)
        _trend_service = TrendQueryService(store)
    return _trend_service
