"""
Event store access for the trend engine.

EventStore is the capability TrendQueryService depends on; it is passed in,
never looked up globally. SupabaseEventStore implements it over the
product_trends, visitor_logs and products tables.
"""

from datetime import datetime
from typing import Callable, List, Optional, Protocol, TypeVar

import structlog
from pydantic import ValidationError as SchemaValidationError

from exceptions import StoreUnavailableError
from models.trends import InventoryEvent, VisitEvent

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 1000


def _identity(value) -> Optional[str]:
    """Row ids come back as ints; a missing id stays None so validation rejects it."""
    return None if value is None else str(value)


class EventStore(Protocol):
    """Read side of the event store used by trend queries."""

    def find_inventory_events(self, start: datetime, end: datetime) -> List[InventoryEvent]:
        """product_trends rows with start <= trend_date <= end, oldest first."""
        ...

    def find_visit_events(self, start: datetime, end: datetime) -> List[VisitEvent]:
        """visitor_logs rows with start <= visit_date <= end, oldest first."""
        ...

    def count_active_products_before(self, instant: datetime) -> Optional[int]:
        """Products created strictly before `instant` and not deleted."""
        ...


class SupabaseEventStore:
    """
    EventStore backed by a Supabase client.

    Reads are paged with .range() so ranges larger than the PostgREST row
    cap are returned whole.
    """

    def __init__(self, client, page_size: int = DEFAULT_PAGE_SIZE):
        self.db = client
        self.page_size = page_size

    # ===================
    # READ OPERATIONS
    # ===================

    def find_inventory_events(self, start: datetime, end: datetime) -> List[InventoryEvent]:
        rows = self._fetch_range(
            "product_trends",
            "product_id, action, count, trend_date",
            "trend_date",
            start,
            end,
        )
        events = self._parse_rows(
            rows,
            "product_trends",
            lambda row: InventoryEvent(
                entity_id=_identity(row.get("product_id")),
                action=row.get("action") or "",
                count=row.get("count"),
                occurred_at=row.get("trend_date"),
            ),
        )
        logger.info("inventory_events_fetched", count=len(events))
        return events

    def find_visit_events(self, start: datetime, end: datetime) -> List[VisitEvent]:
        rows = self._fetch_range(
            "visitor_logs",
            "session_id, visit_date",
            "visit_date",
            start,
            end,
        )
        events = self._parse_rows(
            rows,
            "visitor_logs",
            lambda row: VisitEvent(
                session_id=row.get("session_id"),
                occurred_at=row.get("visit_date"),
            ),
        )
        logger.info("visit_events_fetched", count=len(events))
        return events

    def count_active_products_before(self, instant: datetime) -> Optional[int]:
        logger.debug("counting_products_before", before=instant.isoformat())

        try:
            result = (
                self.db.table("products")
                .select("id", count="exact")
                .lt("created_at", instant.isoformat())
                .is_("deleted_at", "null")
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("count_products_failed", error=str(e))
            raise StoreUnavailableError("count", str(e))

        return result.count

    # ===================
    # WRITE OPERATIONS
    # ===================

    def record_visit(
        self,
        session_id: str,
        user_agent: Optional[str],
        ip: Optional[str],
        visited_at: datetime,
    ) -> None:
        """Insert one visitor_logs row."""
        try:
            self.db.table("visitor_logs").insert({
                "session_id": session_id,
                "user_agent": user_agent,
                "ip": ip,
                "visit_date": visited_at.isoformat(),
            }).execute()
        except Exception as e:
            raise StoreUnavailableError("insert", str(e))

    # ===================
    # HELPERS
    # ===================

    def _fetch_range(
        self,
        table: str,
        columns: str,
        date_column: str,
        start: datetime,
        end: datetime,
    ) -> List[dict]:
        """Page through every row of `table` with date_column in [start, end]."""
        rows: List[dict] = []
        offset = 0

        try:
            while True:
                result = (
                    self.db.table(table)
                    .select(columns)
                    .gte(date_column, start.isoformat())
                    .lte(date_column, end.isoformat())
                    .order(date_column)
                    .order("id")
                    .range(offset, offset + self.page_size - 1)
                    .execute()
                )
                batch = result.data or []
                rows.extend(batch)
                if len(batch) < self.page_size:
                    break
                offset += self.page_size
        except Exception as e:
            logger.error(
                "event_fetch_failed",
                table=table,
                error=str(e),
                error_type=type(e).__name__
            )
            raise StoreUnavailableError("select", str(e))

        return rows

    @staticmethod
    def _parse_rows(rows: List[dict], table: str, build: Callable[[dict], T]) -> List[T]:
        """Build events from rows, skipping rows that fail validation."""
        events: List[T] = []
        skipped = 0
        for row in rows:
            try:
                events.append(build(row))
            except SchemaValidationError:
                skipped += 1

        if skipped:
            logger.warning("malformed_rows_skipped", table=table, count=skipped)
        return events
