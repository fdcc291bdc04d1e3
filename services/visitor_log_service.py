"""
Visitor logging.

Records one visitor_logs row per request. Logging is best effort: a failed
insert is logged and the request carries on.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from config import get_admin_client, get_supabase_client
from services.event_store import SupabaseEventStore

logger = structlog.get_logger(__name__)


def resolve_session_id(
    cookie_session: Optional[str],
    header_session: Optional[str],
    ip: Optional[str],
    now: datetime,
) -> str:
    """
    Pick the session identity for a request.

    Order: sessionId cookie, X-Session-Id header, then "<ip>-<timestamp>"
    so anonymous requests still get a distinct id.
    """
    if cookie_session:
        return cookie_session
    if header_session:
        return header_session
    return f"{ip or 'unknown'}-{now.isoformat()}"


class VisitorLogService:
    """Writes visit events for the visitor stats query to read."""

    def __init__(self, store=None, clock: Optional[Callable[[], datetime]] = None):
        self._store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _get_store(self):
        if self._store is None:
            self._store = SupabaseEventStore(get_admin_client() or get_supabase_client())
        return self._store

    def log_visit(
        self,
        ip: Optional[str],
        user_agent: Optional[str],
        cookie_session: Optional[str] = None,
        header_session: Optional[str] = None,
    ) -> Optional[str]:
        """
        Record a visit.

        Returns:
            The session id recorded, or None if the insert failed
        """
        now = self.clock()
        session_id = resolve_session_id(cookie_session, header_session, ip, now)

        try:
            self._get_store().record_visit(
                session_id=session_id,
                user_agent=user_agent,
                ip=ip,
                visited_at=now,
            )
        except Exception as e:
            logger.warning(
                "visitor_logging_failed",
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        logger.debug("visit_logged", session_id=session_id)
        return session_id


# Singleton instance
_visitor_log_service: Optional[VisitorLogService] = None


def get_visitor_log_service() -> VisitorLogService:
    """Get singleton instance of VisitorLogService."""
    global _visitor_log_service
    if _visitor_log_service is None:
        _visitor_log_service = VisitorLogService()
    return _visitor_log_service
