"""
Unit tests for VisitorLogService.
"""

from datetime import datetime, timezone

from services.visitor_log_service import VisitorLogService, resolve_session_id
from tests.factories import InMemoryEventStore

NOW = datetime(2025, 9, 1, 8, 0, tzinfo=timezone.utc)


class BrokenStore:
    def record_visit(self, **kwargs):
        raise RuntimeError("insert rejected")


class TestResolveSessionId:
    """Tests for resolve_session_id()"""

    def test_cookie_wins(self):
        assert resolve_session_id("cookie-id", "header-id", "10.0.0.1", NOW) == "cookie-id"

    def test_header_when_no_cookie(self):
        assert resolve_session_id(None, "header-id", "10.0.0.1", NOW) == "header-id"

    def test_ip_and_timestamp_fallback(self):
        assert resolve_session_id(None, None, "10.0.0.1", NOW) == "10.0.0.1-2025-09-01T08:00:00+00:00"


class TestLogVisit:
    """Tests for VisitorLogService.log_visit()"""

    def test_records_visit(self):
        store = InMemoryEventStore()
        service = VisitorLogService(store=store, clock=lambda: NOW)

        session_id = service.log_visit(ip="10.0.0.1", user_agent="Mozilla/5.0", cookie_session="sess1")

        assert session_id == "sess1"
        assert store.recorded == [{
            "session_id": "sess1",
            "user_agent": "Mozilla/5.0",
            "ip": "10.0.0.1",
            "visit_date": NOW,
        }]

    def test_store_failure_is_not_raised(self):
        service = VisitorLogService(store=BrokenStore(), clock=lambda: NOW)

        assert service.log_visit(ip="10.0.0.1", user_agent=None) is None

    def test_lazy_store_uses_supabase_client(self, mock_db, mock_supabase):
        service = VisitorLogService(clock=lambda: NOW)

        service.log_visit(ip="10.0.0.1", user_agent="curl/8", header_session="hdr")

        inserts = [args for name, args in mock_supabase.calls["visitor_logs"] if name == "insert"]
        assert inserts[0][0][0]["session_id"] == "hdr"
