"""
Unit Tests for Structured Logging
"""

import pytest

from cart.core.config.constants import Stage
from cart.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    add_timestamp,
    clear_request_id,
    get_request_id,
    log_stage,
    redact_emails,
    set_request_id,
)


@pytest.mark.unit
class TestProcessors:
    def test_request_id_added_when_set(self):
        set_request_id("req-42")
        try:
            event = add_request_id(None, "info", {"event": "x"})
        finally:
            clear_request_id()

        assert event["request_id"] == "req-42"
        assert get_request_id() is None

    def test_request_id_absent_when_unset(self):
        assert "request_id" not in add_request_id(None, "info", {"event": "x"})

    def test_timestamp_is_iso_utc(self):
        event = add_timestamp(None, "info", {"event": "x"})

        assert event["timestamp"].endswith("+00:00")

    def test_emails_are_redacted(self):
        event = redact_emails(
            None,
            "info",
            {"event": "points for alice@example.com", "username": "alice@example.com"},
        )

        assert event["event"] == "points for [EMAIL]"
        assert event["username"] == "[EMAIL]"

    def test_plain_usernames_are_kept(self):
        assert redact_emails(None, "info", {"event": "x", "username": "alice"})["username"] == "alice"

    def test_level_name_uppercased(self):
        assert add_log_level_name(None, "warning", {"level": "warning"})["level"] == "WARNING"


@pytest.mark.unit
class TestLogStage:
    def test_stage_enum_value_is_logged(self):
        calls = []

        class StubLogger:
            def warning(self, message, **kwargs):
                calls.append((message, kwargs))

        log_stage(StubLogger(), Stage.ERROR_SWALLOW, "points_sync_dropped", level="warning", order_id=1)

        assert calls == [("points_sync_dropped", {"stage": Stage.ERROR_SWALLOW.value, "order_id": 1})]
