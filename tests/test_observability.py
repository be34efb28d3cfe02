"""Tests for structured logging helpers."""

import json
import logging

import pytest

from pw_shared import ObservabilityContext, lambda_handler, log_event, set_aws_request_id
from pw_shared.observability import _redact_event


def logged_entries(caplog):
    entries = []
    for record in caplog.records:
        try:
            entry = json.loads(record.getMessage())
        except ValueError:
            continue
        if isinstance(entry, dict):
            entries.append(entry)
    return entries


class TestObservability:
    """Test suite for observability helpers."""

    def test_log_event_includes_request_id(self, caplog):
        """Test that the stored request id is attached to events."""
        caplog.set_level(logging.INFO)
        set_aws_request_id("req-42")

        log_event("stacks_read", {"stack_count": 2})

        assert {"eventType": "stacks_read", "stack_count": 2, "awsRequestId": "req-42"} in logged_entries(caplog)
        set_aws_request_id(None)

    def test_redacts_auth_headers_and_long_bodies(self):
        """Test that credentials and oversized bodies are not logged."""
        event = {"headers": {"Authorization": "Bearer abc", "Accept": "*/*"}, "body": "x" * 600}

        redacted = _redact_event(event)

        assert redacted["headers"]["Authorization"] == "***REDACTED***"
        assert redacted["headers"]["Accept"] == "*/*"
        assert redacted["body"].endswith("...[truncated]")
        assert event["headers"]["Authorization"] == "Bearer abc"

    def test_context_logs_failure(self, caplog):
        """Test that a failing operation is logged with its duration."""
        caplog.set_level(logging.INFO)

        with pytest.raises(RuntimeError):
            with ObservabilityContext("sign_upload_urls", {"file_count": 1}):
                raise RuntimeError("signing failed")

        failed = [e for e in logged_entries(caplog) if e["eventType"] == "sign_upload_urls_failed"]
        assert failed and failed[0]["error"] == "signing failed"
        assert "duration_ms" in failed[0]

    def test_decorator_logs_and_reraises(self, caplog, context):
        """Test that unexpected handler exceptions are logged and propagated."""
        caplog.set_level(logging.INFO)

        @lambda_handler(kind="api_gateway")
        def broken(event, ctx):
            raise ValueError("unexpected")

        with pytest.raises(ValueError):
            broken({"body": None}, context)

        types = [e["eventType"] for e in logged_entries(caplog)]
        assert "handler_invoked_api_gateway" in types
        assert "handler_error_api_gateway" in types
