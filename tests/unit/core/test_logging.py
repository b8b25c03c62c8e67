"""
Unit tests for logging filters.
"""

import logging

import pytest

from workforce_auth.core.logging import (
    CredentialRedactionFilter,
    RequestContextFilter,
    get_logging_config,
    redact,
    request_id_var,
)


def _record(msg, *args):
    return logging.LogRecord("workforce_auth.test", logging.INFO, __file__, 1, msg, args, None)


class TestRedaction:
    """Credential material never reaches a handler."""

    @pytest.mark.parametrize(
        "text,leaked",
        [
            ("issued wfs_Zm9vYmFyYmF6cXV4", "Zm9vYmFyYmF6cXV4"),
            ("Authorization: Bearer eyJhbGciOi.abc.def", "eyJhbGciOi.abc.def"),
            ("payload {'password': 'S3cure!pass'}", "S3cure!pass"),
            ("secret=hunter2, user=alice", "hunter2"),
        ],
    )
    def test_redact(self, text, leaked):
        assert leaked not in redact(text)

    def test_plain_message_untouched(self):
        assert redact("Login succeeded for profile 42") == "Login succeeded for profile 42"

    def test_filter_rewrites_formatted_message(self):
        record = _record("refreshing %s", "wfs_abcdefghijklmnop")

        assert CredentialRedactionFilter().filter(record) is True
        assert record.getMessage() == "refreshing wfs_[REDACTED]"


class TestRequestContext:
    """The request id flows from the context variable into records."""

    def test_uses_context_variable(self):
        token = request_id_var.set("req-abcdef12")
        try:
            record = _record("hello")
            RequestContextFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "req-abcdef12"

    def test_placeholder_outside_requests(self):
        record = _record("hello")
        RequestContextFilter().filter(record)

        assert record.request_id == "-"

    def test_explicit_request_id_wins(self):
        record = _record("hello")
        record.request_id = "req-from-extra"
        RequestContextFilter().filter(record)

        assert record.request_id == "req-from-extra"


class TestLoggingConfig:
    def test_stdout_only_when_file_logging_disabled(self):
        config = get_logging_config()

        assert config["root"]["handlers"] == ["stdout"]
        assert config["handlers"]["stdout"]["filters"] == ["request_context", "redact"]
