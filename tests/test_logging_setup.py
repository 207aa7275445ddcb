"""
Tests for logging setup and sensitive data filtering.
"""

import logging

from workout_content.logging_setup import SensitiveDataFilter


def _record(msg, args=()):
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="test.py", lineno=1, msg=msg, args=args,
        exc_info=None,
    )


def test_sensitive_data_filter_rapidapi_header():
    """RapidAPI keys are redacted from header dumps."""
    record = _record("headers={'x-rapidapi-key': 'abc123secret', 'x-rapidapi-host': 'h'}")

    assert SensitiveDataFilter().filter(record) is True
    assert "abc123secret" not in record.msg
    assert "<REDACTED>" in record.msg


def test_sensitive_data_filter_args_and_query_key():
    """Credentials passed as format args are redacted too."""
    record = _record("GET %s", ("https://api.test/x?key=s3cr3t&q=1",))

    SensitiveDataFilter().filter(record)

    assert record.getMessage() == "GET https://api.test/x?key=<REDACTED>&q=1"


def test_sensitive_data_filter_normal_message():
    """Normal messages pass through unchanged."""
    record = _record("This is a normal log message")
    original_msg = record.msg

    assert SensitiveDataFilter().filter(record) is True
    assert record.msg == original_msg
