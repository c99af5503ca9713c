"""
Tests for sensitive data redaction in logging.

Covers:
- Field name and pattern-based redaction
- Redaction levels
- The logging filter and formatters
- setup_logging handler wiring
"""

import json
import logging

import pytest

from github_commenter.utils.logger import (
    ContextFilter,
    JSONFormatter,
    RedactionLevel,
    SensitiveDataFilter,
    SensitiveDataRedactor,
    TextFormatter,
    get_logger,
    set_log_context,
    setup_logging,
)

GITHUB_TOKEN = "ghp_" + "a1B2c3D4e5" * 4
PLACEHOLDER = "***REDACTED***"


def make_record(msg="message", args=(), **extra):
    record = logging.LogRecord(
        name="github_commenter.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None
    )
    record.__dict__.update(extra)
    return record


class TestSensitiveDataRedactor:
    """Test the SensitiveDataRedactor class."""

    @pytest.mark.parametrize("level", list(RedactionLevel))
    def test_redactor_initialization(self, level):
        redactor = SensitiveDataRedactor(level)
        assert redactor.level == level
        assert redactor.redaction_placeholder == PLACEHOLDER

    def test_value_redaction_by_key(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

        assert redactor._redact_value("github_token", "secret123") == PLACEHOLDER
        assert redactor._redact_value("Authorization", "token abc") == PLACEHOLDER
        assert redactor._redact_value("owner", "acme") == "acme"
        assert redactor._redact_value("comment_id", 42) == 42

    def test_dict_redaction(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

        redacted = redactor.redact_dict({
            "owner": "acme",
            "token": "abc123xyz",
            "headers": {
                "Authorization": "token abc123xyz",
                "Accept": "application/vnd.github.v3+json"
            },
            "list_data": [{"password": "hidden"}, {"body": "visible"}]
        })

        assert redacted["owner"] == "acme"
        assert redacted["token"] == PLACEHOLDER
        assert redacted["headers"]["Authorization"] == PLACEHOLDER
        assert redacted["headers"]["Accept"] == "application/vnd.github.v3+json"
        assert redacted["list_data"][0]["password"] == PLACEHOLDER
        assert redacted["list_data"][1]["body"] == "visible"

    def test_authorization_header_in_text(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

        redacted = redactor.redact_string(f"Authorization: token {GITHUB_TOKEN}")

        assert redacted == f"Authorization: token {PLACEHOLDER}"

    def test_github_token_formats(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)
        pat = "github_pat_" + "X" * 30

        redacted = redactor.redact_string(f"using {GITHUB_TOKEN} and {pat}")

        assert GITHUB_TOKEN not in redacted
        assert pat not in redacted
        assert redacted == f"using {PLACEHOLDER} and {PLACEHOLDER}"

    def test_url_query_redaction(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

        redacted = redactor.redact_string("https://api.github.com/user?access_token=abc123&per_page=30")

        assert redacted == f"https://api.github.com/user?access_token={PLACEHOLDER}&per_page=30"

    def test_plain_text_untouched(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)
        text = "Created GitHub commit comment: 1234"

        assert redactor.redact_string(text) == text

    def test_basic_level_skips_patterns(self):
        redactor = SensitiveDataRedactor(RedactionLevel.BASIC)

        assert redactor.redact_string(GITHUB_TOKEN) == GITHUB_TOKEN
        assert redactor._redact_value("token", "abc") == PLACEHOLDER

    def test_none_level_redacts_nothing(self):
        redactor = SensitiveDataRedactor(RedactionLevel.NONE)

        assert redactor._redact_value("token", "abc") == "abc"

    def test_preserve_length_redaction(self):
        redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

        assert redactor._redact_value("token", "abc", preserve_length=True) == "***"


class TestSensitiveDataFilter:
    """Test the SensitiveDataFilter class."""

    def test_filter_initialization(self):
        filter_obj = SensitiveDataFilter("standard")
        assert filter_obj.redactor.level == RedactionLevel.STANDARD
        assert filter_obj.preserve_length is False
        assert filter_obj.records_redacted == 0

    def test_filter_message_redaction(self):
        filter_obj = SensitiveDataFilter(RedactionLevel.STANDARD)
        record = make_record(f"GET with Authorization: token {GITHUB_TOKEN}")

        assert filter_obj.filter(record) is True
        assert GITHUB_TOKEN not in record.msg
        assert filter_obj.records_redacted == 1

    def test_filter_args_redaction(self):
        filter_obj = SensitiveDataFilter(RedactionLevel.STANDARD)
        record = make_record("token was %s for %s", args=(GITHUB_TOKEN, "acme"))

        filter_obj.filter(record)

        assert record.getMessage() == f"token was {PLACEHOLDER} for acme"

    def test_filter_field_redaction(self):
        filter_obj = SensitiveDataFilter(RedactionLevel.STANDARD)
        record = make_record(github_token="secret123", owner="acme")

        filter_obj.filter(record)

        assert record.__dict__["github_token"] == PLACEHOLDER
        assert record.__dict__["owner"] == "acme"

    def test_clean_records_not_counted(self):
        filter_obj = SensitiveDataFilter(RedactionLevel.STANDARD)

        filter_obj.filter(make_record("Deleted commit comment: 5", comment_id=5))

        assert filter_obj.records_redacted == 0


class TestFormatters:
    """Test JSON and text formatters."""

    def test_json_formatter_includes_context_and_extra(self):
        set_log_context(owner="acme", repo="widgets", comment_type="pr")
        record = make_record("Created GitHub Issue/PR comment: 7", comment_id=7, access_token="abc")

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "Created GitHub Issue/PR comment: 7"
        assert entry["level"] == "INFO"
        assert entry["owner"] == "acme"
        assert entry["comment_type"] == "pr"
        assert entry["comment_id"] == 7
        assert entry["access_token"] == PLACEHOLDER

    def test_text_formatter_context(self):
        set_log_context(owner="acme", repo="widgets")

        output = TextFormatter(use_colors=False).format(make_record("Deleted commit comment: 5"))

        assert "INFO" in output
        assert "Deleted commit comment: 5" in output
        assert output.endswith("(owner=acme, repo=widgets)")

    def test_empty_context_values_dropped(self):
        set_log_context(owner="acme", repo=None)

        output = TextFormatter(use_colors=False).format(make_record())

        assert output.endswith("(owner=acme)")

    def test_context_filter(self):
        set_log_context(owner="acme")
        record = make_record()

        ContextFilter().filter(record)

        assert record.owner == "acme"


class TestSetupLogging:
    """Test setup_logging wiring."""

    def test_filters_applied_to_handlers(self):
        configured_logger = setup_logging(level="DEBUG", format_type="json")

        assert configured_logger.level == logging.DEBUG
        assert len(configured_logger.handlers) == 1
        handler = configured_logger.handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)
        assert any(isinstance(f, SensitiveDataFilter) for f in handler.filters)

    def test_sanitizing_can_be_disabled(self):
        configured_logger = setup_logging(sanitize_sensitive_data=False)

        handler = configured_logger.handlers[0]
        assert not any(isinstance(f, SensitiveDataFilter) for f in handler.filters)
        assert isinstance(handler.formatter, TextFormatter)

    def test_invalid_level_falls_back(self, capsys):
        configured_logger = setup_logging(level="LOUD")

        assert configured_logger.level == logging.INFO
        assert "Using fallback settings" in capsys.readouterr().err

    def test_log_file_receives_redacted_json(self, tmp_path):
        log_file = tmp_path / "logs" / "commenter.log"
        configured_logger = setup_logging(level="INFO", format_type="text", log_file=str(log_file))

        get_logger("github_commenter.test").info(
            f"Authorization: token {GITHUB_TOKEN}",
            extra={"token": GITHUB_TOKEN, "comment_id": 9}
        )
        for handler in configured_logger.handlers:
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                handler.close()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert entry["token"] == PLACEHOLDER
        assert entry["comment_id"] == 9
        assert GITHUB_TOKEN not in entry["message"]
