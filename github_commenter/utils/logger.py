"""
Logging infrastructure for github-commenter.

Provides structured logging with configurable formats and levels.

This module offers:
- JSON and text formatters with customizable output
- Context-aware logging (owner, repo and comment type of the current run)
- Secure logging with GitHub token redaction

Example:
    >>> from github_commenter.utils.logger import get_logger, setup_logging
    >>> setup_logging(level="DEBUG", format_type="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Created comment", extra={"comment_id": 123})
"""

import logging
import sys
import json
import re
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Union, List, Pattern
from pathlib import Path
from enum import Enum


class LogLevel(Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Supported log formats."""
    JSON = "json"
    TEXT = "text"


# ANSI color codes for console output
class Colors:
    """ANSI color codes for console output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    MAGENTA = '\033[35m'
    RESET = '\033[0m'

    LEVEL_COLORS = {
        LogLevel.DEBUG.value: CYAN,
        LogLevel.INFO.value: GREEN,
        LogLevel.WARNING.value: YELLOW,
        LogLevel.ERROR.value: RED,
        LogLevel.CRITICAL.value: MAGENTA,
    }


# Field names whose values are always redacted
SENSITIVE_FIELDS = {
    'authorization', 'token', 'password', 'secret', 'api_key',
    'access_token', 'bearer', 'credential', 'credentials',
    'github_token', 'private_key', 'client_secret'
}

DEFAULT_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# Standard log record fields to exclude when copying extra fields
STANDARD_LOG_FIELDS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName'
}

# Owner/repo/type of the current invocation, stamped onto every record
_log_context: Dict[str, Any] = {}


def set_log_context(**context: Any) -> None:
    """Replace the context injected into log records (owner, repo, comment_type)."""
    _log_context.clear()
    _log_context.update({key: value for key, value in context.items() if value})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the current log context."""
    return dict(_log_context)


# ============================================================================
# Sensitive Data Redaction
# ============================================================================

class RedactionLevel(Enum):
    """Different levels of data redaction for security."""
    NONE = "none"          # No redaction
    BASIC = "basic"        # Field name matching only
    STANDARD = "standard"  # Field names plus token patterns


class SensitiveDataRedactor:
    """
    Redacts GitHub credentials from log messages and structured fields.

    Field values are redacted when the field name looks sensitive; free text
    is scanned for GitHub token formats and authorization headers.
    """

    def __init__(self, level: RedactionLevel = RedactionLevel.STANDARD):
        self.level = level
        self.redaction_placeholder = "***REDACTED***"
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        """Compile regex patterns for sensitive data detection."""
        self.patterns: List[Pattern] = []

        if self.level == RedactionLevel.STANDARD:
            self.patterns.extend([
                # Authorization headers: "token <x>" and "Bearer <x>"
                re.compile(r'(?i)(authorization["\s]*[:=]["\s]*(?:token|bearer)\s+)([a-zA-Z0-9_\-\.]{8,})'),
                re.compile(r'(?i)(\btoken\s+)([a-zA-Z0-9_\-\.]{20,})'),
                re.compile(r'(?i)(bearer\s+)([a-zA-Z0-9_\-\.]{8,})'),
                # GitHub token formats
                re.compile(r'()\b(gh[pousr]_[A-Za-z0-9]{20,})'),
                re.compile(r'()\b(github_pat_[A-Za-z0-9_]{20,})'),
                # Query parameters carrying credentials
                re.compile(r'(?i)([?&](?:access_token|token)=)([^&\s]+)'),
            ])

    def redact_dict(self, data: Dict[str, Any], preserve_length: bool = False) -> Dict[str, Any]:
        """
        Recursively redact sensitive data in a dictionary.

        Args:
            data: Dictionary to redact
            preserve_length: Whether to preserve data length in redaction

        Returns:
            Dictionary with sensitive data redacted
        """
        if not isinstance(data, dict):
            return data

        return {key: self._redact_value(key, value, preserve_length) for key, value in data.items()}

    def redact_string(self, text: str) -> str:
        """
        Redact sensitive information from a string.

        Args:
            text: String to redact

        Returns:
            Redacted string
        """
        if not isinstance(text, str):
            return text

        redacted_text = text
        for pattern in self.patterns:
            redacted_text = pattern.sub(
                lambda match: f"{match.group(1)}{self.redaction_placeholder}",
                redacted_text
            )
        return redacted_text

    def _redact_value(self, key: str, value: Any, preserve_length: bool = False) -> Any:
        """
        Redact a value based on its key and content.

        Args:
            key: The field key
            value: The value to potentially redact
            preserve_length: Whether to preserve data length

        Returns:
            Original value or redacted version
        """
        if value is None or self.level == RedactionLevel.NONE:
            return value

        if isinstance(value, dict):
            return self.redact_dict(value, preserve_length)
        elif isinstance(value, list):
            return [self._redact_value(f"{key}[]", item, preserve_length) for item in value]
        elif isinstance(value, tuple):
            return tuple(self._redact_value(f"{key}[]", item, preserve_length) for item in value)

        if is_sensitive_field(key):
            if preserve_length and isinstance(value, str) and len(value) > 0:
                return self.redaction_placeholder[:len(value)]
            return self.redaction_placeholder

        if isinstance(value, str):
            return self.redact_string(value)

        return value


def is_sensitive_field(key: str) -> bool:
    """Check whether a field name indicates a credential."""
    lowered = key.lower()
    return lowered in SENSITIVE_FIELDS or any(sensitive in lowered for sensitive in SENSITIVE_FIELDS)


# ============================================================================
# Formatter Classes
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {
            "comment_id": 1234,
            "level": "INFO",
            "logger": "github_commenter.reconciler",
            "message": "Created commit comment",
            "owner": "acme",
            "repo": "widgets",
            "timestamp": "2024-03-01T10:30:45.123456Z"
        }
    """

    def __init__(self, ensure_ascii: bool = False, sort_keys: bool = True):
        super().__init__()
        self.ensure_ascii = ensure_ascii
        self.sort_keys = sort_keys
        self.redactor = SensitiveDataRedactor(RedactionLevel.STANDARD)

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted log entry as string
        """
        log_entry = self._create_base_log_entry(record)
        log_entry.update(get_log_context())
        self._add_extra_fields(log_entry, record)
        self._add_exception_info(log_entry, record)

        return json.dumps(
            log_entry,
            default=str,
            ensure_ascii=self.ensure_ascii,
            sort_keys=self.sort_keys
        )

    def _create_base_log_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Create the base log entry with standard fields."""
        return {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

    def _add_extra_fields(self, log_entry: Dict[str, Any], record: logging.LogRecord) -> None:
        """Add extra fields from the record while excluding standard fields."""
        for key, value in record.__dict__.items():
            if key not in STANDARD_LOG_FIELDS and key not in log_entry:
                log_entry[key] = self.redactor._redact_value(key, value)

    def _add_exception_info(self, log_entry: Dict[str, Any], record: logging.LogRecord) -> None:
        """Add exception information if present in the record."""
        if record.exc_info:
            exception_str = self.formatException(record.exc_info)
            log_entry["exception"] = self.redactor.redact_string(exception_str)


class TextFormatter(logging.Formatter):
    """
    Text formatter for human-readable logging with optional colors.

    Example output:
        [2024-03-01 10:30:45] INFO     github_commenter.reconciler:88 - Created commit comment (owner=acme, repo=widgets)
    """

    def __init__(self, use_colors: bool = True, timestamp_format: Optional[str] = None):
        super().__init__()
        self.use_colors = use_colors and self._supports_color()
        self.timestamp_format = timestamp_format or DEFAULT_TIMESTAMP_FORMAT

    def _supports_color(self) -> bool:
        """Check if the terminal supports color output."""
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime(self.timestamp_format)

        base_message = (
            f"[{timestamp}] {record.levelname:8} "
            f"{record.name}:{record.lineno} - {record.getMessage()}"
        )

        context_str = self._build_context_string()
        full_message = f"{base_message}{context_str}" if context_str else base_message

        if record.exc_info:
            full_message += f"\n{self.formatException(record.exc_info)}"

        if self.use_colors:
            color = Colors.LEVEL_COLORS.get(record.levelname, '')
            full_message = f"{color}{full_message}{Colors.RESET}"

        return full_message

    def _build_context_string(self) -> str:
        """Build context information string if available."""
        context_parts = [f"{key}={value}" for key, value in get_log_context().items()]
        return f" ({', '.join(context_parts)})" if context_parts else ""


# ============================================================================
# Filter Classes
# ============================================================================

class ContextFilter(logging.Filter):
    """
    Filter to add context information to log records.

    Injects the owner, repo and comment type of the current run into all
    log records that pass through this filter.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class SensitiveDataFilter(logging.Filter):
    """
    Filter to sanitize sensitive data in log records.

    Redacts credentials from log messages, message arguments and extra fields.
    """

    def __init__(
        self,
        redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD,
        preserve_length: bool = False
    ):
        super().__init__()

        if isinstance(redaction_level, str):
            redaction_level = RedactionLevel(redaction_level.lower())

        self.redactor = SensitiveDataRedactor(redaction_level)
        self.preserve_length = preserve_length
        self.records_redacted = 0

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Sanitize sensitive data in the log record.

        Args:
            record: The log record to sanitize

        Returns:
            Always returns True to allow the record through
        """
        changed = False

        if isinstance(record.msg, str):
            redacted_msg = self.redactor.redact_string(record.msg)
            changed = changed or redacted_msg != record.msg
            record.msg = redacted_msg

        if record.args and isinstance(record.args, tuple):
            redacted_args = tuple(
                self.redactor.redact_string(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
            changed = changed or redacted_args != record.args
            record.args = redacted_args

        for key in list(record.__dict__.keys()):
            if key in STANDARD_LOG_FIELDS:
                continue
            if is_sensitive_field(key):
                original_value = getattr(record, key)
                redacted_value = self.redactor._redact_value(key, original_value, self.preserve_length)
                if original_value != redacted_value:
                    setattr(record, key, redacted_value)
                    changed = True

        if changed:
            self.records_redacted += 1

        return True


# ============================================================================
# Logger Setup and Configuration
# ============================================================================

def validate_log_level(level: str) -> str:
    """
    Validate and normalize log level string.

    Raises:
        ValueError: If the log level is not supported
    """
    if not level:
        raise ValueError("Log level cannot be empty")

    level_upper = level.upper()
    valid_levels = [log_level.value for log_level in LogLevel]

    if level_upper not in valid_levels:
        raise ValueError(f"Invalid log level: {level}. Valid levels: {', '.join(valid_levels)}")

    return level_upper


def validate_log_format(format_type: str) -> str:
    """
    Validate and normalize log format string.

    Raises:
        ValueError: If the log format is not supported
    """
    if not format_type:
        raise ValueError("Log format cannot be empty")

    format_lower = format_type.lower()
    valid_formats = [log_format.value for log_format in LogFormat]

    if format_lower not in valid_formats:
        raise ValueError(f"Invalid log format: {format_type}. Valid formats: {', '.join(valid_formats)}")

    return format_lower


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None,
    format_type: Optional[Union[str, LogFormat]] = None,
    log_file: Optional[str] = None,
    use_colors: Optional[bool] = None,
    sanitize_sensitive_data: bool = True,
    redaction_level: Union[RedactionLevel, str] = RedactionLevel.STANDARD
) -> logging.Logger:
    """
    Set up logging configuration with sensitive data protection.

    Configures the root logger with a console handler on stderr and an
    optional JSON file handler. Invalid level or format values fall back
    to INFO/text with a warning on stderr.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
        log_file: Optional log file path
        use_colors: Whether to use colors in text output (auto-detected if None)
        sanitize_sensitive_data: Whether to filter sensitive information
        redaction_level: Level of sensitive data redaction (none, basic, standard)

    Returns:
        Configured root logger
    """
    level_str = level.value if isinstance(level, LogLevel) else (level or LogLevel.INFO.value)
    format_str = format_type.value if isinstance(format_type, LogFormat) else (format_type or LogFormat.TEXT.value)

    try:
        validated_level = validate_log_level(level_str)
        validated_format = validate_log_format(format_str)
    except ValueError as e:
        validated_level = LogLevel.INFO.value
        validated_format = LogFormat.TEXT.value
        print(f"Warning: {e}. Using fallback settings.", file=sys.stderr)

    numeric_level = getattr(logging, validated_level, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)

    # Clear existing handlers and filters to avoid duplicate logs
    logger.handlers.clear()
    logger.filters.clear()

    filters: List[logging.Filter] = [ContextFilter()]
    if sanitize_sensitive_data:
        filters.append(SensitiveDataFilter(redaction_level=redaction_level))

    if validated_format == LogFormat.JSON.value:
        console_formatter: logging.Formatter = JSONFormatter()
    else:
        console_formatter = TextFormatter(use_colors=use_colors if use_colors is not None else True)

    logger.addHandler(_create_console_handler(numeric_level, console_formatter, filters))

    if log_file:
        try:
            logger.addHandler(_create_file_handler(log_file, numeric_level, JSONFormatter(), filters))
        except OSError as e:
            print(f"Warning: Failed to create file handler: {e}", file=sys.stderr)

    for filter_obj in filters:
        logger.addFilter(filter_obj)

    return logger


def _create_console_handler(
    level: int,
    formatter: logging.Formatter,
    filters: List[logging.Filter]
) -> logging.Handler:
    """Create a console handler writing to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for filter_obj in filters:
        handler.addFilter(filter_obj)
    return handler


def _create_file_handler(
    log_file: str,
    level: int,
    formatter: logging.Formatter,
    filters: List[logging.Filter]
) -> logging.Handler:
    """Create a file handler, creating parent directories as needed."""
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for filter_obj in filters:
        handler.addFilter(filter_obj)
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name, usually the module's ``__name__``

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_context",
    "get_log_context",
    "SensitiveDataRedactor",
    "SensitiveDataFilter",
    "ContextFilter",
    "JSONFormatter",
    "TextFormatter",
    "RedactionLevel",
    "LogLevel",
    "LogFormat",
]
