"""
Structured logging utilities with JSON formatting and sensitive data filtering.

Provides production-ready logging with:
- PII and sensitive data filtering (emails, phone numbers, tokens)
- Structured JSON output for log aggregation
- structlog wiring so service loggers share the stdlib handlers and filters
- Business event records for moderation and administration decisions
"""

import json
import logging
import re
import traceback
from typing import Dict, Any, Optional
from datetime import datetime, timezone

import structlog


# Attributes every LogRecord carries; everything else was passed as `extra`
RESERVED_RECORD_ATTRS = frozenset({
    'name', 'msg', 'args', 'levelno', 'levelname', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message', 'asctime',
})


class SensitiveDataFilter(logging.Filter):
    """
    Filter to remove sensitive data from log records.

    Prevents PII leakage by masking common sensitive patterns in messages,
    arguments and `extra` attributes.
    """

    SENSITIVE_PATTERNS = [
        # Email addresses
        (re.compile(
            r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
        # Phone numbers with separators or an international prefix
        # Matches: (123) 456-7890, 123-456-7890, 123.456.7890, +33 6 12 34 56 78
        (re.compile(r'\b(\(\d{3}\)\s*|\d{3}[-.])\d{3}[-.]?\d{4}\b'), '[PHONE]'),
        (re.compile(r'\+\d{1,3}(?:[\s.-]?\d{1,4}){3,5}\b'), '[PHONE]'),
        # Passwords and tokens in key=value form
        (re.compile(
            r'(password|token|secret|key)\s*[:=]\s*[\'"][^\'"\s]+[\'"]', re.IGNORECASE), r'\1=[FILTERED]'),
        # JWT tokens
        (re.compile(
            r'eyJ[A-Za-z0-9-_=]+\.[A-Za-z0-9-_=]+\.?[A-Za-z0-9-_.+/=]*'), '[JWT_TOKEN]'),
    ]

    # Fields whose values are always replaced
    SENSITIVE_FIELDS = {
        'password', 'token', 'secret', 'authorization', 'access_token',
        'refresh_token', 'session_key', 'secret_key', 'phone', 'email',
    }

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter sensitive data from log record.

        Returns True so the (masked) record is still emitted.
        """
        if isinstance(record.msg, str):
            record.msg = self._filter_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = self._filter_dict(record.args)
            else:
                record.args = tuple(self._filter_value(arg) for arg in record.args)

        for attr_name, attr_value in list(record.__dict__.items()):
            if attr_name in RESERVED_RECORD_ATTRS or attr_name.startswith('_'):
                continue
            if attr_name.lower() in self.SENSITIVE_FIELDS:
                setattr(record, attr_name, '[FILTERED]')
            else:
                setattr(record, attr_name, self._filter_value(attr_value))

        return True

    def _filter_value(self, value):
        if isinstance(value, str):
            return self._filter_string(value)
        if isinstance(value, dict):
            return self._filter_dict(value)
        if isinstance(value, (list, tuple)):
            return type(value)(self._filter_value(item) for item in value)
        return value

    def _filter_string(self, text: str) -> str:
        """Mask sensitive patterns in a string."""
        if not text:
            return text

        for pattern, replacement in self.SENSITIVE_PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _filter_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive fields in a dictionary, recursively."""
        return {
            key: '[FILTERED]' if str(key).lower() in self.SENSITIVE_FIELDS
            else self._filter_value(value)
            for key, value in data.items()
        }


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as one JSON object per line for log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': traceback.format_exception(*record.exc_info),
            }

        # Anything passed through `extra` or bound by structlog
        for key, value in record.__dict__.items():
            if key in RESERVED_RECORD_ATTRS or key.startswith('_') or key in log_entry:
                continue
            log_entry[key] = value

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def configure_structlog():
    """
    Route structlog through the stdlib logging tree.

    Service modules log with `structlog.get_logger(__name__)` and key/value
    context; the key/values end up as `extra` attributes on the stdlib record
    so SensitiveDataFilter and StructuredFormatter see them.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def log_business_event(event_type: str, user=None, details: Optional[Dict[str, Any]] = None):
    """
    Log important business events for auditing and analytics.

    Args:
        event_type: Type of business event (report_resolved, user_banned, etc.)
        user: User who triggered the event
        details: Additional details about the event
    """
    logger = logging.getLogger('business')

    log_data = {
        'event_type': event_type,
        'business_event': True,
    }

    if user is not None:
        log_data['user_id'] = str(user.pk)

    if details:
        log_data.update({
            key: value for key, value in details.items()
            if key not in RESERVED_RECORD_ATTRS
        })

    logger.info(f"Business event: {event_type}", extra=log_data)
