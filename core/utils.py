"""
Utility functions for the Civic Platform.

Common helper functions used across the apps.
"""

import re
import uuid
from typing import Optional

from .exceptions import NotFound


def parse_uuid(value, label: str = 'Resource') -> uuid.UUID:
    """
    Parse an identifier coming from a caller.

    Args:
        value: UUID instance or string
        label: Entity name used in the error message

    Returns:
        uuid.UUID

    Raises:
        NotFound: If the value is not a well-formed UUID (it cannot exist)
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise NotFound(f'{label} not found.')


def sanitize_user_input(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Strip markup from user-supplied text.

    Args:
        text: Text to sanitize
        max_length: Truncate to this length when given

    Returns:
        str: Sanitized text
    """
    if not text:
        return ''

    text = str(text)

    # Drop script-like blocks entirely, then any remaining tags
    text = re.sub(r'<(script|iframe|svg)[^>]*>.*?</\1>', '',
                  text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r'javascript:', '', text, flags=re.IGNORECASE)
    text = re.sub(r'<[^>]+>', '', text)

    if max_length is not None and len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def make_excerpt(content: str, length: int = 200) -> str:
    """Build a short plain-text excerpt, cut on a word boundary."""
    content = ' '.join((content or '').split())
    if len(content) <= length:
        return content
    cut = content[:length].rsplit(' ', 1)[0]
    return f'{cut}...'
