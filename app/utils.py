"""Request-level helpers shared by route modules."""

import re

from flask import request

from config import config

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

# Largest OFFSET the storage layer accepts (signed 64-bit).
MAX_SKIP = 2 ** 63 - 1


def is_blank(value) -> bool:
    """True for None, non-strings and strings with no visible characters."""
    if not isinstance(value, str):
        return True
    return not value.strip()


def is_valid_email(email) -> bool:
    """Basic email format validation."""
    if not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email))


def json_body() -> dict:
    """Request JSON object, or an empty dict for missing, malformed or non-object bodies."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def normalize_page(page=None, limit=None):
    """
    Resolve page/limit into a (page, limit, skip) triple.

    Missing or non-positive values fall back to the configured defaults,
    ``limit`` is capped at ``MAX_PAGE_SIZE`` and ``page`` is capped so
    that ``skip`` never exceeds ``MAX_SKIP``.

    Args:
        page: 1-based page number
        limit: page size

    Returns:
        Tuple of (page, limit, skip)
    """
    page = _positive_int(page, config.DEFAULT_PAGE)
    limit = min(_positive_int(limit, config.DEFAULT_PAGE_SIZE), config.MAX_PAGE_SIZE)
    page = min(page, MAX_SKIP // limit + 1)
    return page, limit, (page - 1) * limit


def _positive_int(value, default):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default
