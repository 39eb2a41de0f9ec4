"""
Request validators used before any hashing or store access.

Rules are declared as an ordered list and evaluated eagerly, so a caller
always gets every failing field back in one response.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from utils.schemas import FieldError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt input limit
MAX_OFFSET = 2**63 - 1  # signed BIGINT


@dataclass(frozen=True)
class FieldRule:
    field: str
    check: Callable[[Any], bool]
    message: str
    location: str = "body"


def _not_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def _min_length(n: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, str) and len(value) >= n


def _max_bytes(n: int) -> Callable[[Any], bool]:
    return lambda value: not isinstance(value, str) or len(value.encode()) <= n


REGISTRATION_RULES: List[FieldRule] = [
    FieldRule("name", _not_empty, "Name is required"),
    FieldRule("email", _is_email, "Valid email is required"),
    FieldRule(
        "password",
        _min_length(MIN_PASSWORD_LENGTH),
        f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
    ),
    FieldRule(
        "password",
        _max_bytes(MAX_PASSWORD_BYTES),
        f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
    ),
]


def validate_fields(data: Dict[str, Any], rules: List[FieldRule]) -> List[FieldError]:
    """Run every rule against *data* and collect the failures in rule order."""
    errors: List[FieldError] = []
    for rule in rules:
        value = data.get(rule.field)
        if not rule.check(value):
            # never echo secrets back to the client
            shown = None if rule.field == "password" else value
            errors.append(
                FieldError(
                    field=rule.field,
                    message=rule.message,
                    location=rule.location,
                    value=shown,
                )
            )
    return errors


def validate_registration(data: Dict[str, Any]) -> List[FieldError]:
    return validate_fields(data, REGISTRATION_RULES)


def _positive_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def parse_pagination(
    page: Optional[str],
    limit: Optional[str],
    default_limit: int = 10,
    max_limit: int = 100,
) -> Tuple[int, int]:
    """
    Turn raw ``page`` / ``limit`` query values into a usable window.

    Missing, non-numeric or non-positive values fall back to page 1 and
    *default_limit*; the limit is capped at *max_limit*.  The page is
    clamped so the row offset stays within a signed 64-bit integer; such a
    page is past any real data and simply comes back empty.
    """
    parsed_page = _positive_int(page)
    parsed_limit = _positive_int(limit)
    if (page is not None and parsed_page is None) or (limit is not None and parsed_limit is None):
        logger.debug("Falling back to default pagination for page=%r limit=%r", page, limit)
    page_size = min(parsed_limit or default_limit, max_limit)
    last_page = MAX_OFFSET // page_size + 1
    return min(parsed_page or 1, last_page), page_size
