"""
Retry Predicates
================
Decide whether a failed attempt is worth retrying.
"""

import re

from solarmon_core.http.exceptions import HttpError, NetworkError, RequestTimeoutError

RETRYABLE_PATTERNS = [
    re.compile(r"network", re.IGNORECASE),
    re.compile(r"timeout", re.IGNORECASE),
    re.compile(r"429"),  # Rate limited
    re.compile(r"500"),
    re.compile(r"502"),
    re.compile(r"503"),
    re.compile(r"504"),
    re.compile(r"ECONNRESET"),
    re.compile(r"ETIMEDOUT"),
]


def default_retry_predicate(error: BaseException) -> bool:
    """Match the error message or type name against known transient patterns."""
    message = str(error)
    type_name = type(error).__name__
    return any(
        pattern.search(message) or pattern.search(type_name)
        for pattern in RETRYABLE_PATTERNS
    )


def typed_retry_predicate(error: BaseException) -> bool:
    """Stricter drop-in for :func:`default_retry_predicate` based on error types."""
    if isinstance(error, (RequestTimeoutError, NetworkError)):
        return True
    if isinstance(error, HttpError):
        return error.status_code == 429 or error.status_code >= 500
    return False
