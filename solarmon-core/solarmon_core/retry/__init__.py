"""
Retry Logic with Exponential Backoff
=====================================
Retry mechanism for transient failures of outbound API calls.
"""

from .predicates import default_retry_predicate, typed_retry_predicate, RETRYABLE_PATTERNS
from .executor import RetryExecutor, RetryPredicate

__all__ = [
    "RetryExecutor",
    "RetryPredicate",
    "default_retry_predicate",
    "typed_retry_predicate",
    "RETRYABLE_PATTERNS",
]
