"""
Rate Limiting
=============
Sliding window admission control for outbound API calls.
"""

from .sliding_window import SlidingWindowRateLimiter

__all__ = [
    "SlidingWindowRateLimiter",
]
