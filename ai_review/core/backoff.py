"""Deterministic exponential backoff for retry decisions."""

from __future__ import annotations

BASE_DELAY_MS = 1000
MAX_DELAY_MS = 10000


def calculate_retry_delay(
    attempt: int,
    base_ms: int = BASE_DELAY_MS,
    cap_ms: int = MAX_DELAY_MS,
) -> int:
    """
    Delay before re-invoking the primary path.

    ``min(base_ms * 2 ** (attempt - 1), cap_ms)``, with attempts below 1
    treated as 1. No jitter, so identical inputs give identical delays.

    Args:
        attempt: 1-based attempt number that just failed.
        base_ms: Delay for the first attempt.
        cap_ms: Upper bound on any delay.

    Returns:
        Delay in milliseconds.
    """
    exponent = max(attempt, 1) - 1
    # Past this point the uncapped value exceeds any sane cap anyway.
    if exponent >= 32:
        return cap_ms
    return min(base_ms * 2**exponent, cap_ms)
