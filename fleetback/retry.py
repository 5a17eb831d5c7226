"""
retry.py
Bounded retry with a fixed delay between attempts.
"""
from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 2
    delay_sec: float = 5


def call_with_retry(
    attempt: Callable[[int], bool],
    policy: RetryPolicy,
    on_failure: Optional[Callable[[int, bool], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Call attempt(n) for n = 1..max_attempts until it returns True.
    on_failure(n, will_retry) runs after each failed attempt, before the delay.
    Returns the number of the successful attempt, or 0 if every attempt failed.
    """
    for n in range(1, policy.max_attempts + 1):
        if attempt(n):
            return n
        will_retry = n < policy.max_attempts
        if on_failure:
            on_failure(n, will_retry)
        if will_retry and policy.delay_sec > 0:
            sleep(policy.delay_sec)
    return 0
