# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

import functools
import time
from typing import Callable, Optional


class RetryError(RuntimeError):
    def __init__(self, name: str, attempts: int, last: Optional[BaseException]):
        self.attempts = attempts
        self.last = last
        super().__init__(f"{name} gave up after {attempts} attempts: {last}")


def retry(
    *,
    retries: int,
    delay: float,
    backoff: float = 1.0,
    max_delay: Optional[float] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
):
    """
    Poll an idempotent call until it succeeds.

    The wait starts at `delay` seconds and is multiplied by `backoff` after
    every failed attempt, capped at `max_delay`. Exceptions outside
    `retry_on` propagate immediately.
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            wait = delay
            last: Optional[Exception] = None
            for attempt in range(1, retries + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    last = exc
                    if on_retry:
                        on_retry(attempt, exc)
                if attempt < retries:
                    time.sleep(wait)
                    wait = wait * backoff
                    if max_delay is not None:
                        wait = min(wait, max_delay)
            raise RetryError(fn.__name__, retries, last) from last
        return wrapper
    return decorator
