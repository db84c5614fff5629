# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/utils/retry.py

import functools
import time
from typing import Callable

from ..errors import ShepherdError


class RetryError(ShepherdError):
    """Every attempt failed. The last failure is chained as ``__cause__``."""

    def __init__(self, what: str, attempts: int, last: Exception):
        super().__init__(f"{what} failed after {attempts} attempt(s): {last}")
        self.attempts = attempts


def retry(
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception], None] | None = None,
):
    """
    Call the wrapped function up to *attempts* times (at least once),
    sleeping *delay* seconds between tries. Exceptions outside *retry_on*
    propagate immediately. ``on_retry(attempt, exc)`` runs after every
    failed try, the last one included.
    """
    attempts = max(attempts, 1)

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == attempts:
                        raise RetryError(fn.__name__, attempts, exc) from exc
                    time.sleep(delay)
        return wrapper
    return decorator
