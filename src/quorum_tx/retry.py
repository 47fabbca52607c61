"""Bounded polling used while a transaction is pending."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from .connections import TRANSIENT_ERRORS
from .exceptions import NetworkError, TransactionTimeoutError
from .types import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


def poll(
    check: Callable[[], T | None],
    policy: RetryPolicy,
    *,
    description: str,
    transaction_hash: str | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``check`` until it returns a value or the policy is exhausted.

    A ``None`` result or a transient transport error counts as a failed
    attempt. The loop sleeps between attempts, never after the last one.
    """

    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = check()
        except (NetworkError, *TRANSIENT_ERRORS) as exc:
            logger.debug(
                "Attempt %d/%d for %s failed: %s", attempt, policy.max_attempts, description, exc
            )
            result = None
        else:
            if result is not None:
                return result
            logger.debug("Attempt %d/%d for %s pending", attempt, policy.max_attempts, description)

        if attempt < policy.max_attempts:
            sleep(policy.sleep_seconds)

    raise TransactionTimeoutError(
        f"{description} not confirmed after {policy.max_attempts} attempts",
        attempts=policy.max_attempts,
        transaction_hash=transaction_hash,
        details={"sleep_duration_ms": policy.sleep_duration_ms},
    )
