"""
Bounded polling for eventually-consistent UI state.

The application under test updates several screens asynchronously: an
invitation card appears only after the backend has processed the invite,
admin-only buttons show up once the membership list has been refreshed, and
so on.  Instead of sprinkling reload-and-sleep loops over every test, the
suite funnels those waits through one abstraction:

    check -> (success? stop) -> recover -> fixed pause -> check ...

bounded by an overall deadline, with an optional per-attempt budget that is
handed to the check so Playwright assertions never outlive the deadline.

Key Concepts Demonstrated:
- Bounded retry with an outer deadline and inner per-attempt timeout
- Fixed-interval polling (no exponential backoff)
- Result object for callers that want to branch, exception for callers
  that want the test to fail
- Injectable clock/sleep so the loop is unit-testable without waiting
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page, expect

logger = logging.getLogger(__name__)

# Outcomes of a single attempt that mean "not yet", as opposed to a bug in
# the check itself.  Playwright's TimeoutError subclasses Error.
RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (AssertionError, PlaywrightError)

# Smallest per-attempt budget (seconds) handed to a Playwright assertion.
MIN_ATTEMPT_TIMEOUT = 0.001


@dataclass(frozen=True)
class PollResult:
    """Outcome of a polling run."""

    ok: bool
    attempts: int
    elapsed: float
    last_error: BaseException | None = None

    def __bool__(self) -> bool:
        return self.ok


class PollTimeoutError(AssertionError):
    """Raised when a polled condition does not hold before its deadline."""

    def __init__(self, description: str, timeout: float, result: PollResult):
        self.description = description
        self.timeout = timeout
        self.result = result
        message = (
            f"Timed out after {timeout:g}s waiting for {description} "
            f"({result.attempts} attempt(s))"
        )
        if result.last_error is not None:
            message += f"; last error: {result.last_error}"
        super().__init__(message)


def _validate(timeout: float, interval: float, attempt_timeout: float | None) -> None:
    if timeout < 0:
        raise ValueError(f"timeout must be >= 0, got {timeout}")
    if interval < 0:
        raise ValueError(f"interval must be >= 0, got {interval}")
    if attempt_timeout is not None and attempt_timeout <= 0:
        raise ValueError(f"attempt_timeout must be > 0, got {attempt_timeout}")


def poll(
    check: Callable[[float], Any],
    *,
    recover: Callable[[], Any] | None = None,
    timeout: float = 20.0,
    attempt_timeout: float | None = None,
    interval: float = 0.5,
    description: str = "condition",
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """
    Evaluate ``check`` until it holds or ``timeout`` seconds have elapsed.

    Args:
        check: Called with the budget (seconds) for this attempt. A truthy
            return means the condition holds; a falsy return or a retryable
            error means "not yet".
        recover: Optional action run between failed attempts, e.g. a page
            reload.
        timeout: Overall deadline in seconds.
        attempt_timeout: Upper bound for a single attempt's budget.
        interval: Fixed pause between attempts.
        description: Human-readable name used in logs and errors.
        clock: Monotonic time source.
        sleep: Pause function.

    Returns:
        PollResult describing the run. ``ok`` is False when the deadline
        passed without the condition holding.
    """
    _validate(timeout, interval, attempt_timeout)

    start = clock()
    deadline = start + timeout
    attempts = 0
    last_error: BaseException | None = None

    while True:
        attempts += 1
        remaining = max(deadline - clock(), 0.0)
        budget = remaining if attempt_timeout is None else min(attempt_timeout, remaining)

        try:
            if check(budget):
                return PollResult(True, attempts, clock() - start, None)
            last_error = None
        except RETRYABLE_ERRORS as exc:
            last_error = exc
        logger.debug("Attempt %d for %s did not succeed: %s", attempts, description, last_error)

        if clock() >= deadline:
            break

        if recover is not None:
            try:
                recover()
            except RETRYABLE_ERRORS as exc:
                last_error = exc
                logger.debug("Recovery for %s failed: %s", description, exc)

        pause = min(interval, max(deadline - clock(), 0.0))
        if pause > 0:
            sleep(pause)
        if clock() >= deadline:
            break

    elapsed = clock() - start
    logger.warning(
        "Gave up on %s after %d attempt(s) in %.2fs", description, attempts, elapsed
    )
    return PollResult(False, attempts, elapsed, last_error)


def poll_until(
    check: Callable[[float], Any],
    *,
    recover: Callable[[], Any] | None = None,
    timeout: float = 20.0,
    attempt_timeout: float | None = None,
    interval: float = 0.5,
    description: str = "condition",
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Like :func:`poll`, but raise :class:`PollTimeoutError` on failure."""
    result = poll(
        check,
        recover=recover,
        timeout=timeout,
        attempt_timeout=attempt_timeout,
        interval=interval,
        description=description,
        clock=clock,
        sleep=sleep,
    )
    if not result.ok:
        raise PollTimeoutError(description, timeout, result) from result.last_error
    return result


# =============================================================================
# Playwright Adapters
# =============================================================================


def _attempt_ms(budget: float) -> float:
    # Playwright reads a timeout of 0 as "wait forever".
    return max(budget, MIN_ATTEMPT_TIMEOUT) * 1000


def _reload(page: Page) -> Callable[[], None]:
    def _recover() -> None:
        page.reload()
        page.wait_for_load_state("load")

    return _recover


def reload_until_visible(
    page: Page,
    locator: Locator,
    *,
    timeout: float = 20.0,
    attempt_timeout: float = 5.0,
    interval: float = 1.0,
    description: str | None = None,
) -> PollResult:
    """
    Reload ``page`` until ``locator`` is visible.

    Each attempt is a Playwright visibility assertion bounded by the
    attempt budget; between attempts the page is reloaded and allowed to
    reach its ``load`` state.
    """

    def _check(budget: float) -> bool:
        expect(locator).to_be_visible(timeout=_attempt_ms(budget))
        return True

    return poll_until(
        _check,
        recover=_reload(page),
        timeout=timeout,
        attempt_timeout=attempt_timeout,
        interval=interval,
        description=description or f"{locator} to be visible",
    )


def reload_until_attached(
    page: Page,
    locator: Locator,
    *,
    timeout: float = 20.0,
    attempt_timeout: float = 5.0,
    interval: float = 1.0,
    description: str | None = None,
) -> PollResult:
    """Reload ``page`` until ``locator`` is attached to the DOM."""

    def _check(budget: float) -> bool:
        expect(locator).to_be_attached(timeout=_attempt_ms(budget))
        return True

    return poll_until(
        _check,
        recover=_reload(page),
        timeout=timeout,
        attempt_timeout=attempt_timeout,
        interval=interval,
        description=description or f"{locator} to be attached",
    )


def wait_for_url(
    page: Page,
    pattern: str | re.Pattern[str],
    *,
    timeout: float = 15.0,
    interval: float = 0.25,
    description: str | None = None,
) -> PollResult:
    """Wait until the page URL matches ``pattern`` (``re.search`` semantics)."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return poll_until(
        lambda _budget: regex.search(page.url) is not None,
        timeout=timeout,
        interval=interval,
        description=description or f"URL matching {regex.pattern!r}",
    )
