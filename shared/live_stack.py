"""Live application helpers for the E2E suite."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator

import pytest
import requests

from shared.polling import PollTimeoutError, poll_until

logger = logging.getLogger(__name__)


def is_app_ready(url: str, timeout: float = 2) -> bool:
    """Return True when the web app's root page answers with a non-5xx status."""
    try:
        response = requests.get(f"{url.rstrip('/')}/", timeout=timeout)
    except requests.RequestException:
        return False
    return response.status_code < 500


def wait_for_app_ready(url: str, timeout: float = 60, interval: float = 1) -> None:
    """Poll the app root until it is ready or raise after ``timeout`` seconds."""
    try:
        poll_until(
            lambda budget: is_app_ready(url, timeout=max(min(budget, 2), 0.1)),
            timeout=timeout,
            interval=interval,
            description=f"app at {url}",
        )
    except PollTimeoutError as exc:
        raise RuntimeError(f"App at {url} not ready after {timeout}s") from exc
    logger.info("App at %s is ready", url)


def live_app_url(
    *,
    base_url_env: str,
    base_url_default: str,
    suite_name: str,
    ready_timeout: float = 60,
) -> Generator[str, None, None]:
    """
    Yield a reachable base URL for the application under test.

    Priority:
    1. Use the explicit base URL from `base_url_env` (and wait for it to be ready).
    2. Reuse an app already answering at `base_url_default`.
    3. Otherwise skip the suite -- the app is not started from this repository.
    """
    provided_base_url = os.getenv(base_url_env)
    if provided_base_url:
        wait_for_app_ready(provided_base_url, timeout=ready_timeout)
        yield provided_base_url.rstrip("/")
        return

    if is_app_ready(base_url_default):
        yield base_url_default.rstrip("/")
        return

    pytest.skip(
        f"No app reachable at {base_url_default}; set {base_url_env} to run {suite_name} tests"
    )
