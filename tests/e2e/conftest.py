"""Playwright fixtures for the pelada E2E tests."""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from playwright.sync_api import Browser, BrowserContext, Page, expect

from config import Config, get_config
from shared.artifacts import artifact_path, capture_screenshot
from shared.live_stack import live_app_url
from shared.sessions import ActorSessions, apply_timeouts


def _call_failed(request: pytest.FixtureRequest) -> bool:
    report = getattr(request.node, "rep_call", None)
    return report is not None and report.failed


@pytest.fixture(scope="session")
def e2e_config() -> type[Config]:
    """Run profile selected by ``E2E_PROFILE``."""
    selected = get_config()
    expect.set_options(timeout=selected.EXPECT_TIMEOUT * 1000)
    return selected


@pytest.fixture(scope="session")
def live_server(e2e_config: type[Config]) -> Generator[str, None, None]:
    """
    Return the base URL of the application under test.

    If E2E_BASE_URL is set, wait until that app is ready.
    Otherwise reuse an app already running at the profile's default URL,
    or skip the E2E suite.
    """
    yield from live_app_url(
        base_url_env="E2E_BASE_URL",
        base_url_default=e2e_config.BASE_URL,
        suite_name="E2E",
        ready_timeout=e2e_config.APP_READY_TIMEOUT,
    )


@pytest.fixture(scope="session")
def browser_context_args(e2e_config: type[Config], live_server: str) -> dict:
    return {
        "viewport": e2e_config.VIEWPORT,
        "ignore_https_errors": True,
        "base_url": live_server,
    }


@pytest.fixture(scope="function")
def context(
    browser: Browser,
    browser_context_args: dict,
    e2e_config: type[Config],
    request: pytest.FixtureRequest,
) -> Generator[BrowserContext, None, None]:
    context = browser.new_context(**browser_context_args)
    apply_timeouts(context, e2e_config)
    tracing = e2e_config.TRACING != "off"
    if tracing:
        context.tracing.start(screenshots=True, snapshots=True)
    yield context
    if tracing:
        if e2e_config.TRACING == "on" or _call_failed(request):
            path = artifact_path(e2e_config.ARTIFACTS_DIR, "traces", request.node.nodeid, ".zip")
            context.tracing.stop(path=str(path))
        else:
            context.tracing.stop()
    context.close()


@pytest.fixture(scope="function")
def page(context: BrowserContext) -> Generator[Page, None, None]:
    page = context.new_page()
    yield page
    page.close()


@pytest.fixture
def actor_sessions(
    browser: Browser,
    browser_context_args: dict,
    e2e_config: type[Config],
    request: pytest.FixtureRequest,
) -> Generator[ActorSessions, None, None]:
    """Factory for per-actor browser sessions, closed (traces and videos saved) on teardown."""
    sessions = ActorSessions(browser, browser_context_args, e2e_config, request.node.nodeid)
    yield sessions
    sessions.close(failed=_call_failed(request))


@pytest.fixture
def open_session(actor_sessions: ActorSessions) -> Callable[..., Page]:
    """Shortcut for ``actor_sessions.open``."""
    return actor_sessions.open


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Capture screenshots of every open page on UI test failure."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    e2e_config = get_config()
    if report.when == "call" and report.failed and e2e_config.SCREENSHOT != "off":
        pages: dict[str, Page] = {}
        page = item.funcargs.get("page")
        if page:
            pages["page"] = page
        sessions = item.funcargs.get("actor_sessions")
        if sessions:
            pages.update(sessions.pages)

        for label, open_page in pages.items():
            if open_page.is_closed():
                continue
            screenshot_path = artifact_path(
                e2e_config.ARTIFACTS_DIR, "screenshots", f"{item.name}_{label}", ".png"
            )
            if capture_screenshot(open_page, screenshot_path):
                print(f"\nScreenshot saved: {screenshot_path}")
