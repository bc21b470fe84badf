"""
E2E run configuration module.

This module defines configuration classes for the two ways the browser
suite is run: a serial profile (one worker, used locally and by default)
and a parallel profile (two workers).  Values are loaded from environment
variables with sensible defaults, and :func:`pytest_args` renders a profile
as the pytest command line understood by pytest-playwright, pytest-xdist
and pytest-timeout.
"""

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).strip().lower() not in ("", "0", "false", "no", "off")


class Config:
    """Base configuration with default settings."""

    BASE_URL: str = os.environ.get("E2E_BASE_URL", "http://localhost:8080")
    TEST_DIR: str = "tests/e2e"
    ARTIFACTS_DIR: str = os.environ.get("E2E_ARTIFACTS_DIR", str(BASE_DIR / "test-results"))

    FULLY_PARALLEL: bool = False
    WORKERS: int = 1
    RETRIES: int = 0

    # Timeouts in seconds
    TEST_TIMEOUT: int = 60
    EXPECT_TIMEOUT: float = 5
    ACTION_TIMEOUT: float = 10
    NAVIGATION_TIMEOUT: float = 15
    APP_READY_TIMEOUT: float = 60

    BROWSER: str = os.environ.get("E2E_BROWSER", "chromium")
    HEADLESS: bool = _env_flag("E2E_HEADLESS", "1")
    VIEWPORT: dict = {"width": 1280, "height": 720}

    # Capture policy: traces are only kept for failures, which with zero
    # retries is as close as pytest-playwright gets to "on-first-retry".
    TRACING: str = "off"
    SCREENSHOT: str = "only-on-failure"
    VIDEO: bool = _env_flag("VIDEO")

    REPORTER: str = "list"


class SerialConfig(Config):
    """Single worker, tests of one file never interleave."""

    WORKERS: int = 1
    FULLY_PARALLEL: bool = False


class ParallelConfig(Config):
    """Two workers sharing the app's database; isolation relies on unique data."""

    WORKERS: int = 2
    FULLY_PARALLEL: bool = False
    TRACING: str = "retain-on-failure"


# Configuration mapping for easy access
config = {
    "serial": SerialConfig,
    "parallel": ParallelConfig,
    "default": SerialConfig,
}

REPORTER_ARGS = {
    "list": ["-v", "-rfE"],
    "dot": ["-q"],
    "line": ["-q", "--no-header"],
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified profile.

    Args:
        env: Profile name (serial, parallel).
             If None, uses E2E_PROFILE environment variable.

    Returns:
        Configuration class for the specified profile.
    """
    if env is None:
        env = os.environ.get("E2E_PROFILE", "default")
    return config.get(env, config["default"])


def pytest_args(config_class: type[Config], test_dir: str | None = None) -> list[str]:
    """
    Render a configuration class as pytest command-line arguments.

    Args:
        config_class: Profile to render.
        test_dir: Overrides ``config_class.TEST_DIR``.

    Returns:
        Arguments suitable for ``pytest.main``.
    """
    args = [test_dir or config_class.TEST_DIR]
    args += REPORTER_ARGS.get(config_class.REPORTER, REPORTER_ARGS["list"])
    args += ["--base-url", config_class.BASE_URL]
    args += ["--browser", config_class.BROWSER]
    if not config_class.HEADLESS:
        args.append("--headed")
    args += ["--timeout", str(config_class.TEST_TIMEOUT)]

    if config_class.WORKERS > 1:
        dist = "load" if config_class.FULLY_PARALLEL else "loadfile"
        args += ["-n", str(config_class.WORKERS), "--dist", dist]
    else:
        args += ["-p", "no:xdist"]

    if config_class.RETRIES > 0:
        args += ["--reruns", str(config_class.RETRIES)]

    return args
