"""
Test artifact helpers: screenshots, traces and per-actor videos.

Artifacts land under a single results directory (``test-results`` by
default) with file names derived from the pytest node name, so a failing
test's screenshot, trace and videos can be found without digging through
Playwright's random raw file names.

Capture is best effort.  A failure to write an artifact is logged and
swallowed; it must never mask the real test outcome.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def safe_test_name(nodeid: str) -> str:
    """
    Turn a pytest node id or test name into a file-system friendly name.

    ``tests/e2e/test_auth.py::TestX::test_y[chromium]`` becomes
    ``tests_e2e_test_auth.py_TestX_test_y_chromium``.
    """
    name = nodeid.replace("::", "_").replace("/", "_")
    return _UNSAFE_CHARS.sub("_", name).strip("_")


def artifact_path(root: str | Path, kind: str, test_name: str, suffix: str) -> Path:
    """Build ``<root>/<kind>/<safe test name><suffix>`` and create its parent."""
    path = Path(root) / kind / f"{safe_test_name(test_name)}{suffix}"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def video_dir(root: str | Path, test_name: str) -> Path:
    """Directory holding the named videos of one test."""
    path = Path(root) / "videos" / safe_test_name(test_name)
    path.mkdir(parents=True, exist_ok=True)
    return path


def raw_video_dir(root: str | Path, test_name: str) -> Path:
    """Directory Playwright records into before videos are renamed."""
    path = video_dir(root, test_name) / "raw-videos"
    path.mkdir(parents=True, exist_ok=True)
    return path


def capture_screenshot(page: Page, path: str | Path, full_page: bool = False) -> Path | None:
    """
    Save a screenshot of ``page``.

    Returns:
        The path written, or None if the page could not be captured
        (for example because its context is already closed).
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        page.screenshot(path=str(target), full_page=full_page)
    except PlaywrightError as exc:
        logger.warning("Failed to capture screenshot %s: %s", target, exc)
        return None
    return target


def save_video(page: Page, name: str, output_dir: str | Path, enabled: bool = True) -> Path | None:
    """
    Save the video recorded for ``page`` as ``<output_dir>/<name>.webm``.

    Call this AFTER the page's context has been closed: Playwright only
    flushes the file on close.  The raw, randomly named recording is
    removed afterwards so each video exists once.

    Args:
        page: Page whose context was created with ``record_video_dir``.
        name: Descriptive file name without extension.
        output_dir: Directory for the renamed video.
        enabled: When False (video recording is off) nothing happens.

    Returns:
        Path of the saved video, or None when nothing was saved.
    """
    if not enabled:
        return None

    video = page.video
    if video is None:
        return None

    target = Path(output_dir) / f"{name}.webm"
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        video.save_as(str(target))
    except PlaywrightError as exc:
        logger.error("Failed to save video %s: %s", name, exc)
        return None

    try:
        original = Path(video.path())
        if original.exists() and original.resolve() != target.resolve():
            original.unlink()
    except (PlaywrightError, OSError) as exc:
        logger.debug("Could not remove raw video for %s: %s", name, exc)

    logger.info("Saved video %s", target)
    return target
