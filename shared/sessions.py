"""
Per-actor browser sessions for multi-user E2E scenarios.

A scenario such as "owner invites, player accepts, admin edits the match"
needs one isolated browser context per actor.  :class:`ActorSessions` opens
those contexts with the run profile's timeouts, tracing and video settings
and tears them all down at the end of the test, saving each actor's trace
and video under the actor's label.
"""

from __future__ import annotations

import logging

from playwright.sync_api import Browser, BrowserContext, Page
from playwright.sync_api import Error as PlaywrightError

from config import Config
from shared.artifacts import artifact_path, raw_video_dir, save_video, video_dir

logger = logging.getLogger(__name__)


def apply_timeouts(context: BrowserContext, e2e_config: type[Config]) -> None:
    """Set the profile's action and navigation timeouts on ``context``."""
    context.set_default_timeout(e2e_config.ACTION_TIMEOUT * 1000)
    context.set_default_navigation_timeout(e2e_config.NAVIGATION_TIMEOUT * 1000)


class ActorSessions:
    """
    Isolated browser sessions, one per simulated actor.

    Each call to :meth:`open` creates a new browser context (its own cookie
    jar and storage) and a page in it.  :meth:`close` closes every context,
    even when one of them fails to close, and then saves the recorded
    videos.

    Attributes:
        pages: Open pages keyed by actor label.
        contexts: Browser contexts keyed by actor label.
    """

    def __init__(self, browser: Browser, context_args: dict, e2e_config: type[Config], test_name: str):
        self.browser = browser
        self.context_args = context_args
        self.config = e2e_config
        self.test_name = test_name
        self.pages: dict[str, Page] = {}
        self.contexts: dict[str, BrowserContext] = {}

    @property
    def tracing(self) -> bool:
        return self.config.TRACING != "off"

    def open(self, label: str, accept_dialogs: bool = False) -> Page:
        """
        Open a new isolated session for ``label`` ("owner", "player", ...).

        Args:
            label: Name of the actor; used for logs and artifact file names.
            accept_dialogs: Auto-accept native confirm() dialogs.

        Raises:
            ValueError: If a session with this label is already open.
        """
        if label in self.pages:
            raise ValueError(f"Session {label!r} is already open")

        options = dict(self.context_args)
        if self.config.VIDEO:
            options["record_video_dir"] = str(raw_video_dir(self.config.ARTIFACTS_DIR, self.test_name))
        context = self.browser.new_context(**options)
        apply_timeouts(context, self.config)
        if self.tracing:
            context.tracing.start(screenshots=True, snapshots=True)
        self.contexts[label] = context

        page = context.new_page()
        console_logger = logging.getLogger(f"browser.{label}")
        page.on("console", lambda msg: console_logger.debug("%s: %s", msg.type, msg.text))
        if accept_dialogs:
            page.on("dialog", lambda dialog: dialog.accept())
        self.pages[label] = page
        logger.debug("Opened session %s for %s", label, self.test_name)
        return page

    def close(self, failed: bool = False) -> None:
        """
        Close every session, keeping traces and videos as configured.

        Args:
            failed: Whether the test failed; with ``retain-on-failure``
                tracing, traces are only written when this is True.
        """
        try:
            for label, context in self.contexts.items():
                self._close_context(label, context, failed)
        finally:
            self._save_videos()

    def _close_context(self, label: str, context: BrowserContext, failed: bool) -> None:
        if self.tracing:
            try:
                if self.config.TRACING == "on" or failed:
                    path = artifact_path(
                        self.config.ARTIFACTS_DIR, "traces", f"{self.test_name}_{label}", ".zip"
                    )
                    context.tracing.stop(path=str(path))
                    logger.info("Saved trace %s", path)
                else:
                    context.tracing.stop()
            except PlaywrightError as exc:
                logger.warning("Failed to stop tracing for session %s: %s", label, exc)
        try:
            context.close()
        except PlaywrightError as exc:
            logger.warning("Failed to close session %s: %s", label, exc)

    def _save_videos(self) -> None:
        if not self.config.VIDEO:
            return
        output = video_dir(self.config.ARTIFACTS_DIR, self.test_name)
        for label, page in self.pages.items():
            save_video(page, label, output)
