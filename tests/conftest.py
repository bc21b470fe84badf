"""
Shared pytest fixtures for the pelada test suite.

This module contains fixtures that are shared across all test modules:
per-run identifiers and factories for the simulated actors.  Nothing here
needs a browser, so the unit tests can use it too.

Key Concepts Demonstrated:
- Fixture scopes (function, session)
- Test data factories
- Uniqueness by timestamp instead of database cleanup
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from faker import Faker

from shared.test_helpers import Actor, make_actor, run_timestamp


# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Run Identity Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def timestamp() -> int:
    """
    Fresh millisecond timestamp for one test.

    Every scenario creates its own organization and users; the timestamp
    keeps their names unique against the shared application database,
    even when two workers run at once.
    """
    return run_timestamp()


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def actor_factory(timestamp: int) -> Callable[..., Actor]:
    """
    Factory fixture for simulated users.

    Returns:
        Function ``(role, prefix, position=None) -> Actor``.

    Example:
        def test_something(actor_factory):
            owner = actor_factory("Owner", "owner", position="Defender")
    """

    def _make(role: str, prefix: str, position: str | None = None) -> Actor:
        return make_actor(role, prefix, timestamp, position=position)

    return _make


@pytest.fixture
def password() -> str:
    """Random password for flows that change credentials."""
    return fake.password(length=14, special_chars=False)
