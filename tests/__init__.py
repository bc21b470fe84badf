"""
Test suite for the pelada web app.

This package contains:
- e2e/: Browser scenarios using Playwright, one browser context per actor
- unit/: Fast tests for the polling, artifact and configuration helpers
"""
