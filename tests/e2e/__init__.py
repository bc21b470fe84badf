"""
End-to-end test package for the pelada web app.

This package contains Playwright-based browser scenarios and demonstrates:
- Page Object Model (POM) pattern
- Isolated browser contexts for multi-user flows
- Locator strategies using data-testid attributes
- Polling for eventually-consistent UI state
"""
