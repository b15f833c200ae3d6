"""Playwright helpers, page objects and reporting for the Mercari UI suite."""

__version__ = "0.1.0"
