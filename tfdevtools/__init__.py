"""Formatting, linting, test-summary, coverage, tool-install and release commands for Go repositories."""

__version__ = "0.1.0"