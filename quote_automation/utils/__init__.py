"""Utilities — logging setup."""

from quote_automation.utils.logger import setup_logging

__all__ = ["setup_logging"]
