"""Locale handles for translating user-facing messages."""

from .locale import LocaleHandle, get_handle

__all__ = [
    "LocaleHandle",
    "get_handle",
]
