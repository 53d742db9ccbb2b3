# aquadash/config/__init__.py

from .status_registry import badge_css, display_for, statuses_for

__all__ = ["badge_css", "display_for", "statuses_for"]
