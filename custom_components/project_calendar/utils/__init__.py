"""Pure Python utilities for Project Calendar.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date parsing, formatting, and calendar arithmetic

Usage:
    from .utils import dt_utils
    from .utils.dt_utils import add_months
"""

from . import dt_utils

__all__ = ["dt_utils"]
