"""Utility functions for the kwimount operator."""

from .conditions import (
    set_available_condition,
    set_done_condition,
    set_fail_condition,
    set_failed_condition,
    update_condition,
)
from .events import emit_event
from .managed_fields import extract_owned, find_managed_fields
from .rate_limit import handle_rate_limit_error, rate_limit_k8s

__all__ = [
    "update_condition",
    "set_done_condition",
    "set_fail_condition",
    "set_available_condition",
    "set_failed_condition",
    "emit_event",
    "extract_owned",
    "find_managed_fields",
    "rate_limit_k8s",
    "handle_rate_limit_error",
]
