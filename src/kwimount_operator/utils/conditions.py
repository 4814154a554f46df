"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_AVAILABLE, COND_DONE, COND_FAIL, COND_FAILED


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()
    conditions = [dict(cond) for cond in conditions]

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }
    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    for idx, existing in enumerate(conditions):
        if existing.get("type") != condition_type:
            continue
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[idx] = new_condition
        return conditions

    conditions.append(new_condition)
    return conditions


def set_done_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Done condition of a WorkloadIdentity."""
    return update_condition(
        conditions,
        COND_DONE,
        "True" if status else "False",
        reason,
        message,
        observed_generation,
    )


def set_fail_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Fail condition of a WorkloadIdentity."""
    return update_condition(
        conditions,
        COND_FAIL,
        "True" if status else "False",
        reason,
        message,
        observed_generation,
    )


def set_available_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Available condition of a Provider."""
    return update_condition(
        conditions,
        COND_AVAILABLE,
        "True" if status else "False",
        "Available" if status else "Unavailable",
        message,
        observed_generation,
    )


def set_failed_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Failed condition of a Provider."""
    return update_condition(
        conditions,
        COND_FAILED,
        "True" if status else "False",
        reason,
        message,
        observed_generation,
    )
