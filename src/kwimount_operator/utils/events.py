"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CONFIG_CREATED,
    EVENT_REASON_DEPENDENCY_MISSING,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
    EVENT_REASON_WORKLOAD_PATCHED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body (or a reference with apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(body: dict[str, Any]) -> None:
    """Emit validation succeeded event."""
    emit_event(body, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_config_created(body: dict[str, Any], config_name: str) -> None:
    """Emit credential configuration created event."""
    emit_event(body, EVENT_REASON_CONFIG_CREATED, f"Credential configuration {config_name} created")


def emit_workload_patched(body: dict[str, Any], deployment: str) -> None:
    """Emit workload patched event."""
    emit_event(body, EVENT_REASON_WORKLOAD_PATCHED, f"Deployment {deployment} patched")


def emit_dependency_missing(body: dict[str, Any], message: str) -> None:
    """Emit missing dependency event."""
    emit_event(body, EVENT_REASON_DEPENDENCY_MISSING, message, type_="Warning")
