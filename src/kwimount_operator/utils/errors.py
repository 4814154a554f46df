"""Error types raised during reconciliation and error sanitization helpers."""

from __future__ import annotations

import re


class OperatorError(Exception):
    """Base class for all errors raised by the operator."""


class DependencyNotFound(OperatorError):
    """A referenced Provider or workload does not exist (yet)."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f"{kind} {name} not found in namespace {namespace}")


class WorkloadIdentityNotFound(OperatorError):
    """The WorkloadIdentity named by a trigger no longer exists."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f"WorkloadIdentity {name} not found in namespace {namespace}")


class UnsupportedProviderTarget(OperatorError):
    """The Provider's target type has no credential generator."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"unsupported provider target type {target!r}")


class ValidationError(OperatorError):
    """A resource spec violates a required-field invariant."""

    def __init__(self, field_path: str, message: str):
        self.field_path = field_path
        self.message = message
        super().__init__(f"{field_path}: {message}")


class PatchFailure(OperatorError):
    """The API server rejected a write."""

    def __init__(self, kind: str, namespace: str, name: str, status: int | None, reason: str = ""):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.status = status
        self.reason = reason
        # Set by the engine when the credential config was written earlier in the same attempt
        self.config_created = False
        super().__init__(f"failed to write {kind} {namespace}/{name} (status={status}): {reason}")


class ApplyConflict(PatchFailure):
    """The API server reported a conflict for a write."""


class AlreadyExists(ApplyConflict):
    """A create found the object already present."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"(bearer)\s+[A-Za-z0-9\-_\.=]+",
    r"(token)[\"']?\s*[:=]\s*[\"']?[A-Za-z0-9\-_\.=]+",
    r"(authorization)[\"']?\s*[:=]\s*[\"']?[^\s,;\"']+",
]


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove credentials.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))
