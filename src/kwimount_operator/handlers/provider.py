"""Handler for Provider CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.credential_config import get_credential_target
from ..constants import API_GROUP_VERSION, KIND_PROVIDER
from ..models import validate_provider_spec
from ..tracing import trace_span
from ..utils.conditions import set_available_condition, set_failed_condition
from ..utils.errors import UnsupportedProviderTarget, ValidationError
from ..utils.events import emit_validate_failed, emit_validate_succeeded
from .base import BaseHandler


class ProviderHandler(BaseHandler):
    """Handler for Provider resources.

    A Provider has nothing to create in the cluster. Reconciling it only
    reports whether WorkloadIdentities can use it.
    """

    def __init__(self):
        """Initialize provider handler."""
        super().__init__(KIND_PROVIDER)

    def reconcile(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile Provider resource."""
        name = meta.get("name", "unknown")
        generation = meta.get("generation")
        conditions = list(status.get("conditions") or [])

        with trace_span("reconcile_provider", kind=KIND_PROVIDER, attributes={"provider.name": name}):
            try:
                validate_provider_spec(spec)
                get_credential_target(spec["target"])
            except (ValidationError, UnsupportedProviderTarget) as e:
                message = str(e)
                reason = type(e).__name__
                self.log_warning(meta, message, reason=reason)
                emit_validate_failed(body, message)
                conditions = set_available_condition(conditions, False, message, generation)
                conditions = set_failed_condition(conditions, True, reason, message, generation)
                self.update_resource_status(patch, meta, False, {"conditions": conditions})
                raise kopf.PermanentError(message) from e

            emit_validate_succeeded(body)
            message = f"Provider target {spec['target']} is available"
            conditions = set_available_condition(conditions, True, message, generation)
            conditions = set_failed_condition(conditions, False, "Validated", message, generation)
            self.update_resource_status(patch, meta, True, {"conditions": conditions})


# Global handler instance
_handler = ProviderHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVIDER)
def handle_provider(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Provider resource reconciliation."""
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(body, spec, meta, status, patch))
