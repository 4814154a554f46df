"""Admission webhooks for WorkloadIdentity and Provider resources.

Mutating webhooks fill in defaults before the object is stored. Validating
webhooks reject objects with empty required fields, so users get immediate
feedback instead of a failed reconciliation.

This module is only imported when webhooks are enabled, otherwise kopf would
register admission handlers without an admission server.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from .constants import API_GROUP_VERSION, KIND_PROVIDER, KIND_WORKLOAD_IDENTITY
from .models import (
    default_provider_spec,
    default_workload_identity_spec,
    validate_provider_spec,
    validate_workload_identity_spec,
)
from .utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _merge_defaults(patch: kopf.Patch, spec: dict[str, Any], defaults: dict[str, Any]) -> None:
    for key, value in defaults.items():
        if isinstance(value, dict):
            patch.spec[key] = {**(spec.get(key) or {}), **value}
        else:
            patch.spec[key] = value


@kopf.on.mutate(API_GROUP_VERSION, KIND_WORKLOAD_IDENTITY, id="default-workloadidentity", operations=["CREATE", "UPDATE"])
def default_workload_identity(
    spec: dict[str, Any],
    namespace: str,
    name: str,
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Default the Provider namespace to the WorkloadIdentity's own namespace."""
    defaults = default_workload_identity_spec(spec, namespace)
    if defaults:
        logger.debug(f"Defaulting WorkloadIdentity {namespace}/{name}: {defaults}")
        _merge_defaults(patch, spec, defaults)


@kopf.on.validate(API_GROUP_VERSION, KIND_WORKLOAD_IDENTITY, id="validate-workloadidentity", operations=["CREATE", "UPDATE"])
def validate_workload_identity(
    spec: dict[str, Any],
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Reject WorkloadIdentities with empty required fields.

    Raises:
        kopf.AdmissionError: If validation fails
    """
    try:
        validate_workload_identity_spec(spec)
    except ValidationError as e:
        logger.warning(f"WorkloadIdentity {namespace}/{name} validation failed: {e}")
        raise kopf.AdmissionError(str(e)) from e


@kopf.on.mutate(API_GROUP_VERSION, KIND_PROVIDER, id="default-provider", operations=["CREATE", "UPDATE"])
def default_provider(
    spec: dict[str, Any],
    namespace: str,
    name: str,
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Default the Provider location to ``global``."""
    defaults = default_provider_spec(spec)
    if defaults:
        logger.debug(f"Defaulting Provider {namespace}/{name}: {defaults}")
        _merge_defaults(patch, spec, defaults)


@kopf.on.validate(API_GROUP_VERSION, KIND_PROVIDER, id="validate-provider", operations=["CREATE", "UPDATE"])
def validate_provider(
    spec: dict[str, Any],
    namespace: str,
    name: str,
    **kwargs: Any,
) -> None:
    """Reject Providers with empty required fields.

    Raises:
        kopf.AdmissionError: If validation fails
    """
    try:
        validate_provider_spec(spec)
    except ValidationError as e:
        logger.warning(f"Provider {namespace}/{name} validation failed: {e}")
        raise kopf.AdmissionError(str(e)) from e
