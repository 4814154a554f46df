"""Builder for the field-owned pod template patch applied to a workload."""

from __future__ import annotations

from typing import Any

from ..constants import GOOGLE_CREDENTIALS_ENV
from ..models import Provider, WorkloadIdentity
from ..settings import Settings
from .credential_config import get_credential_target


def plan_pod_template(
    current_template: dict[str, Any],
    provider: Provider,
    workload_identity: WorkloadIdentity,
    config_name: str,
    settings: Settings,
) -> dict[str, Any]:
    """Compute the pod template fields owned by the operator.

    Only container names are read from the current template. Every other
    container or pod field is left to its existing owners.

    Args:
        current_template: Current pod template of the workload (camelCase API form)
        provider: Provider referenced by the WorkloadIdentity
        workload_identity: WorkloadIdentity being reconciled
        config_name: Name of the generated config object
        settings: Operator settings

    Returns:
        Desired pod template holding only the fields this operator sets

    Raises:
        UnsupportedProviderTarget: If the provider target type is unknown
    """
    audience = get_credential_target(provider.spec.target).audience(provider)
    current_spec = current_template.get("spec") or {}

    containers = []
    for container in current_spec.get("containers") or []:
        containers.append({
            "name": container["name"],
            "env": [
                {
                    "name": GOOGLE_CREDENTIALS_ENV,
                    "value": settings.config_file,
                },
            ],
            "volumeMounts": [
                {
                    "name": settings.token_volume_name,
                    "mountPath": settings.token_mount_path,
                    "readOnly": True,
                },
                {
                    "name": config_name,
                    "mountPath": settings.config_mount_path,
                    "readOnly": True,
                },
            ],
        })

    volumes = [
        {
            "name": config_name,
            "configMap": {
                "name": config_name,
            },
        },
        {
            "name": settings.token_volume_name,
            "projected": {
                "sources": [
                    {
                        "serviceAccountToken": {
                            "audience": audience,
                            "expirationSeconds": settings.token_expiration_seconds,
                            "path": settings.token_path,
                        },
                    },
                ],
            },
        },
    ]

    return {
        "spec": {
            "containers": containers,
            "volumes": volumes,
        },
    }


def build_deployment_overlay(
    workload_identity: WorkloadIdentity,
    pod_template: dict[str, Any],
) -> dict[str, Any]:
    """Wrap a pod template into a Deployment apply configuration."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": workload_identity.spec.deployment,
            "namespace": workload_identity.namespace,
        },
        "spec": {
            "template": pod_template,
        },
    }
