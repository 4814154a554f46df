"""Builder for provider-specific credential configuration documents."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from ..constants import (
    API_GROUP_VERSION,
    FIELD_MANAGER,
    GCP_AUDIENCE_FORMAT,
    GCP_IMPERSONATION_URL_FORMAT,
    GCP_SUBJECT_TOKEN_TYPE,
    GCP_TOKEN_URL,
    GCP_UNIVERSE_DOMAIN,
    KIND_WORKLOAD_IDENTITY,
    LABEL_MANAGED_BY,
    LABEL_WORKLOAD_IDENTITY,
    TARGET_GCP,
)
from ..models import Provider, WorkloadIdentity
from ..settings import Settings
from ..utils.errors import UnsupportedProviderTarget


@dataclass(frozen=True)
class CredentialTarget:
    """A supported provider target type.

    Attributes:
        audience: Builds the token audience for a provider
        render: Builds the credential configuration document text
    """

    name: str
    audience: Callable[[Provider], str]
    render: Callable[[Provider, WorkloadIdentity, Settings], str]


def gcp_audience(provider: Provider) -> str:
    """Build the workload identity pool provider audience."""
    return GCP_AUDIENCE_FORMAT.format(
        number=provider.spec.project.number,
        location=provider.spec.location,
        pool=provider.spec.pool_id,
        provider=provider.spec.provider_id,
    )


def render_gcp_configuration(
    provider: Provider,
    workload_identity: WorkloadIdentity,
    settings: Settings,
) -> str:
    """Render an external_account credential configuration for GCP.

    Args:
        provider: Provider describing the workload identity pool
        workload_identity: WorkloadIdentity naming the service account to impersonate
        settings: Operator settings holding the token file location

    Returns:
        JSON document as text
    """
    document = {
        "universe_domain": GCP_UNIVERSE_DOMAIN,
        "type": "external_account",
        "audience": gcp_audience(provider),
        "subject_token_type": GCP_SUBJECT_TOKEN_TYPE,
        "token_url": GCP_TOKEN_URL,
        "credential_source": {
            "file": settings.token_file,
            "format": {
                "type": "text",
            },
        },
        "service_account_impersonation_url": GCP_IMPERSONATION_URL_FORMAT.format(
            service_account=workload_identity.spec.target_service_account,
        ),
    }
    return json.dumps(document, indent=2)


TARGETS: dict[str, CredentialTarget] = {
    TARGET_GCP: CredentialTarget(
        name=TARGET_GCP,
        audience=gcp_audience,
        render=render_gcp_configuration,
    ),
}


def get_credential_target(target: str) -> CredentialTarget:
    """Look up the generator for a provider target type.

    Raises:
        UnsupportedProviderTarget: If the target type is not registered
    """
    try:
        return TARGETS[target]
    except KeyError:
        raise UnsupportedProviderTarget(target) from None


def generate_credential_config(
    provider: Provider,
    workload_identity: WorkloadIdentity,
    settings: Settings,
) -> dict[str, str]:
    """Create the generated config object data for a WorkloadIdentity.

    Args:
        provider: Provider referenced by the WorkloadIdentity
        workload_identity: WorkloadIdentity being reconciled
        settings: Operator settings

    Returns:
        Mapping of the configuration file name to the document text

    Raises:
        UnsupportedProviderTarget: If the provider target type is unknown
    """
    target = get_credential_target(provider.spec.target)
    return {settings.config_file_name: target.render(provider, workload_identity, settings)}


def build_config_map(
    workload_identity: WorkloadIdentity,
    data: dict[str, str],
) -> dict[str, Any]:
    """Build the generated config object owned by a WorkloadIdentity.

    Args:
        workload_identity: Owning WorkloadIdentity
        data: Generated configuration data

    Returns:
        ConfigMap body
    """
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": workload_identity.config_name,
            "namespace": workload_identity.namespace,
            "labels": {
                LABEL_MANAGED_BY: FIELD_MANAGER,
                LABEL_WORKLOAD_IDENTITY: workload_identity.name,
            },
            "ownerReferences": [
                {
                    "apiVersion": API_GROUP_VERSION,
                    "kind": KIND_WORKLOAD_IDENTITY,
                    "name": workload_identity.name,
                    "uid": workload_identity.uid,
                    "controller": True,
                    "blockOwnerDeletion": True,
                },
            ],
        },
        "data": dict(data),
    }
