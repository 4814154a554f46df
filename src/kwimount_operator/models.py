"""Resource models for WorkloadIdentity and Provider objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .constants import DEFAULT_LOCATION
from .utils.errors import ValidationError


@dataclass
class ProviderReference:
    """Reference from a WorkloadIdentity to a Provider."""

    name: str = ""
    namespace: str = ""


@dataclass
class WorkloadIdentitySpec:
    """Desired state of a WorkloadIdentity."""

    deployment: str = ""
    target_service_account: str = ""
    provider: ProviderReference = field(default_factory=ProviderReference)


@dataclass
class WorkloadIdentity:
    """A request to grant a Deployment access to an external identity provider."""

    name: str
    namespace: str
    spec: WorkloadIdentitySpec
    uid: str = ""
    generation: int = 0

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> WorkloadIdentity:
        """Build a WorkloadIdentity from a Kubernetes object body."""
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        provider = spec.get("provider") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            uid=meta.get("uid", ""),
            generation=meta.get("generation", 0),
            spec=WorkloadIdentitySpec(
                deployment=spec.get("deployment") or "",
                target_service_account=spec.get("targetServiceAccount") or "",
                provider=ProviderReference(
                    name=provider.get("name") or "",
                    namespace=provider.get("namespace") or "",
                ),
            ),
        )

    @property
    def provider_namespace(self) -> str:
        """Namespace of the referenced Provider, defaulting to our own."""
        return self.spec.provider.namespace or self.namespace

    @property
    def config_name(self) -> str:
        """Name of the generated credential configuration object."""
        return f"kwimount-{self.name}-{self.spec.deployment}-conf"


@dataclass
class Project:
    """Cloud project owning the identity pool."""

    name: str = ""
    number: str = ""


@dataclass
class ProviderSpec:
    """Identity federation endpoint description."""

    target: str = ""
    pool_id: str = ""
    provider_id: str = ""
    location: str = DEFAULT_LOCATION
    project: Project = field(default_factory=Project)


@dataclass
class Provider:
    """An external identity federation endpoint."""

    name: str
    namespace: str
    spec: ProviderSpec
    uid: str = ""
    generation: int = 0

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> Provider:
        """Build a Provider from a Kubernetes object body."""
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        project = spec.get("project") or {}
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            uid=meta.get("uid", ""),
            generation=meta.get("generation", 0),
            spec=ProviderSpec(
                target=spec.get("target") or "",
                pool_id=spec.get("poolID") or "",
                provider_id=spec.get("providerID") or "",
                location=spec.get("location") or DEFAULT_LOCATION,
                project=Project(
                    name=project.get("name") or "",
                    number=str(project.get("number") or ""),
                ),
            ),
        )


def default_workload_identity_spec(spec: dict[str, Any], namespace: str) -> dict[str, Any]:
    """Return the defaults missing from a WorkloadIdentity spec.

    Args:
        spec: WorkloadIdentity spec as submitted
        namespace: Namespace of the WorkloadIdentity

    Returns:
        Spec fragment holding only the defaulted fields (empty if nothing to default)
    """
    provider = spec.get("provider") or {}
    if not provider.get("namespace"):
        return {"provider": {"namespace": namespace}}
    return {}


def default_provider_spec(spec: dict[str, Any]) -> dict[str, Any]:
    """Return the defaults missing from a Provider spec."""
    if not spec.get("location"):
        return {"location": DEFAULT_LOCATION}
    return {}


def validate_workload_identity_spec(spec: dict[str, Any]) -> None:
    """Validate required WorkloadIdentity fields.

    Raises:
        ValidationError: If a required field is empty
    """
    if not spec.get("deployment"):
        raise ValidationError("spec.deployment", "deployment cannot be empty")
    if not spec.get("targetServiceAccount"):
        raise ValidationError("spec.targetServiceAccount", "targetServiceAccount cannot be empty")
    provider = spec.get("provider") or {}
    if not provider.get("name"):
        raise ValidationError("spec.provider.name", "provider name cannot be empty")


def validate_provider_spec(spec: dict[str, Any]) -> None:
    """Validate required Provider fields.

    Raises:
        ValidationError: If a required field is empty
    """
    for key in ("target", "poolID", "providerID"):
        if not spec.get(key):
            raise ValidationError(f"spec.{key}", f"{key} cannot be empty")
    project = spec.get("project") or {}
    if not project:
        raise ValidationError("spec.project", "project cannot be empty")
    for key in ("name", "number"):
        if not project.get(key):
            raise ValidationError(f"spec.project.{key}", f"project {key} cannot be empty")
