"""Cluster state accessor interface."""

from __future__ import annotations

from typing import Any, Protocol


class ClusterState(Protocol):
    """Protocol defining the cluster reads and writes used by reconciliation.

    Objects are exchanged as plain dictionaries in camelCase API form. Getters
    return None when the object does not exist.
    """

    def get_workload_identity(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Get a WorkloadIdentity."""
        ...

    def get_provider(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Get a Provider."""
        ...

    def get_config_map(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Get a ConfigMap."""
        ...

    def create_config_map(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        """Create a ConfigMap.

        Raises:
            AlreadyExists: If a ConfigMap with the same name exists
        """
        ...

    def update_config_map_data(self, namespace: str, name: str, data: dict[str, str]) -> dict[str, Any]:
        """Set the data of an existing ConfigMap."""
        ...

    def get_deployment(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Get a Deployment."""
        ...

    def apply_deployment(
        self,
        namespace: str,
        name: str,
        body: dict[str, Any],
        field_manager: str,
        force: bool = True,
    ) -> dict[str, Any]:
        """Server-side apply a Deployment apply configuration.

        Args:
            namespace: Deployment namespace
            name: Deployment name
            body: Apply configuration holding only the fields owned by the caller
            field_manager: Field manager identity for ownership tracking
            force: Take ownership of conflicting fields
        """
        ...
