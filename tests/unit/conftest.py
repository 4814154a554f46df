"""Shared fixtures for unit tests."""

from __future__ import annotations

import copy
import json
import threading
from typing import Any

import pytest

from kwimount_operator.settings import Settings
from kwimount_operator.utils.errors import AlreadyExists, PatchFailure

# Merge keys of the associative lists in a pod template
LIST_MERGE_KEYS = {
    "containers": "name",
    "env": "name",
    "volumeMounts": "mountPath",
    "volumes": "name",
}


def _fields_for(name: str | None, value: Any) -> dict[str, Any]:
    """Build the FieldsV1 set an apply configuration value claims."""
    if isinstance(value, dict):
        return {f"f:{key}": _fields_for(key, sub) for key, sub in value.items()}
    if isinstance(value, list) and name in LIST_MERGE_KEYS:
        merge_key = LIST_MERGE_KEYS[name]
        fields = {}
        for item in value:
            selector = json.dumps({merge_key: item[merge_key]}, separators=(",", ":"))
            fields[f"k:{selector}"] = {".": {}, **_fields_for(None, item)}
        return fields
    # Scalars and atomic lists are owned as a whole
    return {}


def _merge_list(live: list[dict[str, Any]], desired: list[dict[str, Any]], merge_key: str) -> list[dict[str, Any]]:
    merged = [dict(item) for item in live]
    for item in desired:
        for idx, existing in enumerate(merged):
            if existing.get(merge_key) == item[merge_key]:
                merged[idx] = {**existing, **copy.deepcopy(item)}
                break
        else:
            merged.append(copy.deepcopy(item))
    return merged


def _default_volume(volume: dict[str, Any]) -> dict[str, Any]:
    """Fill in the defaults the API server adds to volumes."""
    for source in ("configMap", "projected"):
        if source in volume:
            volume[source].setdefault("defaultMode", 420)
    return volume


class FakeClusterState:
    """In-memory cluster state with a simplified server-side apply.

    Every write is recorded in ``writes`` as ``(operation, kind, namespace, name)``.
    """

    def __init__(self) -> None:
        self.workload_identities: dict[tuple[str, str], dict[str, Any]] = {}
        self.providers: dict[tuple[str, str], dict[str, Any]] = {}
        self.config_maps: dict[tuple[str, str], dict[str, Any]] = {}
        self.deployments: dict[tuple[str, str], dict[str, Any]] = {}
        self.writes: list[tuple[str, str, str, str]] = []
        self.fail_apply_with: int | None = None
        # Writes are atomic on the API server
        self._write_lock = threading.Lock()

    def add_workload_identity(self, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.workload_identities[(meta["namespace"], meta["name"])] = copy.deepcopy(obj)

    def add_provider(self, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.providers[(meta["namespace"], meta["name"])] = copy.deepcopy(obj)

    def add_deployment(self, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.deployments[(meta["namespace"], meta["name"])] = copy.deepcopy(obj)

    def get_workload_identity(self, namespace: str, name: str) -> dict[str, Any] | None:
        return copy.deepcopy(self.workload_identities.get((namespace, name)))

    def get_provider(self, namespace: str, name: str) -> dict[str, Any] | None:
        return copy.deepcopy(self.providers.get((namespace, name)))

    def get_config_map(self, namespace: str, name: str) -> dict[str, Any] | None:
        return copy.deepcopy(self.config_maps.get((namespace, name)))

    def create_config_map(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        name = body["metadata"]["name"]
        with self._write_lock:
            if (namespace, name) in self.config_maps:
                raise AlreadyExists("ConfigMap", namespace, name, 409, "AlreadyExists")
            self.config_maps[(namespace, name)] = copy.deepcopy(body)
            self.writes.append(("create", "ConfigMap", namespace, name))
        return copy.deepcopy(body)

    def update_config_map_data(self, namespace: str, name: str, data: dict[str, str]) -> dict[str, Any]:
        obj = self.config_maps[(namespace, name)]
        obj["data"] = dict(data)
        self.writes.append(("update", "ConfigMap", namespace, name))
        return copy.deepcopy(obj)

    def get_deployment(self, namespace: str, name: str) -> dict[str, Any] | None:
        with self._write_lock:
            return copy.deepcopy(self.deployments.get((namespace, name)))

    def apply_deployment(
        self,
        namespace: str,
        name: str,
        body: dict[str, Any],
        field_manager: str,
        force: bool = True,
    ) -> dict[str, Any]:
        with self._write_lock:
            return self._apply(namespace, name, body, field_manager)

    def _apply(self, namespace: str, name: str, body: dict[str, Any], field_manager: str) -> dict[str, Any]:
        if self.fail_apply_with is not None:
            raise PatchFailure("Deployment", namespace, name, self.fail_apply_with, "rejected")

        live = self.deployments[(namespace, name)]
        desired_spec = body["spec"]["template"]["spec"]
        pod_spec = live.setdefault("spec", {}).setdefault("template", {}).setdefault("spec", {})

        containers = _merge_list(pod_spec.get("containers") or [], [], "name")
        for desired in desired_spec.get("containers") or []:
            for container in containers:
                if container["name"] == desired["name"]:
                    break
            else:
                container = {"name": desired["name"]}
                containers.append(container)
            for key in ("env", "volumeMounts"):
                if key in desired:
                    container[key] = _merge_list(container.get(key) or [], desired[key], LIST_MERGE_KEYS[key])
        pod_spec["containers"] = containers

        volumes = _merge_list(pod_spec.get("volumes") or [], desired_spec.get("volumes") or [], "name")
        pod_spec["volumes"] = [_default_volume(volume) for volume in volumes]

        meta = live.setdefault("metadata", {})
        entries = [
            entry
            for entry in meta.get("managedFields") or []
            if not (entry.get("manager") == field_manager and entry.get("operation") == "Apply")
        ]
        entries.append({
            "manager": field_manager,
            "operation": "Apply",
            "apiVersion": "apps/v1",
            "fieldsType": "FieldsV1",
            "fieldsV1": {"f:spec": _fields_for("spec", body["spec"])},
        })
        meta["managedFields"] = entries
        meta["generation"] = meta.get("generation", 1) + 1

        self.writes.append(("apply", "Deployment", namespace, name))
        return copy.deepcopy(live)


def make_workload_identity(
    name: str = "wi",
    namespace: str = "apps",
    deployment: str = "api",
    service_account: str = "sa@proj.iam.gserviceaccount.com",
    provider_name: str = "gcp",
    provider_namespace: str | None = None,
) -> dict[str, Any]:
    provider: dict[str, Any] = {"name": provider_name}
    if provider_namespace is not None:
        provider["namespace"] = provider_namespace
    return {
        "apiVersion": "k8s.piny940.com/v1alpha1",
        "kind": "WorkloadIdentity",
        "metadata": {"name": name, "namespace": namespace, "uid": "wi-uid", "generation": 1},
        "spec": {
            "deployment": deployment,
            "targetServiceAccount": service_account,
            "provider": provider,
        },
    }


def make_provider(
    name: str = "gcp",
    namespace: str = "apps",
    target: str = "gcp",
    pool_id: str = "pool-1",
    provider_id: str = "prov-1",
    number: Any = "12345",
    location: str | None = "global",
) -> dict[str, Any]:
    spec: dict[str, Any] = {
        "target": target,
        "poolID": pool_id,
        "providerID": provider_id,
        "project": {"name": "proj", "number": number},
    }
    if location is not None:
        spec["location"] = location
    return {
        "apiVersion": "k8s.piny940.com/v1alpha1",
        "kind": "Provider",
        "metadata": {"name": name, "namespace": namespace, "uid": "provider-uid", "generation": 1},
        "spec": spec,
    }


def make_deployment(
    name: str = "api",
    namespace: str = "apps",
    containers: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "generation": 1,
            "managedFields": [
                {
                    "manager": "kubectl-client-side-apply",
                    "operation": "Update",
                    "apiVersion": "apps/v1",
                    "fieldsType": "FieldsV1",
                    "fieldsV1": {"f:spec": {"f:replicas": {}}},
                },
            ],
        },
        "spec": {
            "replicas": 2,
            "template": {
                "metadata": {"labels": {"app": name}},
                "spec": {
                    "containers": [
                        {"name": container, "image": f"{container}:latest"}
                        for container in (containers or ["app"])
                    ],
                },
            },
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def cluster() -> FakeClusterState:
    return FakeClusterState()
