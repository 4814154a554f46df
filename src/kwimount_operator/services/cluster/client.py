"""Kubernetes API implementation of the cluster state accessor."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import (
    API_GROUP,
    API_VERSION,
    KIND_CONFIG_MAP,
    KIND_DEPLOYMENT,
    PLURAL_PROVIDER,
    PLURAL_WORKLOAD_IDENTITY,
)
from ...utils.errors import AlreadyExists, ApplyConflict, PatchFailure
from ...utils.rate_limit import handle_rate_limit_error, rate_limit_k8s, reset_rate_limit_retries

logger = logging.getLogger(__name__)

APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubernetesClusterState:
    """Cluster state accessor backed by the Kubernetes API."""

    def __init__(self, api_client: client.ApiClient | None = None) -> None:
        """Initialize the accessor.

        Args:
            api_client: Optional configured API client (defaults to the global configuration)
        """
        self.api_client = api_client or client.ApiClient()
        self.core = client.CoreV1Api(self.api_client)
        self.apps = client.AppsV1Api(self.api_client)
        self.custom = client.CustomObjectsApi(self.api_client)

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        """Call the API with rate limiting and metrics."""
        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(**kwargs)
            reset_rate_limit_retries()
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            if e.status == 404:
                metrics.api_call_total.labels(api_type="k8s", operation=operation, result="not_found").inc()
                raise
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            if handle_rate_limit_error(e):
                metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
                return self._call(operation, fn, **kwargs)
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def _get(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        """Call a read operation, mapping 404 to None."""
        try:
            return self._call(operation, fn, **kwargs)
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def _to_dict(self, obj: Any, api_version: str, kind: str) -> dict[str, Any]:
        """Convert a typed API model to its camelCase dictionary form."""
        data = self.api_client.sanitize_for_serialization(obj)
        data.setdefault("apiVersion", api_version)
        data.setdefault("kind", kind)
        return data

    def get_workload_identity(self, namespace: str, name: str) -> dict[str, Any] | None:
        return self._get(
            "get_workload_identity",
            self.custom.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_WORKLOAD_IDENTITY,
            name=name,
        )

    def get_provider(self, namespace: str, name: str) -> dict[str, Any] | None:
        return self._get(
            "get_provider",
            self.custom.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_PROVIDER,
            name=name,
        )

    def get_config_map(self, namespace: str, name: str) -> dict[str, Any] | None:
        obj = self._get("get_config_map", self.core.read_namespaced_config_map, name=name, namespace=namespace)
        if obj is None:
            return None
        return self._to_dict(obj, "v1", KIND_CONFIG_MAP)

    def create_config_map(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        name = (body.get("metadata") or {}).get("name", "")
        try:
            obj = self._call("create_config_map", self.core.create_namespaced_config_map, namespace=namespace, body=body)
        except ApiException as e:
            if e.status == 409:
                raise AlreadyExists(KIND_CONFIG_MAP, namespace, name, e.status, e.reason or "") from e
            raise _write_error(KIND_CONFIG_MAP, namespace, name, e) from e
        return self._to_dict(obj, "v1", KIND_CONFIG_MAP)

    def update_config_map_data(self, namespace: str, name: str, data: dict[str, str]) -> dict[str, Any]:
        try:
            obj = self._call(
                "patch_config_map",
                self.core.patch_namespaced_config_map,
                name=name,
                namespace=namespace,
                body={"data": data},
            )
        except ApiException as e:
            raise _write_error(KIND_CONFIG_MAP, namespace, name, e) from e
        return self._to_dict(obj, "v1", KIND_CONFIG_MAP)

    def get_deployment(self, namespace: str, name: str) -> dict[str, Any] | None:
        obj = self._get("get_deployment", self.apps.read_namespaced_deployment, name=name, namespace=namespace)
        if obj is None:
            return None
        return self._to_dict(obj, "apps/v1", KIND_DEPLOYMENT)

    def apply_deployment(
        self,
        namespace: str,
        name: str,
        body: dict[str, Any],
        field_manager: str,
        force: bool = True,
    ) -> dict[str, Any]:
        try:
            obj = self._call(
                "apply_deployment",
                self.apps.patch_namespaced_deployment,
                name=name,
                namespace=namespace,
                body=body,
                field_manager=field_manager,
                force=force,
                _content_type=APPLY_PATCH_CONTENT_TYPE,
            )
        except ApiException as e:
            raise _write_error(KIND_DEPLOYMENT, namespace, name, e) from e
        return self._to_dict(obj, "apps/v1", KIND_DEPLOYMENT)


def _write_error(kind: str, namespace: str, name: str, error: ApiException) -> PatchFailure:
    """Map an API exception raised by a write to the operator error taxonomy."""
    if error.status == 409:
        return ApplyConflict(kind, namespace, name, error.status, error.reason or "")
    return PatchFailure(kind, namespace, name, error.status, error.reason or "")
