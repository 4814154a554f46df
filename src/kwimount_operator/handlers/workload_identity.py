"""Handler for WorkloadIdentity CRD.

Reconciliation runs ``FetchIntent -> FetchProvider -> ReconcileConfig ->
FetchWorkload -> ReconcileWorkload``. A missing Provider or Deployment ends
the attempt with a delayed retry. An unsupported provider target ends it with
a terminal failure. Every step is idempotent, so a later attempt picks up
wherever an earlier one stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import kopf

from .. import metrics
from ..builders.credential_config import build_config_map, generate_credential_config
from ..builders.workload_patch import build_deployment_overlay, plan_pod_template
from ..constants import (
    API_GROUP_VERSION,
    KIND_DEPLOYMENT,
    KIND_PROVIDER,
    KIND_WORKLOAD_IDENTITY,
)
from ..models import (
    Provider,
    WorkloadIdentity,
    validate_provider_spec,
    validate_workload_identity_spec,
)
from ..services.cluster.base import ClusterState
from ..settings import Settings, load_settings
from ..tracing import add_span_attribute, trace_span
from ..utils.conditions import set_done_condition, set_fail_condition
from ..utils.errors import (
    AlreadyExists,
    DependencyNotFound,
    PatchFailure,
    UnsupportedProviderTarget,
    ValidationError,
    WorkloadIdentityNotFound,
)
from ..utils.events import (
    emit_config_created,
    emit_dependency_missing,
    emit_reconcile_failed,
    emit_workload_patched,
)
from ..utils.managed_fields import extract_owned
from .base import BaseHandler


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation attempt."""

    requeue_after: float | None = None
    reason: str = ""
    message: str = ""
    config_created: bool = False
    workload_patched: bool = False

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


class WorkloadIdentityHandler(BaseHandler):
    """Handler for WorkloadIdentity resources."""

    def __init__(self, cluster: ClusterState, settings: Settings):
        """Initialize workload identity handler.

        Args:
            cluster: Accessor for cluster reads and writes
            settings: Operator settings
        """
        super().__init__(KIND_WORKLOAD_IDENTITY)
        self.cluster = cluster
        self.settings = settings

    def reconcile(self, namespace: str, name: str) -> ReconcileResult:
        """Drive the generated config and the target workload toward their desired state.

        Args:
            namespace: Namespace of the WorkloadIdentity
            name: Name of the WorkloadIdentity

        Returns:
            Outcome of the attempt, with ``requeue_after`` set when a dependency is missing

        Raises:
            WorkloadIdentityNotFound: If the WorkloadIdentity no longer exists
            ValidationError: If the WorkloadIdentity or Provider spec is invalid
            UnsupportedProviderTarget: If the Provider target type is unknown
            PatchFailure: If a write is rejected
        """
        with trace_span(
            "reconcile_workload_identity",
            kind=KIND_WORKLOAD_IDENTITY,
            attributes={"workload_identity.name": name, "workload_identity.namespace": namespace},
        ):
            workload_identity = self.fetch_intent(namespace, name)

            try:
                provider = self.fetch_provider(workload_identity)
            except DependencyNotFound as e:
                return self._schedule_retry(workload_identity, e, "ProviderNotFound")

            config_created = self.reconcile_config(workload_identity, provider)

            try:
                deployment = self.fetch_workload(workload_identity)
            except DependencyNotFound as e:
                result = self._schedule_retry(workload_identity, e, "DeploymentNotFound")
                result.config_created = config_created
                return result

            try:
                workload_patched = self.reconcile_workload(workload_identity, provider, deployment)
            except PatchFailure as e:
                e.config_created = config_created
                raise
            return ReconcileResult(
                reason="Reconciled",
                message=f"Deployment {workload_identity.spec.deployment} is configured",
                config_created=config_created,
                workload_patched=workload_patched,
            )

    def fetch_intent(self, namespace: str, name: str) -> WorkloadIdentity:
        """Read and validate the WorkloadIdentity."""
        obj = self.cluster.get_workload_identity(namespace, name)
        if obj is None:
            raise WorkloadIdentityNotFound(namespace, name)
        validate_workload_identity_spec(obj.get("spec") or {})
        return WorkloadIdentity.from_dict(obj)

    def fetch_provider(self, workload_identity: WorkloadIdentity) -> Provider:
        """Resolve the Provider referenced by a WorkloadIdentity.

        Raises:
            DependencyNotFound: If the Provider does not exist
        """
        provider_ns = workload_identity.provider_namespace
        provider_name = workload_identity.spec.provider.name
        with trace_span("fetch_provider", kind=KIND_PROVIDER, attributes={"provider.name": provider_name}):
            obj = self.cluster.get_provider(provider_ns, provider_name)
        if obj is None:
            raise DependencyNotFound(KIND_PROVIDER, provider_ns, provider_name)
        validate_provider_spec(obj.get("spec") or {})
        return Provider.from_dict(obj)

    def reconcile_config(self, workload_identity: WorkloadIdentity, provider: Provider) -> bool:
        """Create the generated config object if it is absent.

        Existing content is never overwritten. An existing object without data
        is filled in.

        Returns:
            True if the object was written
        """
        meta = _meta_of(workload_identity)
        config_name = workload_identity.config_name
        with trace_span("reconcile_config", kind=KIND_WORKLOAD_IDENTITY, attributes={"config.name": config_name}):
            data = generate_credential_config(provider, workload_identity, self.settings)

            existing = self.cluster.get_config_map(workload_identity.namespace, config_name)
            if existing is None:
                try:
                    self.cluster.create_config_map(
                        workload_identity.namespace,
                        build_config_map(workload_identity, data),
                    )
                except AlreadyExists:
                    # Another attempt created it between our read and write
                    self.log_info(
                        meta,
                        f"Credential configuration {config_name} already exists",
                        reason="AlreadyExists",
                    )
                    return False
                self.log_info(meta, f"Created credential configuration {config_name}", reason="ConfigCreated")
            elif not existing.get("data"):
                self.cluster.update_config_map_data(workload_identity.namespace, config_name, data)
                self.log_info(meta, f"Filled empty credential configuration {config_name}", reason="ConfigCreated")
            else:
                return False

            metrics.config_maps_created_total.labels(target=provider.spec.target).inc()
            return True

    def fetch_workload(self, workload_identity: WorkloadIdentity) -> dict[str, Any]:
        """Read the target Deployment.

        Raises:
            DependencyNotFound: If the Deployment does not exist
        """
        namespace = workload_identity.namespace
        name = workload_identity.spec.deployment
        obj = self.cluster.get_deployment(namespace, name)
        if obj is None:
            raise DependencyNotFound(KIND_DEPLOYMENT, namespace, name)
        return obj

    def reconcile_workload(
        self,
        workload_identity: WorkloadIdentity,
        provider: Provider,
        deployment: dict[str, Any],
    ) -> bool:
        """Apply the desired pod template fields if the owned ones differ.

        Returns:
            True if an apply was sent
        """
        meta = _meta_of(workload_identity)
        name = workload_identity.spec.deployment
        with trace_span("reconcile_workload", kind=KIND_DEPLOYMENT, attributes={"deployment.name": name}):
            current_template = (deployment.get("spec") or {}).get("template") or {}
            desired = build_deployment_overlay(
                workload_identity,
                plan_pod_template(
                    current_template,
                    provider,
                    workload_identity,
                    workload_identity.config_name,
                    self.settings,
                ),
            )
            owned = extract_owned(deployment, self.settings.field_manager)
            if owned == desired:
                metrics.workload_patches_total.labels(result="skipped").inc()
                add_span_attribute("deployment.patched", False)
                return False

            self.cluster.apply_deployment(
                workload_identity.namespace,
                name,
                desired,
                field_manager=self.settings.field_manager,
                force=True,
            )
            metrics.workload_patches_total.labels(result="applied").inc()
            add_span_attribute("deployment.patched", True)
            self.log_info(meta, f"Patched Deployment {name}", reason="WorkloadPatched", deployment=name)
            return True

    def _schedule_retry(
        self,
        workload_identity: WorkloadIdentity,
        error: DependencyNotFound,
        reason: str,
    ) -> ReconcileResult:
        delay = self.settings.retry_interval_seconds
        message = f"{error}. Will retry in {int(delay)} seconds"
        self.log_info(_meta_of(workload_identity), message, reason=reason, retry_after=delay)
        metrics.retries_scheduled_total.labels(kind=error.kind, reason=reason).inc()
        return ReconcileResult(requeue_after=delay, reason=reason, message=message)

    def handle(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        retry: bool = True,
    ) -> None:
        """Run one attempt and translate its outcome for kopf.

        Args:
            body: WorkloadIdentity body
            meta: WorkloadIdentity metadata
            status: Current status
            patch: Patch collecting the status update
            retry: Whether a missing dependency schedules a delayed retry. The
                resync timer passes False and waits for its next tick instead.

        Raises:
            kopf.TemporaryError: When a dependency is missing and ``retry`` is set
            kopf.PermanentError: When the spec needs human correction
            PatchFailure: When a write is rejected
        """
        generation = meta.get("generation")
        conditions = list(status.get("conditions") or [])

        try:
            result = self.reconcile(meta["namespace"], meta["name"])
        except WorkloadIdentityNotFound as e:
            self.log_info(meta, f"{e}, skipping stale trigger", reason="NotFound")
            return
        except (UnsupportedProviderTarget, ValidationError) as e:
            message = str(e)
            reason = type(e).__name__
            self.log_error(meta, message, error=e, reason=reason)
            emit_reconcile_failed(body, message)
            conditions = set_done_condition(conditions, False, reason, message, generation)
            conditions = set_fail_condition(conditions, True, reason, message, generation)
            self.update_resource_status(patch, meta, False, {"conditions": conditions})
            raise kopf.PermanentError(message) from e
        except PatchFailure as e:
            message = str(e)
            if e.config_created:
                emit_config_created(body, WorkloadIdentity.from_dict(body).config_name)
            emit_reconcile_failed(body, message)
            conditions = set_done_condition(conditions, False, "ApplyFailed", message, generation)
            conditions = set_fail_condition(conditions, True, "ApplyFailed", message, generation)
            self.update_resource_status(patch, meta, False, {"conditions": conditions})
            raise

        wi = WorkloadIdentity.from_dict(body)
        if result.config_created:
            emit_config_created(body, wi.config_name)

        if result.requeue:
            conditions = set_done_condition(conditions, False, result.reason, result.message, generation)
            self.update_resource_status(patch, meta, False, {"conditions": conditions})
            if not retry:
                return
            emit_dependency_missing(body, result.message)
            raise kopf.TemporaryError(result.message, delay=result.requeue_after)

        if result.workload_patched:
            emit_workload_patched(body, wi.spec.deployment)
        conditions = set_done_condition(conditions, True, result.reason, result.message, generation)
        conditions = set_fail_condition(conditions, False, result.reason, result.message, generation)
        self.update_resource_status(patch, meta, True, {"conditions": conditions})


def _meta_of(workload_identity: WorkloadIdentity) -> dict[str, Any]:
    return {
        "name": workload_identity.name,
        "namespace": workload_identity.namespace,
        "uid": workload_identity.uid,
    }


# Global handler instance, created by the startup handler
_handler: WorkloadIdentityHandler | None = None


def configure_handler(cluster: ClusterState, settings: Settings) -> WorkloadIdentityHandler:
    """Create the handler used by the kopf callbacks."""
    global _handler
    _handler = WorkloadIdentityHandler(cluster, settings)
    return _handler


def get_handler() -> WorkloadIdentityHandler:
    """Return the configured handler.

    Raises:
        RuntimeError: If the operator has not been started
    """
    if _handler is None:
        raise RuntimeError("WorkloadIdentity handler is not configured")
    return _handler


@kopf.on.create(API_GROUP_VERSION, KIND_WORKLOAD_IDENTITY)
@kopf.on.update(API_GROUP_VERSION, KIND_WORKLOAD_IDENTITY)
@kopf.on.resume(API_GROUP_VERSION, KIND_WORKLOAD_IDENTITY)
def handle_workload_identity(
    body: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle WorkloadIdentity resource reconciliation."""
    handler = get_handler()
    handler.reconcile_with_metrics(meta, lambda: handler.handle(body, meta, status, patch))


RESYNC_INTERVAL_SECONDS = load_settings().resync_interval_seconds


# The first tick waits a full interval instead of running alongside the create and resume handlers
@kopf.timer(
    API_GROUP_VERSION,
    KIND_WORKLOAD_IDENTITY,
    interval=RESYNC_INTERVAL_SECONDS,
    initial_delay=RESYNC_INTERVAL_SECONDS,
)
def resync_workload_identity(
    body: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Periodically correct drift of WorkloadIdentity resources.

    Missing dependencies are retried by the change handlers only.
    """
    handler = get_handler()
    handler.reconcile_with_metrics(meta, lambda: handler.handle(body, meta, status, patch, retry=False))
