"""Main entry point for the kwimount operator.

Run with ``kopf run -m kwimount_operator.main``.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .handlers.workload_identity import configure_handler
from .services.cluster import KubernetesClusterState, load_kubernetes_config
from .settings import load_settings
from .tracing import initialize_tracing

operator_settings = load_settings()

# Admission handlers are registered only when a webhook server is configured for them
if operator_settings.enable_webhooks:
    from . import webhooks  # noqa: F401

WEBHOOK_CERT_DIR = "/tmp/k8s-webhook-server/serving-certs"


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    if operator_settings.enable_webhooks:
        settings.admission.server = kopf.WebhookServer(
            port=operator_settings.webhook_port,
            host="0.0.0.0",
            certfile=f"{WEBHOOK_CERT_DIR}/tls.crt",
            pkeyfile=f"{WEBHOOK_CERT_DIR}/tls.key",
        )
        # Webhook configurations are managed outside the operator
        settings.admission.managed = None
        logging.info(f"Admission webhooks ENABLED on port {operator_settings.webhook_port}")
    else:
        logging.info("Admission webhooks DISABLED")

    load_kubernetes_config()
    configure_handler(KubernetesClusterState(), operator_settings)

    # Start metrics HTTP server with health check endpoints
    health.start_metrics_server(operator_settings.metrics_port)
    health.set_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Mark the operator as not ready while it shuts down."""
    health.set_ready(False)
