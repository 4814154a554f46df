"""Operator settings loaded once at startup."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import (
    FIELD_MANAGER,
    GCP_CONFIGURATION_FILE_NAME,
    GCP_CONFIGURATION_MOUNT_PATH,
    GCP_TOKEN_MOUNT_PATH,
    GCP_TOKEN_PATH,
    GCP_TOKEN_VOLUME_NAME,
    RESYNC_INTERVAL_SECONDS,
    RETRY_INTERVAL_SECONDS,
    TOKEN_EXPIRATION_SECONDS,
)


@dataclass(frozen=True)
class Settings:
    """Immutable configuration shared by the generator, planner and engine."""

    field_manager: str = FIELD_MANAGER
    token_mount_path: str = GCP_TOKEN_MOUNT_PATH
    token_path: str = GCP_TOKEN_PATH
    token_volume_name: str = GCP_TOKEN_VOLUME_NAME
    token_expiration_seconds: int = TOKEN_EXPIRATION_SECONDS
    config_mount_path: str = GCP_CONFIGURATION_MOUNT_PATH
    config_file_name: str = GCP_CONFIGURATION_FILE_NAME
    retry_interval_seconds: float = RETRY_INTERVAL_SECONDS
    resync_interval_seconds: float = RESYNC_INTERVAL_SECONDS
    metrics_port: int = 8080
    enable_webhooks: bool = False
    webhook_port: int = 9443

    @property
    def token_file(self) -> str:
        """Path of the projected token file inside the workload."""
        return self.token_mount_path + self.token_path

    @property
    def config_file(self) -> str:
        """Path of the credential configuration file inside the workload."""
        return self.config_mount_path + self.config_file_name


def load_settings() -> Settings:
    """Build settings from environment variables.

    Environment Variables:
        FIELD_MANAGER: Field manager identity for server-side apply (default: kwimount)
        TOKEN_EXPIRATION_SECONDS: Projected token lifetime (default: 3600)
        RETRY_INTERVAL_SECONDS: Delay before retrying a missing dependency (default: 600)
        RESYNC_INTERVAL_SECONDS: Periodic resync interval (default: 300)
        METRICS_PORT: Port for metrics and health endpoints (default: 8080)
        ENABLE_WEBHOOKS: Serve admission webhooks (default: false)
        WEBHOOK_PORT: Port for the admission webhook server (default: 9443)
    """
    return Settings(
        field_manager=os.getenv("FIELD_MANAGER", FIELD_MANAGER),
        token_expiration_seconds=int(os.getenv("TOKEN_EXPIRATION_SECONDS", str(TOKEN_EXPIRATION_SECONDS))),
        retry_interval_seconds=float(os.getenv("RETRY_INTERVAL_SECONDS", str(RETRY_INTERVAL_SECONDS))),
        resync_interval_seconds=float(os.getenv("RESYNC_INTERVAL_SECONDS", str(RESYNC_INTERVAL_SECONDS))),
        metrics_port=int(os.getenv("METRICS_PORT", "8080")),
        enable_webhooks=os.getenv("ENABLE_WEBHOOKS", "false").lower() == "true",
        webhook_port=int(os.getenv("WEBHOOK_PORT", "9443")),
    )
