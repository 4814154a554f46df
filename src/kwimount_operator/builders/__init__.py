"""Builders for generated credential configuration and workload patches."""

from .credential_config import build_config_map, generate_credential_config, get_credential_target
from .workload_patch import build_deployment_overlay, plan_pod_template

__all__ = [
    "build_config_map",
    "generate_credential_config",
    "get_credential_target",
    "plan_pod_template",
    "build_deployment_overlay",
]
