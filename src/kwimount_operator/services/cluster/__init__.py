"""Cluster state access through the Kubernetes API."""

from .base import ClusterState
from .client import KubernetesClusterState, load_kubernetes_config

__all__ = ["ClusterState", "KubernetesClusterState", "load_kubernetes_config"]
