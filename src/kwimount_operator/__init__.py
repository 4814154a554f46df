"""Kubernetes operator that mounts workload identity federation credentials into Deployments."""

__version__ = "0.1.0"
