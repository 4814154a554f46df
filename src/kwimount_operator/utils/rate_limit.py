"""Rate limiting utilities for Kubernetes API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from kubernetes.client.exceptions import ApiException

_F = TypeVar("_F", bound=Callable[..., Any])

_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_MAX_RATE_LIMIT_RETRIES = 3

_k8s_last_call_time: float = 0.0
_k8s_lock = threading.Lock()
_retry_state = threading.local()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Spaces calls at least ``1 / K8S_RATE_LIMIT_PER_SECOND`` seconds apart
    across all worker threads.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND
        with _k8s_lock:
            time_since_last_call = time.time() - _k8s_last_call_time
            if time_since_last_call < min_interval:
                time.sleep(min_interval - time_since_last_call)
            _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def handle_rate_limit_error(e: ApiException, max_retries: int = _MAX_RATE_LIMIT_RETRIES) -> bool:
    """Check if an API exception is a rate limit error and back off.

    Args:
        e: API exception
        max_retries: Maximum number of consecutive retries per thread

    Returns:
        True if the caller should retry, False otherwise
    """
    retry_count = getattr(_retry_state, "count", 0)
    # Kubernetes API rate limit errors typically return 429 or 503
    if e.status == 429 or (e.status == 503 and "rate limit" in str(e).lower()):
        if retry_count < max_retries:
            # Exponential backoff: 1s, 2s, 4s
            time.sleep(2 ** retry_count)
            _retry_state.count = retry_count + 1
            return True
    _retry_state.count = 0
    return False


def reset_rate_limit_retries() -> None:
    """Reset the retry counter of the current thread."""
    _retry_state.count = 0
