"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import provider  # noqa: F401
from . import workload_identity  # noqa: F401
