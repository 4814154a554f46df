"""Constants for the kwimount operator."""

# API Group
API_GROUP = "k8s.piny940.com"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_WORKLOAD_IDENTITY = "WorkloadIdentity"
KIND_PROVIDER = "Provider"
KIND_CONFIG_MAP = "ConfigMap"
KIND_DEPLOYMENT = "Deployment"

# Resource Plurals
PLURAL_WORKLOAD_IDENTITY = "workloadidentities"
PLURAL_PROVIDER = "providers"

# Labels
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
LABEL_WORKLOAD_IDENTITY = f"{API_GROUP}/workload-identity"

# Field Manager
FIELD_MANAGER = "kwimount"

# Provider target types
TARGET_GCP = "gcp"

# Defaults
DEFAULT_LOCATION = "global"

# GCP workload identity federation
GCP_AUDIENCE_FORMAT = (
    "//iam.googleapis.com/projects/{number}/locations/{location}"
    "/workloadIdentityPools/{pool}/providers/{provider}"
)
GCP_UNIVERSE_DOMAIN = "googleapis.com"
GCP_TOKEN_URL = "https://sts.googleapis.com/v1/token"
GCP_SUBJECT_TOKEN_TYPE = "urn:ietf:params:oauth:token-type:jwt"
GCP_IMPERSONATION_URL_FORMAT = (
    "https://iamcredentials.googleapis.com/v1/projects/-/serviceAccounts/"
    "{service_account}:generateAccessToken"
)
GCP_TOKEN_MOUNT_PATH = "/var/run/kwimount-gcp-service-account/"
GCP_TOKEN_PATH = "token"
GCP_CONFIGURATION_MOUNT_PATH = "/etc/kwimount-gcp-workload-identity/"
GCP_CONFIGURATION_FILE_NAME = "gcp-credential-configuration.json"
GCP_TOKEN_VOLUME_NAME = "kwimount-gcp-token"
GOOGLE_CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"

TOKEN_EXPIRATION_SECONDS = 3600
RETRY_INTERVAL_SECONDS = 600
RESYNC_INTERVAL_SECONDS = 300

# Condition Types
COND_DONE = "Done"
COND_FAIL = "Fail"
COND_AVAILABLE = "Available"
COND_FAILED = "Failed"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_CONFIG_CREATED = "ConfigCreated"
EVENT_REASON_WORKLOAD_PATCHED = "WorkloadPatched"
EVENT_REASON_DEPENDENCY_MISSING = "DependencyMissing"
