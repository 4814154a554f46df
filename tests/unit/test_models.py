"""Tests for resource models, defaulting and validation."""

from __future__ import annotations

import pytest

from conftest import make_provider, make_workload_identity
from kwimount_operator.models import (
    Provider,
    WorkloadIdentity,
    default_provider_spec,
    default_workload_identity_spec,
    validate_provider_spec,
    validate_workload_identity_spec,
)
from kwimount_operator.utils.errors import ValidationError


class TestWorkloadIdentity:
    """Test cases for the WorkloadIdentity model."""

    def test_from_dict(self):
        """Test parsing a WorkloadIdentity body."""
        wi = WorkloadIdentity.from_dict(make_workload_identity(provider_namespace="shared"))

        assert wi.name == "wi"
        assert wi.namespace == "apps"
        assert wi.uid == "wi-uid"
        assert wi.spec.deployment == "api"
        assert wi.spec.target_service_account == "sa@proj.iam.gserviceaccount.com"
        assert wi.spec.provider.name == "gcp"
        assert wi.provider_namespace == "shared"

    def test_provider_namespace_defaults_to_own(self):
        """Test an empty provider namespace resolves to the WorkloadIdentity's namespace."""
        wi = WorkloadIdentity.from_dict(make_workload_identity())
        assert wi.provider_namespace == "apps"

    def test_config_name(self):
        """Test the generated config object name."""
        wi = WorkloadIdentity.from_dict(make_workload_identity(name="billing", deployment="worker"))
        assert wi.config_name == "kwimount-billing-worker-conf"


class TestProvider:
    """Test cases for the Provider model."""

    def test_from_dict(self):
        """Test parsing a Provider body."""
        provider = Provider.from_dict(make_provider(number=987))

        assert provider.spec.target == "gcp"
        assert provider.spec.pool_id == "pool-1"
        assert provider.spec.provider_id == "prov-1"
        assert provider.spec.project.name == "proj"
        assert provider.spec.project.number == "987"

    def test_location_defaults_to_global(self):
        """Test a missing location reads as global."""
        provider = Provider.from_dict(make_provider(location=None))
        assert provider.spec.location == "global"


class TestDefaulting:
    """Test cases for defaulting functions."""

    def test_workload_identity_namespace_defaulted(self):
        """Test the provider namespace is defaulted to the object namespace."""
        spec = make_workload_identity()["spec"]
        assert default_workload_identity_spec(spec, "apps") == {"provider": {"namespace": "apps"}}

    def test_workload_identity_namespace_kept(self):
        """Test an explicit provider namespace is left alone."""
        spec = make_workload_identity(provider_namespace="shared")["spec"]
        assert default_workload_identity_spec(spec, "apps") == {}

    def test_provider_location_defaulted(self):
        """Test the location is defaulted to global."""
        spec = make_provider(location=None)["spec"]
        assert default_provider_spec(spec) == {"location": "global"}

    def test_provider_location_kept(self):
        """Test an explicit location is left alone."""
        spec = make_provider(location="us-east1")["spec"]
        assert default_provider_spec(spec) == {}


class TestValidation:
    """Test cases for validation functions."""

    def test_valid_workload_identity(self):
        """Test a complete WorkloadIdentity spec passes."""
        validate_workload_identity_spec(make_workload_identity()["spec"])

    @pytest.mark.parametrize(
        ("field", "path"),
        [
            ("deployment", "spec.deployment"),
            ("targetServiceAccount", "spec.targetServiceAccount"),
        ],
    )
    def test_workload_identity_required_fields(self, field, path):
        """Test empty required fields are rejected."""
        spec = make_workload_identity()["spec"]
        spec[field] = ""

        with pytest.raises(ValidationError) as exc_info:
            validate_workload_identity_spec(spec)
        assert exc_info.value.field_path == path

    def test_workload_identity_provider_name_required(self):
        """Test the provider reference needs a name."""
        spec = make_workload_identity(provider_name="")["spec"]
        with pytest.raises(ValidationError) as exc_info:
            validate_workload_identity_spec(spec)
        assert exc_info.value.field_path == "spec.provider.name"

    def test_valid_provider(self):
        """Test a complete Provider spec passes."""
        validate_provider_spec(make_provider()["spec"])

    @pytest.mark.parametrize("field", ["target", "poolID", "providerID"])
    def test_provider_required_fields(self, field):
        """Test empty required Provider fields are rejected."""
        spec = make_provider()["spec"]
        spec[field] = ""

        with pytest.raises(ValidationError) as exc_info:
            validate_provider_spec(spec)
        assert exc_info.value.field_path == f"spec.{field}"

    def test_provider_project_required(self):
        """Test the project block is required."""
        spec = make_provider()["spec"]
        del spec["project"]

        with pytest.raises(ValidationError) as exc_info:
            validate_provider_spec(spec)
        assert exc_info.value.field_path == "spec.project"

    def test_provider_project_number_required(self):
        """Test the project number is required."""
        spec = make_provider(number="")["spec"]
        with pytest.raises(ValidationError) as exc_info:
            validate_provider_spec(spec)
        assert exc_info.value.field_path == "spec.project.number"
