"""
Unit tests for load_settings.

Every test passes env_file=None so a developer's local .env never leaks in.
"""

import pytest

from cloud_provisioner.core.config import Settings, load_settings
from cloud_provisioner.core.exceptions import ConfigurationError


class TestRequiredKeys:

    def test_complete_configuration(self, azure_env):
        settings = load_settings(env_file=None)

        assert settings.SUBSCRIPTION_ID == "00000000-0000-0000-0000-000000000003"
        assert settings.REGION == "eastus"
        assert settings.OPERATION_TIMEOUT_SECONDS == 1800
        assert not settings.debug

    @pytest.mark.parametrize("key", ["TENANT_ID", "CLIENT_ID", "CLIENT_SECRET", "SUBSCRIPTION_ID"])
    def test_missing_key_is_named(self, azure_env, monkeypatch, key):
        monkeypatch.delenv(key)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert exc_info.value.key == key
        assert key in str(exc_info.value)

    def test_blank_key_is_missing(self, azure_env, monkeypatch):
        monkeypatch.setenv("CLIENT_SECRET", "   ")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert exc_info.value.key == "CLIENT_SECRET"

    def test_nothing_configured_reports_first_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert exc_info.value.key == "TENANT_ID"


class TestOptionalValues:

    def test_overrides_win_over_environment(self, azure_env, monkeypatch):
        monkeypatch.setenv("REGION", "westeurope")

        settings = load_settings(env_file=None, REGION="northeurope")

        assert settings.REGION == "northeurope"

    def test_debug_mode(self, azure_env, monkeypatch):
        monkeypatch.setenv("MODE", "debug")

        assert load_settings(env_file=None).debug

    def test_env_file_is_read(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "TENANT_ID=t\nCLIENT_ID=c\nCLIENT_SECRET=s\nSUBSCRIPTION_ID=sub\nRESOURCE_PREFIX=ci-\n"
        )

        settings = load_settings(env_file=str(env_file))

        assert settings.SUBSCRIPTION_ID == "sub"
        assert settings.RESOURCE_PREFIX == "ci-"

    def test_invalid_timeout_type(self, azure_env, monkeypatch):
        monkeypatch.setenv("OPERATION_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert exc_info.value.key == "OPERATION_TIMEOUT_SECONDS"

    def test_non_positive_timeout(self, azure_env):
        with pytest.raises(ConfigurationError, match="must be positive"):
            load_settings(env_file=None, OPERATION_TIMEOUT_SECONDS=0)

    def test_redacted_masks_secret(self, azure_env):
        redacted = load_settings(env_file=None).redacted()

        assert redacted["CLIENT_SECRET"] == "***"
        assert redacted["CLIENT_ID"] == "00000000-0000-0000-0000-000000000002"

    def test_settings_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.TENANT_ID == ""
        assert settings.CERTIFICATE_THUMBPRINT == ""
