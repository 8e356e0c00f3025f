"""Tests for eip_binding.config — resolve_target and BindingSettings."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from eip_binding.config import (
    POD_NAME_SENTINEL,
    BindingSettings,
    resolve_target,
    validate_ipv4,
)
from eip_binding.errors import ConfigError
from eip_binding.metadata.client import DEFAULT_ENDPOINT

# ---------------------------------------------------------------------------
# resolve_target
# ---------------------------------------------------------------------------


class TestResolveTarget:
    def test_valid_ipv4(self) -> None:
        assert resolve_target(["54.162.153.80"], {}) == "54.162.153.80"

    def test_no_arguments(self) -> None:
        with pytest.raises(ConfigError, match="usage"):
            resolve_target([], {})

    def test_too_many_arguments(self) -> None:
        with pytest.raises(ConfigError, match="usage"):
            resolve_target(["1.2.3.4", "5.6.7.8"], {})

    @pytest.mark.parametrize("value", ["not-an-ip", "::1", "2001:db8::1", "1.2.3", "256.1.1.1", ""])
    def test_invalid_address_rejected(self, value: str) -> None:
        with pytest.raises(ConfigError, match="invalid IPv4 address"):
            resolve_target([value], {})

    def test_pod_name_indirection(self) -> None:
        env = {"POD_NAME": "app-config", "app_config": "54.162.153.80"}
        assert resolve_target([POD_NAME_SENTINEL], env) == "54.162.153.80"

    def test_pod_name_replaces_every_hyphen(self) -> None:
        env = {"POD_NAME": "eip-binder-0", "eip_binder_0": "3.3.3.3"}
        assert resolve_target(["POD_NAME"], env) == "3.3.3.3"

    def test_pod_name_env_empty(self) -> None:
        with pytest.raises(ConfigError, match="POD_NAME is empty"):
            resolve_target(["POD_NAME"], {})

    def test_resolved_env_empty(self) -> None:
        with pytest.raises(ConfigError, match="my_pod"):
            resolve_target(["POD_NAME"], {"POD_NAME": "my-pod"})

    def test_resolved_value_invalid(self) -> None:
        with pytest.raises(ConfigError, match="invalid IPv4 address"):
            resolve_target(["POD_NAME"], {"POD_NAME": "my-pod", "my_pod": "bad-ip"})

    def test_reads_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("POD_NAME", "web-1")
        monkeypatch.setenv("web_1", "18.0.0.1")
        assert resolve_target(["POD_NAME"]) == "18.0.0.1"

    def test_config_error_has_no_step(self) -> None:
        with pytest.raises(ConfigError) as info:
            resolve_target([], {})
        assert info.value.step is None


class TestValidateIpv4:
    def test_returns_value(self) -> None:
        assert validate_ipv4("10.0.0.1") == "10.0.0.1"


# ---------------------------------------------------------------------------
# BindingSettings
# ---------------------------------------------------------------------------


class TestBindingSettings:
    def test_defaults(self) -> None:
        settings = BindingSettings(target_ip="54.162.153.80")
        assert settings.region is None
        assert settings.endpoint_url is None
        assert settings.metadata_endpoint == DEFAULT_ENDPOINT
        assert settings.metadata_token_ttl == 300
        assert settings.metadata_timeout == 2.0
        assert settings.timeout is None

    def test_rejects_ipv6_target(self) -> None:
        with pytest.raises(ValidationError):
            BindingSettings(target_ip="::1")

    @pytest.mark.parametrize("ttl", [0, 21601])
    def test_token_ttl_bounds(self, ttl: int) -> None:
        with pytest.raises(ValidationError):
            BindingSettings(target_ip="1.2.3.4", metadata_token_ttl=ttl)

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            BindingSettings(target_ip="1.2.3.4", timeout=0)

    def test_is_frozen(self) -> None:
        settings = BindingSettings(target_ip="1.2.3.4")
        with pytest.raises(ValidationError):
            settings.region = "us-east-1"  # type: ignore[misc]
