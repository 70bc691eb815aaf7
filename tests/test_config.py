"""Tests for configuration loading and precedence resolution."""

import pytest
from pydantic import ValidationError

from graph_session.core.config import (
    AppConfig,
    ClusterProfile,
    ReconnectPolicy,
    RetryPolicy,
    load_config,
    parse_hosts,
    resolve_config,
)
from graph_session.core.exceptions import ConfigError
from graph_session.core.models import HostAddress


@pytest.mark.unit
class TestParseHosts:
    def test_comma_separated(self):
        assert parse_hosts("a:1, b:2") == [
            HostAddress(host="a", port=1),
            HostAddress(host="b", port=2),
        ]

    def test_list_of_strings_and_dicts(self):
        hosts = parse_hosts(["a", {"host": "b", "port": 3699}])
        assert hosts == [HostAddress(host="a"), HostAddress(host="b", port=3699)]

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="At least one host"):
            parse_hosts("")

    def test_bad_port_rejected(self):
        with pytest.raises(ValueError, match="Invalid host address"):
            parse_hosts("a:0")


@pytest.mark.unit
class TestPolicies:
    def test_retry_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.idle_time == 0.0

    def test_retry_requires_one_attempt(self):
        with pytest.raises(ValidationError, match="max_attempts must be >= 1"):
            RetryPolicy(max_attempts=0)

    def test_retry_negative_idle(self):
        with pytest.raises(ValidationError):
            RetryPolicy(idle_time=-1)

    def test_reconnect_zero_bounds_allowed(self):
        policy = ReconnectPolicy(max_attempts=0, max_duration=0)
        assert policy.max_attempts == 0

    def test_reconnect_negative_rejected(self):
        with pytest.raises(ValidationError, match=">= 0"):
            ReconnectPolicy(max_duration=-0.5)


@pytest.mark.unit
class TestClusterProfile:
    def test_defaults(self):
        profile = ClusterProfile()
        assert profile.hosts == [HostAddress(host="127.0.0.1", port=9669)]
        assert profile.user == "root"
        assert profile.password is None
        assert profile.transport is None

    def test_hosts_from_string(self):
        profile = ClusterProfile(hosts="g1:9669,g2:9669")
        assert [h.host for h in profile.hosts] == ["g1", "g2"]

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="timeout must be positive"):
            ClusterProfile(timeout=0)

    def test_max_connections(self):
        with pytest.raises(ValidationError, match="max_connections"):
            ClusterProfile(max_connections=0)


@pytest.mark.unit
class TestLoadConfig:
    def test_load_from_file(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text(
            'default_format = "json"\n'
            'default_profile = "prod"\n'
            "\n"
            "[profiles.prod]\n"
            'hosts = ["graphd-1:9669", "graphd-2:9669"]\n'
            'user = "analyst"\n'
            'transport = "tests.fakes:factory"\n'
            "\n"
            "[profiles.prod.retry]\n"
            "max_attempts = 5\n"
            "\n"
            "[profiles.prod.reconnect]\n"
            "max_duration = 30.0\n"
        )
        config = load_config(config_file)
        assert config.default_format == "json"
        prod = config.profiles["prod"]
        assert len(prod.hosts) == 2
        assert prod.retry.max_attempts == 5
        assert prod.reconnect.max_duration == 30.0

    def test_default_when_no_file(self, temp_dir):
        config = load_config(temp_dir / "nonexistent.toml")
        assert config == AppConfig()

    def test_malformed_toml(self, temp_dir):
        config_file = temp_dir / "bad.toml"
        config_file.write_text("[profiles\n")
        with pytest.raises(ConfigError, match="Malformed TOML"):
            load_config(config_file)

    def test_invalid_config_values(self, temp_dir):
        config_file = temp_dir / "invalid.toml"
        config_file.write_text("[profiles.bad]\ntimeout = -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(config_file)


def _config_with_profile():
    return AppConfig(
        profiles={
            "prod": ClusterProfile(
                hosts="graphd-prod:9669",
                user="analyst",
                retry=RetryPolicy(max_attempts=5),
            )
        }
    )


@pytest.mark.unit
class TestResolveConfig:
    def test_defaults_only(self):
        resolved = resolve_config(AppConfig())
        assert resolved.hosts == [HostAddress(host="127.0.0.1")]
        assert resolved.user == "root"
        assert resolved.sources["hosts"] == "default"
        assert resolved.active_profile is None

    def test_profile_applied(self):
        resolved = resolve_config(_config_with_profile(), profile_name="prod")
        assert resolved.hosts == [HostAddress(host="graphd-prod")]
        assert resolved.user == "analyst"
        assert resolved.retry.max_attempts == 5
        assert resolved.sources["user"] == "profile: prod"
        assert resolved.active_profile == "prod"

    def test_profile_from_env(self, monkeypatch):
        monkeypatch.setenv("GRAPH_PROFILE", "prod")
        assert resolve_config(_config_with_profile()).active_profile == "prod"

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match="Unknown profile: 'nope'"):
            resolve_config(_config_with_profile(), profile_name="nope")

    def test_env_overrides_profile(self, monkeypatch):
        monkeypatch.setenv("GRAPH_HOSTS", "env-1:1,env-2:2")
        monkeypatch.setenv("GRAPH_USER", "envuser")
        resolved = resolve_config(_config_with_profile(), profile_name="prod")
        assert [h.host for h in resolved.hosts] == ["env-1", "env-2"]
        assert resolved.user == "envuser"
        assert resolved.sources["hosts"] == "env: GRAPH_HOSTS"

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("GRAPH_USER", "envuser")
        resolved = resolve_config(
            AppConfig(), user="cliuser", host="cli:9000", transport="m:f"
        )
        assert resolved.user == "cliuser"
        assert resolved.hosts == [HostAddress(host="cli", port=9000)]
        assert resolved.transport == "m:f"
        assert resolved.sources["user"] == "cli: --user"

    def test_invalid_override(self):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(AppConfig(), host="bad:notaport")
