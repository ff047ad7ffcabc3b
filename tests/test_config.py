"""Tests for cfclient.config -- environment layering and credential sources."""

from __future__ import annotations

from pathlib import Path

import pytest

from cfclient.config import ENV_VARS, load_config, resolve_credential
from cfclient.exceptions import ConfigError, ErrorKind


class TestLoadConfig:
    def test_defaults_with_empty_environment(self) -> None:
        config = load_config(environ={})
        assert config.protocol == "http"
        assert config.host == "api.bosh-lite.com"
        assert config.port == 80

    def test_environment_variables(self) -> None:
        environ = {
            "CF_API_PROTOCOL": "https",
            "CF_API_HOST": "api.example.com",
            "CF_USERNAME": "deployer",
            "CF_PASSWORD": "hunter2",
            "CF_SKIP_SSL_VALIDATION": "true",
            "CF_API_TIMEOUT": "5",
        }
        config = load_config(environ=environ)
        assert config.protocol == "https"
        assert config.port == 443
        assert config.host == "api.example.com"
        assert config.username == "deployer"
        assert config.password == "hunter2"
        assert config.skip_ssl_validation is True
        assert config.timeout == 5.0

    def test_options_override_environment(self) -> None:
        environ = {"CF_API_HOST": "env.example.com", "CF_USERNAME": "env-user"}
        config = load_config({"host": "opt.example.com"}, environ=environ)
        assert config.host == "opt.example.com"
        assert config.username == "env-user"

    def test_camel_case_skip_flag_overrides_environment(self) -> None:
        config = load_config({"skipSslValidation": "nope"}, environ={"CF_SKIP_SSL_VALIDATION": "true"})
        assert config.skip_ssl_validation is False

    def test_empty_environment_values_ignored(self) -> None:
        config = load_config(environ={"CF_API_HOST": ""})
        assert config.host == "api.bosh-lite.com"

    def test_reads_os_environ_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ENV_VARS.values():
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("CF_API_HOST", "api.from-env.example.com")
        assert load_config().host == "api.from-env.example.com"

    def test_password_from_env_source(self) -> None:
        config = load_config({"password": "env:MY_CF_PASSWORD"}, environ={"MY_CF_PASSWORD": "from-env"})
        assert config.password == "from-env"

    def test_password_source_from_environment_variable(self) -> None:
        environ = {"CF_PASSWORD": "env:VAULT_PASSWORD", "VAULT_PASSWORD": "from-vault"}
        assert load_config(environ=environ).password == "from-vault"

    def test_password_from_file_source(self, tmp_path: Path) -> None:
        secret = tmp_path / "password.txt"
        secret.write_text("from-file\n")
        config = load_config({"password": f"file:{secret}"}, environ={})
        assert config.password == "from-file"

    def test_unresolvable_password_source(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config({"password": "env:MISSING_CF_PASSWORD"}, environ={})
        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestResolveCredential:
    def test_literal_passthrough(self) -> None:
        assert resolve_credential("plain-secret") == "plain-secret"

    def test_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRED", "value")
        assert resolve_credential("env:CRED") == "value"

    def test_env_from_given_mapping(self) -> None:
        assert resolve_credential("env:CRED", {"CRED": "mapped"}) == "mapped"

    def test_env_missing(self) -> None:
        with pytest.raises(ConfigError, match="CRED"):
            resolve_credential("env:CRED", {})

    def test_file_is_stripped(self, tmp_path: Path) -> None:
        secret = tmp_path / "secret"
        secret.write_text("  s3cret \n")
        assert resolve_credential(f"file:{secret}") == "s3cret"

    def test_unreadable_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read credential file"):
            resolve_credential(f"file:{tmp_path}")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Credential file not found"):
            resolve_credential(f"file:{tmp_path / 'nope.txt'}")
