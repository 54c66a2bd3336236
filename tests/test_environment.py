"""Tests for environment loading and context building."""

import pytest
from pydantic import ValidationError

from pxeprep.core.errors import ConfigurationError
from pxeprep.core.models import EnvironmentConfig
from pxeprep.environment.loader import load_environment, read_env
from pxeprep.environment.processor import build_context, netbios_name, network_values


def test_read_env_skips_comments_and_strips_quotes(tmp_path):
    path = tmp_path / ".env"
    path.write_text(
        "# comment\n"
        "\n"
        "DOMAIN_NAME=corp.example.com\n"
        "export GATEWAY_IP=10.0.0.1\n"
        "LOCAL_ADMIN_PASS='p=ss word'\n"
        'DOMAIN_JOIN_PASS="quoted"\n'
        "not a pair\n"
    )

    assert read_env(path) == [
        ("DOMAIN_NAME", "corp.example.com"),
        ("GATEWAY_IP", "10.0.0.1"),
        ("LOCAL_ADMIN_PASS", "p=ss word"),
        ("DOMAIN_JOIN_PASS", "quoted"),
    ]


def test_read_env_strips_inline_comments(tmp_path):
    path = tmp_path / ".env"
    path.write_text(
        "HTTP_PORT=80 # default\n"
        "LOCAL_ADMIN_PASS=p#ss\n"
        'DOMAIN_JOIN_PASS="keep # this"  # trailing\n'
    )

    assert read_env(path) == [
        ("HTTP_PORT", "80"),
        ("LOCAL_ADMIN_PASS", "p#ss"),
        ("DOMAIN_JOIN_PASS", "keep # this"),
    ]


def test_undecodable_env_file_is_a_configuration_error(tmp_path):
    path = tmp_path / ".env"
    path.write_bytes(b"GATEWAY_IP=\xff\xfe\n")

    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_environment(path)


def test_missing_env_file_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match=".env.example"):
        load_environment(tmp_path / ".env")


def test_precedence_environ_then_file_then_overrides(env_file):
    environ = {
        "GATEWAY_IP": "192.0.2.1",
        "HTTP_PORT": "8080",
        "PATH": "/usr/bin",
    }

    config = load_environment(
        env_file, environ, overrides={"DNS_SERVERS": "9.9.9.9"}
    )

    assert config["GATEWAY_IP"] == "10.0.0.1"
    assert config["HTTP_PORT"] == "8080"
    assert config["DNS_SERVERS"] == "9.9.9.9"
    assert "PATH" not in config


def test_config_is_immutable(config):
    with pytest.raises(ValidationError):
        config.variables = {}


def test_with_defaults_fills_absent_and_empty(env_values):
    env_values["HTTP_PORT"] = ""
    filled = EnvironmentConfig(variables=env_values).with_defaults()

    assert filled["HTTP_PORT"] == "80"
    assert filled["WEB_INTERFACE_PORT"] == "3000"
    assert filled["DOMAIN_OU"] == ""
    assert "WEB_INTERFACE_PORT" not in env_values


def test_build_context_adds_derived_values(config):
    context = build_context(config)

    assert context["DNS_SERVER_LIST"] == ["10.0.0.11", "10.0.0.12"]
    assert context["PRIMARY_DNS"] == "10.0.0.11"
    assert context["NETWORK_ADDRESS"] == "10.0.0.0"
    assert context["NETMASK"] == "255.255.255.0"
    assert context["PREFIX_LENGTH"] == "24"
    assert context["DOMAIN_NETBIOS"] == "CORP"
    assert context["HTTP_PORT"] == "80"


def test_network_values_ignore_host_bits():
    assert network_values("192.168.10.77/20") == {
        "NETWORK_ADDRESS": "192.168.0.0",
        "NETMASK": "255.255.240.0",
        "PREFIX_LENGTH": "20",
    }


def test_netbios_name_is_truncated():
    assert netbios_name("averyveryverylongname.example") == "AVERYVERYVERYLO"


def test_network_values_reject_leading_zeros():
    with pytest.raises(ConfigurationError, match="NETWORK_SUBNET"):
        network_values("192.168.001.0/24")
