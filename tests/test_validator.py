"""Tests for environment validation."""

import pytest

from pxeprep.core.errors import ConfigurationError
from pxeprep.core.models import EnvironmentConfig
from pxeprep.environment.validator import (
    invalid_dns_entries,
    is_valid_ip,
    is_valid_subnet,
    require_valid,
    validate_environment,
)


@pytest.mark.parametrize(
    "value", ["10.0.0.100", "0.0.0.0", "255.255.255.255", "192.168.100.1"]
)
def test_ip_accepts_valid_addresses(value):
    assert is_valid_ip(value)


@pytest.mark.parametrize(
    "value",
    [
        "10.0.0.999",
        "10.0.0",
        "10.0.0.1.1",
        "256.1.1.1",
        "a.b.c.d",
        "",
        " 10.0.0.1",
        "1234.1.1.1",
        "192.168.001.1",
        "010.0.0.1",
        "\u0661\u0660.0.0.1",
    ],
)
def test_ip_rejects_malformed_addresses(value):
    assert not is_valid_ip(value)


def test_subnet_prefix_bounds():
    assert is_valid_subnet("10.0.0.0/24")
    assert is_valid_subnet("10.0.0.0/8")
    assert is_valid_subnet("10.0.0.0/30")
    assert not is_valid_subnet("10.0.0.0/31")
    assert not is_valid_subnet("10.0.0.0/32")
    assert not is_valid_subnet("10.0.0.0/7")


def test_subnet_rejects_bad_address_or_shape():
    assert not is_valid_subnet("10.0.0.300/24")
    assert not is_valid_subnet("10.0.0.0")
    assert not is_valid_subnet("10.0.0.0/")
    assert not is_valid_subnet("10.0.0.0/124")


def test_dns_list_checks_every_entry():
    assert invalid_dns_entries("10.0.0.11,10.0.0.12") == []
    assert invalid_dns_entries("10.0.0.11, 10.0.0.12") == []
    assert invalid_dns_entries("10.0.0.11,10.0.0.999,bogus") == ["10.0.0.999", "bogus"]
    assert invalid_dns_entries("10.0.0.11,") == [""]
    assert invalid_dns_entries(" , ") is None


def test_subnet_rejects_leading_zeros_and_non_ascii_digits():
    assert not is_valid_subnet("192.168.001.0/24")
    assert not is_valid_subnet("10.0.0.0/\u0662\u0664")


def test_leading_zero_subnet_is_a_validation_failure(env_values):
    env_values["NETWORK_SUBNET"] = "192.168.001.0/24"

    with pytest.raises(ConfigurationError) as excinfo:
        require_valid(EnvironmentConfig(variables=env_values))

    assert [failure.key for failure in excinfo.value.failures] == ["NETWORK_SUBNET"]


def test_valid_environment_passes(config):
    report = validate_environment(config)

    assert report.ok
    assert report.failures == []


def test_failures_are_aggregated(env_values):
    del env_values["DOMAIN_NAME"]
    env_values["LOCAL_ADMIN_PASS"] = "   "
    env_values["GATEWAY_IP"] = "10.0.0.999"

    report = validate_environment(EnvironmentConfig(variables=env_values))

    assert not report.ok
    assert [failure.key for failure in report.failures] == [
        "DOMAIN_NAME",
        "LOCAL_ADMIN_PASS",
        "GATEWAY_IP",
    ]
    assert "10.0.0.999" in report.failures[2].message


def test_missing_keys_skip_format_checks():
    report = validate_environment(EnvironmentConfig(variables={}))

    assert len(report.failures) == 9
    assert all("missing" in failure.message for failure in report.failures)


def test_every_format_problem_is_reported(env_values):
    env_values.update(
        NETWORK_SUBNET="10.0.0.0/31",
        PXE_SERVER_IP="10.0.0",
        DNS_SERVERS="10.0.0.11,8.8.8.888",
        HTTP_PORT="70000",
        MENU_TIMEOUT="soon",
    )

    report = validate_environment(EnvironmentConfig(variables=env_values))

    keys = [failure.key for failure in report.failures]
    assert keys == [
        "NETWORK_SUBNET",
        "PXE_SERVER_IP",
        "DNS_SERVERS",
        "HTTP_PORT",
        "MENU_TIMEOUT",
    ]
    assert "'8.8.8.888'" in report.failures[2].message


def test_empty_dns_list_is_invalid(env_values):
    env_values["DNS_SERVERS"] = ","

    report = validate_environment(EnvironmentConfig(variables=env_values))

    assert [str(failure) for failure in report.failures] == [
        "DNS_SERVERS: no DNS servers listed"
    ]


def test_require_valid_raises_with_all_failures(env_values):
    del env_values["GATEWAY_IP"]
    del env_values["DNS_SERVERS"]

    with pytest.raises(ConfigurationError) as excinfo:
        require_valid(EnvironmentConfig(variables=env_values))

    assert [failure.key for failure in excinfo.value.failures] == [
        "GATEWAY_IP",
        "DNS_SERVERS",
    ]
    assert "GATEWAY_IP" in str(excinfo.value)
