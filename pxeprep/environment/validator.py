"""Validation rules for the environment configuration."""

from __future__ import annotations

import logging
import re

from ..core.errors import ConfigurationError
from ..core.models import (
    REQUIRED_KEYS,
    EnvironmentConfig,
    ValidationFailure,
    ValidationReport,
)

logger = logging.getLogger(__name__)

_OCTET = r"(0|[1-9][0-9]{0,2})"
_IP_PATTERN = re.compile(r"\.".join([_OCTET] * 4))
_SUBNET_PATTERN = re.compile(r"([^/]+)/([0-9]{1,2})")
_INT_PATTERN = re.compile(r"[0-9]+")

MIN_PREFIX = 8
MAX_PREFIX = 30

_ADDRESS_KEYS = ("GATEWAY_IP", "PXE_SERVER_IP")
_PORT_KEYS = ("HTTP_PORT", "WEB_INTERFACE_PORT")


def is_valid_ip(value: str) -> bool:
    """Return True for four dot-separated decimal octets in [0, 255].

    Octets are ASCII digits without leading zeros.
    """
    match = _IP_PATTERN.fullmatch(value)
    if not match:
        return False
    return all(int(octet) <= 255 for octet in match.groups())


def is_valid_subnet(value: str) -> bool:
    """Return True for ``<IP>/<prefix>`` with a prefix in [8, 30]."""
    match = _SUBNET_PATTERN.fullmatch(value)
    if not match:
        return False
    address, prefix = match.groups()
    return is_valid_ip(address) and MIN_PREFIX <= int(prefix) <= MAX_PREFIX


def invalid_dns_entries(value: str) -> list[str] | None:
    """Return malformed entries of a DNS list, or None when the list is empty."""
    entries = [entry.strip() for entry in value.split(",")]
    if not any(entries):
        return None
    return [entry for entry in entries if not is_valid_ip(entry)]


def _check_presence(config: EnvironmentConfig) -> list[ValidationFailure]:
    return [
        ValidationFailure(key=key, message="required variable is missing or empty")
        for key in REQUIRED_KEYS
        if not (config.get(key) or "").strip()
    ]


def _check_formats(
    config: EnvironmentConfig, missing: set[str]
) -> list[ValidationFailure]:
    failures: list[ValidationFailure] = []

    if "NETWORK_SUBNET" not in missing:
        subnet = config["NETWORK_SUBNET"].strip()
        if not is_valid_subnet(subnet):
            failures.append(
                ValidationFailure(
                    key="NETWORK_SUBNET",
                    message=(
                        f"invalid subnet {subnet!r}; expected <IP>/<prefix> "
                        f"with prefix {MIN_PREFIX}-{MAX_PREFIX}"
                    ),
                )
            )

    for key in _ADDRESS_KEYS:
        if key in missing:
            continue
        address = config[key].strip()
        if not is_valid_ip(address):
            failures.append(
                ValidationFailure(key=key, message=f"invalid IP address {address!r}")
            )

    if "DNS_SERVERS" not in missing:
        bad = invalid_dns_entries(config["DNS_SERVERS"])
        if bad is None:
            failures.append(
                ValidationFailure(key="DNS_SERVERS", message="no DNS servers listed")
            )
        elif bad:
            listed = ", ".join(repr(entry) for entry in bad)
            failures.append(
                ValidationFailure(
                    key="DNS_SERVERS", message=f"invalid DNS server IP(s): {listed}"
                )
            )

    return failures


def _check_optional(config: EnvironmentConfig) -> list[ValidationFailure]:
    failures: list[ValidationFailure] = []
    for key in _PORT_KEYS:
        value = (config.get(key) or "").strip()
        if not value:
            continue
        if not _INT_PATTERN.fullmatch(value) or not 1 <= int(value) <= 65535:
            failures.append(
                ValidationFailure(key=key, message=f"invalid port {value!r}")
            )

    timeout = (config.get("MENU_TIMEOUT") or "").strip()
    if timeout and not _INT_PATTERN.fullmatch(timeout):
        failures.append(
            ValidationFailure(
                key="MENU_TIMEOUT", message=f"expected milliseconds, got {timeout!r}"
            )
        )
    return failures


def validate_environment(config: EnvironmentConfig) -> ValidationReport:
    """Run every check and collect all failures.

    Args:
        config: Environment configuration to check

    Returns:
        Report listing failures in check order (empty when valid)
    """
    presence = _check_presence(config)
    missing = {failure.key for failure in presence}

    failures = presence + _check_formats(config, missing) + _check_optional(config)
    logger.debug(f"Validation finished with {len(failures)} failure(s)")
    return ValidationReport(failures=failures)


def require_valid(config: EnvironmentConfig) -> None:
    """Raise ConfigurationError listing every failure when invalid."""
    report = validate_environment(config)
    if not report.ok:
        raise ConfigurationError(
            f"Environment configuration has {len(report.failures)} problem(s)",
            report.failures,
        )
