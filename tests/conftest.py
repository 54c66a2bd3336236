"""Shared fixtures for pxeprep tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pxeprep.core.models import EnvironmentConfig

from .helpers import write_env

VALID_ENV = {
    "NETWORK_SUBNET": "10.0.0.0/24",
    "GATEWAY_IP": "10.0.0.1",
    "DNS_SERVERS": "10.0.0.11,10.0.0.12",
    "PXE_SERVER_IP": "10.0.0.100",
    "DOMAIN_NAME": "corp.example.com",
    "DOMAIN_JOIN_USER": "svc-join",
    "DOMAIN_JOIN_PASS": "J0in&'Secret",
    "LOCAL_ADMIN_USER": "localadmin",
    "LOCAL_ADMIN_PASS": "Adm1n<Pass>",
}


@pytest.fixture
def env_values() -> dict[str, str]:
    return dict(VALID_ENV)


@pytest.fixture
def config(env_values: dict[str, str]) -> EnvironmentConfig:
    return EnvironmentConfig(variables=env_values)


@pytest.fixture
def env_file(tmp_path: Path, env_values: dict[str, str]) -> Path:
    return write_env(tmp_path / ".env", env_values)


