"""Rendering context derived from the environment configuration."""

from __future__ import annotations

import ipaddress
import logging
from typing import Any

from ..core.errors import ConfigurationError
from ..core.models import EnvironmentConfig

logger = logging.getLogger(__name__)


def netbios_name(domain: str) -> str:
    """Return the NetBIOS-style short name of a DNS domain (``corp.example`` -> ``CORP``)."""
    return domain.split(".", 1)[0].upper()[:15]


def network_values(subnet: str) -> dict[str, str]:
    """Split a CIDR subnet into network address, netmask and prefix length.

    Args:
        subnet: Subnet in ``<IP>/<prefix>`` form (host bits are ignored)

    Returns:
        Mapping with NETWORK_ADDRESS, NETMASK and PREFIX_LENGTH
    """
    try:
        network = ipaddress.IPv4Network(subnet.strip(), strict=False)
    except ValueError as exc:
        raise ConfigurationError(f"NETWORK_SUBNET: {exc}") from exc
    return {
        "NETWORK_ADDRESS": str(network.network_address),
        "NETMASK": str(network.netmask),
        "PREFIX_LENGTH": str(network.prefixlen),
    }


def build_context(config: EnvironmentConfig) -> dict[str, Any]:
    """Build the rendering context for a validated configuration.

    Returns:
        Configuration values with optional defaults applied, plus derived
        values (DNS list, network parts, domain short names)
    """
    logger.debug("Building rendering context from environment configuration")

    filled = config.with_defaults()
    context: dict[str, Any] = {
        key: value.strip() for key, value in filled.variables.items()
    }

    dns_servers = filled.dns_servers
    context["DNS_SERVER_LIST"] = dns_servers
    context["PRIMARY_DNS"] = dns_servers[0] if dns_servers else ""
    context.update(network_values(context["NETWORK_SUBNET"]))
    context["DOMAIN_NETBIOS"] = netbios_name(context["DOMAIN_NAME"])
    context["DOMAIN_UPPER"] = context["DOMAIN_NAME"].upper()

    return context
