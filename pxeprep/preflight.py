"""Host checks run before generation. Every finding is a warning."""

from __future__ import annotations

import errno
import logging
import shutil
import socket
from typing import Iterable

from .core.models import EnvironmentConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMANDS = ("docker",)


def check_commands(names: Iterable[str] = DEFAULT_COMMANDS) -> list[str]:
    """Return the host commands that are not on PATH."""
    missing = [name for name in names if shutil.which(name) is None]
    for name in missing:
        logger.warning(f"{name} not found; the boot services need it to run")
    return missing


def service_ports(config: EnvironmentConfig) -> list[tuple[int, str]]:
    """Ports the boot services listen on, as (port, protocol) pairs."""
    filled = config.with_defaults()
    return [
        (67, "udp"),
        (69, "udp"),
        (int(filled["HTTP_PORT"]), "tcp"),
        (int(filled["WEB_INTERFACE_PORT"]), "tcp"),
    ]


def _port_in_use(port: int, proto: str) -> bool:
    kind = socket.SOCK_DGRAM if proto == "udp" else socket.SOCK_STREAM
    with socket.socket(socket.AF_INET, kind) as probe:
        try:
            probe.bind(("0.0.0.0", port))
        except PermissionError:
            logger.debug(f"Cannot probe {port}/{proto} without privileges")
            return False
        except OSError as exc:
            if exc.errno == errno.EADDRINUSE:
                return True
            raise
    return False


def check_ports(config: EnvironmentConfig) -> list[str]:
    """Return ``port/proto`` labels for service ports that are already bound."""
    busy = [
        f"{port}/{proto}"
        for port, proto in service_ports(config)
        if _port_in_use(port, proto)
    ]
    if busy:
        logger.warning(f"The following ports are already in use: {', '.join(busy)}")
        logger.warning(
            "This may cause conflicts. Consider stopping services using these ports."
        )
    else:
        logger.info("All required ports are available")
    return busy


def next_steps(config: EnvironmentConfig) -> list[str]:
    """Follow-up instructions printed after a successful generation."""
    filled = config.with_defaults()
    server = filled["PXE_SERVER_IP"]
    return [
        "1. Download boot files: pxeprep download",
        "2. Place your ISO files in the isos/ directory:",
        "   - Windows 11 ISO extracted to isos/windows11/",
        "   - Debian 12 kernel and initrd in isos/debian12/",
        "3. Start the boot services: docker compose up -d",
        "4. Monitor logs: docker compose logs -f",
        f"HTTP server: http://{server}:{filled['HTTP_PORT']}",
        f"Web interface: http://{server}:{filled['WEB_INTERFACE_PORT']}",
    ]
