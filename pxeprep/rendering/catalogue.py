"""The fixed set of artifacts produced by a generation run."""

from __future__ import annotations

from pathlib import Path

from ..core.models import ArtifactSpec, ListToken, PermissionProfile

BUNDLED_TEMPLATES = Path(__file__).resolve().parent.parent / "templates"

DNS_SERVERS_TOKEN = ListToken(name="DNS_SERVERS", pattern="server={item}")

LIST_TOKENS: tuple[ListToken, ...] = (DNS_SERVERS_TOKEN,)

ARTIFACTS: tuple[ArtifactSpec, ...] = (
    ArtifactSpec(
        kind="proxy-DHCP config",
        template="dnsmasq.conf.j2",
        output=Path("config/dnsmasq.conf"),
    ),
    ArtifactSpec(
        kind="iPXE boot menu",
        template="menu.ipxe.j2",
        output=Path("tftpboot/menu.ipxe"),
    ),
    ArtifactSpec(
        kind="Windows unattend",
        template="windows11-unattend.xml.j2",
        output=Path("config/templates/windows11-unattend.xml"),
    ),
    ArtifactSpec(
        kind="Debian preseed",
        template="debian-preseed.cfg.j2",
        output=Path("config/templates/debian-preseed.cfg"),
    ),
    ArtifactSpec(
        kind="Debian post-install script",
        template="debian-post-install.sh.j2",
        output=Path("config/templates/debian-post-install.sh"),
        profile=PermissionProfile.EXECUTABLE,
    ),
    ArtifactSpec(
        kind="domain join script",
        template="domain-join.ps1.j2",
        output=Path("config/templates/domain-join.ps1"),
        profile=PermissionProfile.EXECUTABLE,
    ),
)
