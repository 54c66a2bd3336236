"""Domain models for environment configuration, artifacts and downloads."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

REQUIRED_KEYS: tuple[str, ...] = (
    "NETWORK_SUBNET",
    "GATEWAY_IP",
    "DNS_SERVERS",
    "PXE_SERVER_IP",
    "DOMAIN_NAME",
    "DOMAIN_JOIN_USER",
    "DOMAIN_JOIN_PASS",
    "LOCAL_ADMIN_USER",
    "LOCAL_ADMIN_PASS",
)

OPTIONAL_DEFAULTS: dict[str, str] = {
    "HTTP_PORT": "80",
    "WEB_INTERFACE_PORT": "3000",
    "TIMEZONE": "UTC",
    "WINDOWS_TIMEZONE": "UTC",
    "LOCALE": "en_US.UTF-8",
    "KEYBOARD_LAYOUT": "us",
    "DEBIAN_MIRROR": "deb.debian.org",
    "DOMAIN_OU": "",
    "MENU_TIMEOUT": "10000",
}

KNOWN_KEYS: tuple[str, ...] = REQUIRED_KEYS + tuple(OPTIONAL_DEFAULTS)


class EnvironmentConfig(BaseModel):
    """Immutable name -> value mapping read once at process start."""

    model_config = ConfigDict(frozen=True)

    variables: dict[str, str] = Field(
        default_factory=dict, description="Raw configuration values"
    )

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.variables.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self.variables[key]

    def __contains__(self, key: object) -> bool:
        return key in self.variables

    @property
    def dns_servers(self) -> list[str]:
        raw = self.variables.get("DNS_SERVERS", "")
        return [item.strip() for item in raw.split(",") if item.strip()]

    def with_defaults(self) -> EnvironmentConfig:
        """Return a copy with optional keys filled where absent or empty."""
        merged = dict(self.variables)
        for key, default in OPTIONAL_DEFAULTS.items():
            if not merged.get(key, "").strip():
                merged[key] = default
        return EnvironmentConfig(variables=merged)


class ValidationFailure(BaseModel):
    """A single failed configuration check."""

    model_config = ConfigDict(frozen=True)

    key: str
    message: str

    def __str__(self) -> str:
        return f"{self.key}: {self.message}"


class ValidationReport(BaseModel):
    """Outcome of validating an environment configuration."""

    failures: list[ValidationFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class PermissionProfile(str, Enum):
    """Permission applied to a generated artifact after commit."""

    READABLE = "readable"
    EXECUTABLE = "executable"

    @property
    def mode(self) -> int:
        return 0o755 if self is PermissionProfile.EXECUTABLE else 0o644


class ListToken(BaseModel):
    """A placeholder that expands to one formatted line per list item."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Variable holding the list")
    pattern: str = Field(..., description="Per-item line, e.g. 'server={item}'")

    @property
    def token(self) -> str:
        return f"__{self.name}_PLACEHOLDER__"


class ArtifactSpec(BaseModel):
    """A generated artifact: which template produces which file."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., description="Human-readable artifact name")
    template: str = Field(..., description="Template file name")
    output: Path = Field(..., description="Output path relative to the root")
    profile: PermissionProfile = PermissionProfile.READABLE


class GenerationResult(BaseModel):
    """Files committed by a generation run."""

    outputs: list[Path] = Field(default_factory=list)


class DownloadTask(BaseModel):
    """A remote asset to retrieve into the asset tree."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Short asset identifier")
    description: str = ""
    url: str
    destination: Path = Field(..., description="Path relative to the root")
    required: bool = True
    sha256: str | None = None
    attempts: int = Field(default=3, ge=1)
    archive_member: str | None = Field(
        default=None, description="Glob of the archive member to extract"
    )
    executable: bool = False


class FetchResult(BaseModel):
    """Outcome of a single download task."""

    task: DownloadTask
    ok: bool
    attempts: int = 0
    error: str | None = None


class AcquisitionResult(BaseModel):
    """Outcome of an asset acquisition run."""

    results: list[FetchResult] = Field(default_factory=list)
    aborted: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.aborted and all(
            result.ok for result in self.results if result.task.required
        )

    @property
    def failed_required(self) -> list[FetchResult]:
        return [r for r in self.results if r.task.required and not r.ok]

    @property
    def failed_optional(self) -> list[FetchResult]:
        return [r for r in self.results if not r.task.required and not r.ok]
