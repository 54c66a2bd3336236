"""Error taxonomy for the provisioning pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .models import ValidationFailure


class PxePrepError(Exception):
    """Base class for every pipeline failure surfaced to the CLI."""


class ConfigurationError(PxePrepError):
    """Raised when the environment configuration is missing or malformed."""

    def __init__(
        self, message: str, failures: Sequence[ValidationFailure] = ()
    ) -> None:
        super().__init__(message)
        self.failures = list(failures)

    def __str__(self) -> str:
        if not self.failures:
            return super().__str__()
        details = "; ".join(str(failure) for failure in self.failures)
        return f"{super().__str__()}: {details}"


class RenderError(PxePrepError):
    """Raised when a template cannot be rendered."""

    def __init__(self, message: str, artifact: str | None = None) -> None:
        super().__init__(message)
        self.artifact = artifact

    def __str__(self) -> str:
        if self.artifact:
            return f"{self.artifact}: {super().__str__()}"
        return super().__str__()


class TransferError(PxePrepError):
    """Raised when a remote asset cannot be retrieved."""


class IntegrityError(TransferError):
    """Raised when a retrieved asset does not match its expected digest."""

    def __init__(self, url: str, expected: str, actual: str) -> None:
        super().__init__(
            f"SHA-256 mismatch for {url}: expected {expected}, got {actual}"
        )
        self.url = url
        self.expected = expected
        self.actual = actual


class ExtractionError(PxePrepError):
    """Raised when a downloaded archive cannot be unpacked."""


class CancelledError(PxePrepError):
    """Raised when a run is cancelled before it could complete."""
