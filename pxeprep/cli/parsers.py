"""CLI argument parsers and validators."""

from __future__ import annotations

import re

import typer

_SHA256_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


def parse_assignment(value: str) -> tuple[str, str]:
    """Parse an argument in format KEY=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be KEY=VALUE, got: {value!r}")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise typer.BadParameter(f"Missing key in: {value!r}")
    return key, val


def parse_overrides(values: list[str]) -> dict[str, str]:
    """Parse repeated KEY=VALUE overrides into a mapping."""
    return dict(map(parse_assignment, values))


def parse_checksums(values: list[str]) -> dict[str, str]:
    """Parse repeated NAME=SHA256 pins."""
    pins: dict[str, str] = {}
    for name, digest in map(parse_assignment, values):
        digest = digest.strip()
        if not _SHA256_PATTERN.match(digest):
            raise typer.BadParameter(f"Invalid SHA-256 digest for {name}: {digest!r}")
        pins[name] = digest.lower()
    return pins
