"""Loading the environment configuration from a .env file and the process."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Mapping

from ..core.errors import ConfigurationError
from ..core.models import KNOWN_KEYS, EnvironmentConfig

logger = logging.getLogger(__name__)

_INLINE_COMMENT = re.compile(r"\s+#")


def _parse_value(value: str) -> str:
    if value[:1] in {"'", '"'}:
        end = value.find(value[0], 1)
        if end != -1:
            return value[1:end]
        return value
    return _INLINE_COMMENT.split(value, maxsplit=1)[0]


def read_env(path: Path) -> list[tuple[str, str]]:
    """Parse KEY=VALUE pairs from a .env file.

    Blank lines and comments are skipped and an ``export`` prefix is dropped.
    A quoted value keeps everything between its quotes; an unquoted value
    ends at a ``#`` preceded by whitespace.

    Raises:
        ConfigurationError: If the file cannot be read or is not UTF-8
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    pairs: list[tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, value = line.split("=", 1)
        pairs.append((key.strip(), _parse_value(value.strip())))
    return pairs


def load_environment(
    env_file: Path,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> EnvironmentConfig:
    """Build the immutable configuration for one run.

    Known keys from ``environ`` are applied first, then every key of
    ``env_file``, then ``overrides``.

    Args:
        env_file: Path to the .env file
        environ: Process environment (only known keys are taken)
        overrides: Explicit KEY=VALUE overrides

    Returns:
        Environment configuration
    """
    if not env_file.is_file():
        raise ConfigurationError(
            f"{env_file} not found. Copy .env.example to .env and configure it."
        )

    variables: dict[str, str] = {}
    for key in KNOWN_KEYS:
        if environ and key in environ:
            variables[key] = environ[key]

    file_pairs = read_env(env_file)
    variables.update(file_pairs)
    logger.debug(f"Read {len(file_pairs)} variable(s) from {env_file}")

    if overrides:
        variables.update(overrides)
        logger.debug(f"Applied overrides: {sorted(overrides)}")

    return EnvironmentConfig(variables=variables)
