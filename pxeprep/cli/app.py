"""Main CLI application."""

from __future__ import annotations

import logging
import os
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from ..acquisition.catalogue import build_tasks
from ..acquisition.orchestrator import acquire_assets
from ..core.errors import ConfigurationError, PxePrepError
from ..core.models import EnvironmentConfig
from ..environment.loader import load_environment
from ..environment.validator import validate_environment
from ..preflight import check_commands, check_ports, next_steps
from ..rendering.generator import generate_artifacts
from ..settings import Settings
from .parsers import parse_checksums, parse_overrides

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="pxeprep",
    help="Validate network-boot settings, generate boot service configs and fetch boot assets.",
    no_args_is_help=True,
)

EnvFileOption = Annotated[
    str,
    typer.Option(
        "--env-file",
        help="Environment file (default: .env under the project root).",
        metavar="PATH",
    ),
]
RootOption = Annotated[
    str,
    typer.Option(
        "--root",
        help="Project root holding config/, tftpboot/ and isos/ (default: cwd).",
        metavar="DIR",
    ),
]
SetOption = Annotated[
    list[str],
    typer.Option(
        "--set",
        help="Override a configuration value (format: KEY=VALUE). Repeatable.",
        metavar="KEY=VALUE",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _resolve_root(root: str, settings: Settings) -> Path:
    return Path(root) if root else settings.root


def _load_config(
    env_file: str, root: Path, settings: Settings, overrides: list[str]
) -> EnvironmentConfig:
    path = Path(env_file) if env_file else settings.env_file
    if not path.is_absolute():
        path = root / path
    return load_environment(path, os.environ, parse_overrides(overrides))


def _fail(exc: PxePrepError) -> typer.Exit:
    if isinstance(exc, ConfigurationError) and exc.failures:
        logger.error(exc.args[0])
        for failure in exc.failures:
            logger.error(f"  {failure}")
    else:
        logger.error(str(exc))
    return typer.Exit(code=1)


@contextmanager
def _cancellation() -> Iterator[threading.Event]:
    """Yield an event that is set when the process receives SIGTERM."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handle(signum: int, frame: object) -> None:
        logger.warning("Termination requested; finishing the current step")
        cancel.set()

    previous = signal.signal(signal.SIGTERM, _handle)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGTERM, previous)


@app.command()
def validate(
    env_file: EnvFileOption = "",
    root: RootOption = "",
    overrides: SetOption = [],
    verbose: VerboseOption = False,
) -> None:
    """Check the environment configuration and report every problem."""
    _configure_logging(verbose)
    settings = Settings()
    project_root = _resolve_root(root, settings)

    logger.info("Validating environment configuration...")
    try:
        config = _load_config(env_file, project_root, settings, overrides)
    except PxePrepError as exc:
        raise _fail(exc) from exc

    report = validate_environment(config)
    if not report.ok:
        logger.error(f"Environment configuration has {len(report.failures)} problem(s)")
        for failure in report.failures:
            logger.error(f"  {failure}")
        raise typer.Exit(code=1)

    logger.info("Environment configuration is valid")


@app.command()
def generate(
    env_file: EnvFileOption = "",
    root: RootOption = "",
    overrides: SetOption = [],
    templates_dir: Annotated[
        str,
        typer.Option(
            "--templates-dir",
            help="Directory with replacement templates (default: bundled).",
            metavar="DIR",
        ),
    ] = "",
    skip_preflight: Annotated[
        bool,
        typer.Option(
            "--skip-preflight",
            help="Skip the host command and port checks.",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Validate the environment and generate all boot service configs."""
    _configure_logging(verbose)
    settings = Settings()
    project_root = _resolve_root(root, settings)
    templates = Path(templates_dir) if templates_dir else settings.templates_dir

    logger.debug("Starting pxeprep generate")

    try:
        config = _load_config(env_file, project_root, settings, overrides)
        if not skip_preflight and validate_environment(config).ok:
            check_commands()
            check_ports(config)
        with _cancellation() as cancel:
            result = generate_artifacts(
                config, project_root, templates_dir=templates, cancel=cancel
            )
    except PxePrepError as exc:
        raise _fail(exc) from exc

    logger.debug(f"Completed: {len(result.outputs)} file(s) generated")
    logger.info("Setup completed successfully!")
    for line in next_steps(config):
        typer.echo(line)


@app.command()
def download(
    root: RootOption = "",
    attempts: Annotated[
        Optional[int],
        typer.Option(
            "--attempts",
            min=1,
            help="Attempts per asset (default: 3).",
        ),
    ] = None,
    retry_delay: Annotated[
        Optional[float],
        typer.Option(
            "--retry-delay",
            min=0,
            help="Seconds between attempts (default: 2).",
        ),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option(
            "--workers",
            min=1,
            help="Parallel downloads (default: 1, strictly sequential).",
        ),
    ] = None,
    checksums: Annotated[
        list[str],
        typer.Option(
            "--checksum",
            help="Pin an asset's SHA-256 (format: NAME=SHA256). Repeatable.",
            metavar="NAME=SHA256",
        ),
    ] = [],
    verbose: VerboseOption = False,
) -> None:
    """Download boot loaders and OS boot assets."""
    _configure_logging(verbose)
    settings = Settings()
    project_root = _resolve_root(root, settings)

    try:
        tasks = build_tasks(
            attempts or settings.download_attempts, parse_checksums(checksums)
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--checksum") from exc

    try:
        with _cancellation() as cancel:
            result = acquire_assets(
                project_root,
                tasks,
                retry_delay=(
                    settings.retry_delay if retry_delay is None else retry_delay
                ),
                timeout=settings.download_timeout,
                chunk_size=settings.chunk_size,
                workers=workers or settings.download_workers,
                cancel=cancel,
            )
    except OSError as exc:
        logger.error(f"Cannot prepare the asset tree under {project_root}: {exc}")
        raise typer.Exit(code=1) from exc

    for fetched in result.results:
        status = "ok" if fetched.ok else "FAILED"
        kind = "required" if fetched.task.required else "optional"
        logger.info(f"  {fetched.task.destination} ({kind}): {status}")

    if not result.ok:
        for fetched in result.failed_required:
            logger.error(f"Failed to download {fetched.task.name}: {fetched.error}")
        if not result.failed_required:
            logger.error("Acquisition did not complete")
        raise typer.Exit(code=1)

    logger.info("Boot files download completed!")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
