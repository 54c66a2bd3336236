"""Generation of every configuration artifact from one environment."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Sequence

from ..core.errors import CancelledError, RenderError
from ..core.models import ArtifactSpec, EnvironmentConfig, GenerationResult, ListToken
from ..environment.processor import build_context
from ..environment.validator import require_valid
from .catalogue import ARTIFACTS, BUNDLED_TEMPLATES, LIST_TOKENS
from .engine import load_template, render
from .io import commit, discard, stage_text

logger = logging.getLogger(__name__)


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise CancelledError("Generation cancelled; no artifacts were committed")


def render_artifact(
    spec: ArtifactSpec,
    context: dict[str, Any],
    templates_dir: Path,
    list_tokens: Sequence[ListToken] = LIST_TOKENS,
) -> str:
    """Render a single artifact in memory.

    Args:
        spec: Artifact to render
        context: Template context data
        templates_dir: Directory holding the template sources
        list_tokens: List placeholders to expand

    Returns:
        Rendered artifact text
    """
    logger.debug(f"Rendering template: {spec.template}")
    source = load_template(templates_dir / spec.template)
    return render(source, context, list_tokens, name=spec.kind)


def _stage_all(rendered: list[tuple[ArtifactSpec, Path, str]]) -> list[Path]:
    staged: list[Path] = []
    try:
        for spec, output_path, text in rendered:
            try:
                staged.append(stage_text(output_path, text, spec.profile.mode))
            except OSError as exc:
                raise RenderError(
                    f"Cannot write {output_path}: {exc}", artifact=spec.kind
                ) from exc
    except BaseException:
        for tmp in staged:
            discard(tmp)
        raise
    return staged


def generate_artifacts(
    config: EnvironmentConfig,
    dest_root: Path,
    templates_dir: Path | None = None,
    artifacts: Sequence[ArtifactSpec] = ARTIFACTS,
    cancel: threading.Event | None = None,
) -> GenerationResult:
    """Validate, render and commit every artifact.

    Nothing is written unless the configuration is valid and every template
    renders. Each artifact is staged next to its destination and moved into
    place with ``os.replace`` already carrying its permission profile.

    Args:
        config: Environment configuration
        dest_root: Base directory for artifact output paths
        templates_dir: Template directory (defaults to the bundled templates)
        artifacts: Artifacts to produce
        cancel: Event that stops the run before commit when set

    Returns:
        Generation result listing committed paths
    """
    require_valid(config)
    templates_dir = templates_dir or BUNDLED_TEMPLATES
    context = build_context(config)

    logger.info(f"Rendering {len(artifacts)} artifact(s)")

    rendered: list[tuple[ArtifactSpec, Path, str]] = []
    for spec in artifacts:
        _check_cancel(cancel)
        text = render_artifact(spec, context, templates_dir)
        rendered.append((spec, dest_root / spec.output, text))

    staged = _stage_all(rendered)
    try:
        _check_cancel(cancel)
        for (spec, output_path, _), tmp in zip(rendered, staged):
            try:
                commit(tmp, output_path)
            except OSError as exc:
                raise RenderError(
                    f"Cannot replace {output_path}: {exc}", artifact=spec.kind
                ) from exc
            logger.info(f"Generated {output_path} (mode {spec.profile.mode:o})")
    finally:
        for tmp in staged:
            discard(tmp)

    logger.info(f"Successfully generated {len(rendered)} file(s)")
    return GenerationResult(outputs=[path for _, path, _ in rendered])
