"""Template rendering engine."""

from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path
from typing import Any, Iterable, Mapping
from xml.sax.saxutils import escape

from jinja2 import Environment, StrictUndefined, TemplateError, UndefinedError

from ..core.errors import RenderError
from ..core.models import ListToken

logger = logging.getLogger(__name__)

_LEFTOVER_TOKEN = re.compile(r"__[A-Z][A-Z0-9_]*_PLACEHOLDER__")


def xml_escape(value: Any) -> str:
    """Escape a value for XML text and attribute content."""
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


def ps_quote(value: Any) -> str:
    """Quote a value as a PowerShell single-quoted string."""
    return "'" + str(value).replace("'", "''") + "'"


def shell_quote(value: Any) -> str:
    """Quote a value for a POSIX shell."""
    return shlex.quote(str(value))


def _build_environment() -> Environment:
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["xml_escape"] = xml_escape
    env.filters["ps_quote"] = ps_quote
    env.filters["shell_quote"] = shell_quote
    return env


_ENV = _build_environment()


def load_template(template_path: Path) -> str:
    """Read a template source from a file path.

    Args:
        template_path: Path to the template file

    Returns:
        Template source text
    """
    if not template_path.is_file():
        raise RenderError(f"Template not found: {template_path}")
    return template_path.read_text(encoding="utf-8")


def _list_items(value: Any) -> list[str]:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


def expand_list_tokens(
    text: str, variables: Mapping[str, Any], list_tokens: Iterable[ListToken]
) -> str:
    """Replace each list token with one formatted line per item.

    Args:
        text: Text containing list tokens
        variables: Variable mapping holding the lists
        list_tokens: Tokens to expand

    Returns:
        Text with every registered token expanded
    """
    for list_token in list_tokens:
        if list_token.token not in text:
            continue
        if list_token.name not in variables:
            raise RenderError(
                f"List placeholder {list_token.token} references undefined "
                f"variable '{list_token.name}'"
            )
        lines = [
            list_token.pattern.format(item=item)
            for item in _list_items(variables[list_token.name])
        ]
        text = text.replace(list_token.token, "\n".join(lines))
    return text


def render(
    source: str,
    variables: Mapping[str, Any],
    list_tokens: Iterable[ListToken] = (),
    *,
    name: str | None = None,
) -> str:
    """Render template source with scalar and list substitution.

    Args:
        source: Template source text
        variables: Values for scalar placeholders and list tokens
        list_tokens: List placeholders to expand
        name: Artifact name used in error messages

    Returns:
        Rendered text, always ending with a newline
    """
    try:
        text = _ENV.from_string(source).render(**variables)
    except UndefinedError as exc:
        raise RenderError(
            f"Template references an undefined variable ({exc.message})", name
        ) from exc
    except TemplateError as exc:
        raise RenderError(f"Template error: {exc}", name) from exc

    try:
        text = expand_list_tokens(text, variables, list_tokens)
    except RenderError as exc:
        raise RenderError(str(exc), name) from exc

    leftover = _LEFTOVER_TOKEN.search(text)
    if leftover:
        raise RenderError(f"Unresolved list placeholder {leftover.group(0)}", name)

    if not text.endswith("\n"):
        text += "\n"
    return text
