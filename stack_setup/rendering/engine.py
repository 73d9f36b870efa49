"""Stub rendering engine."""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, meta
from jinja2.exceptions import TemplateError

from ..core.models import (
    OPTIONAL_PLACEHOLDERS,
    PLACEHOLDER_FIELDS,
    Placeholder,
    StackConfig,
)
from .io import atomic_write_text

logger = logging.getLogger(__name__)

_KNOWN_NAMES = frozenset(p.value for p in Placeholder)


class TemplateRenderError(ValueError):
    """Raised when a stub references an unknown placeholder or fails to render."""


def _environment(search_path: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(search_path)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def check_placeholder_fields() -> None:
    """Fail fast when a placeholder has no backing configuration field."""
    for placeholder in Placeholder:
        field = PLACEHOLDER_FIELDS.get(placeholder)
        if field is None or field not in StackConfig.model_fields:
            raise TemplateRenderError(
                f"Placeholder {placeholder.value} has no configuration field"
            )


def placeholder_values(config: StackConfig) -> dict[str, str]:
    """Map every placeholder name to its string value for ``config``.

    Args:
        config: Stack configuration (with the preserved secret, if any)

    Returns:
        Rendering context keyed by placeholder name
    """
    values: dict[str, str] = {}
    for placeholder, field in PLACEHOLDER_FIELDS.items():
        value = getattr(config, field)
        if value is None:
            if placeholder not in OPTIONAL_PLACEHOLDERS:
                raise TemplateRenderError(
                    f"Required placeholder {placeholder.value} has no value"
                )
            value = ""
        values[placeholder.value] = str(value)
    return values


def load_template(template_path: Path) -> Template:
    """Load a stub and verify it only references known placeholders.

    Args:
        template_path: Path to the stub file

    Returns:
        Compiled Jinja2 template
    """
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    env = _environment(template_path.parent)
    source = template_path.read_text(encoding="utf-8")
    try:
        referenced = meta.find_undeclared_variables(env.parse(source))
    except TemplateError as exc:
        raise TemplateRenderError(f"Cannot parse {template_path}: {exc}") from exc

    unknown = sorted(referenced - _KNOWN_NAMES)
    if unknown:
        raise TemplateRenderError(
            f"{template_path} references unknown placeholder(s): {', '.join(unknown)}"
        )

    return env.get_template(template_path.name)


def render_template(template_path: Path, config: StackConfig) -> str:
    template = load_template(template_path)
    try:
        return template.render(**placeholder_values(config))
    except TemplateError as exc:
        raise TemplateRenderError(f"Failed to render {template_path}: {exc}") from exc


def render_to_file(
    template_path: Path, output_path: Path, config: StackConfig, file_mode: int = 0o644
) -> Path:
    """Render a stub and atomically replace ``output_path`` with the result.

    Args:
        template_path: Stub to render
        output_path: Target file
        config: Stack configuration
        file_mode: File permissions

    Returns:
        Output file path
    """
    logger.debug(f"Rendering template: {template_path}")

    rendered_text = render_template(template_path, config)
    atomic_write_text(output_path, rendered_text, mode=file_mode)
    logger.debug(f"Rendered {template_path} → {output_path}")

    return output_path


check_placeholder_fields()
