"""Resolution of the per-run stack configuration."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from .._utils import read_env
from ..core.models import DEFAULT_FRONTEND_PORT, DEFAULT_TLD, StackConfig

logger = logging.getLogger(__name__)

DOMAIN_KEY = "BASE_DOMAIN"
PORT_KEY = "FRONTEND_PORT"

_PORT_PATTERN = re.compile(r"^\d+$")


class ConfigurationError(ValueError):
    """Raised when a configuration value is missing or malformed."""


def ensure_env_file(root: Path) -> Path:
    """Create the project ``.env`` from ``.env.example`` when it is missing.

    Args:
        root: Project root directory

    Returns:
        Path of the project ``.env`` (which may still not exist when there is
        no example to copy)
    """
    env_file = root / ".env"
    example = root / ".env.example"
    if not env_file.exists() and example.exists():
        shutil.copyfile(example, env_file)
        logger.info("Created .env from .env.example")
    return env_file


def default_domain(root: Path) -> str:
    """Name of the directory that contains the project root."""
    return root.resolve().parent.name


def _first_non_empty(key: str, *sources: Mapping[str, str]) -> str | None:
    for source in sources:
        value = source.get(key, "")
        if value != "":
            return value
    return None


def _parse_port(raw: str) -> int:
    value = raw.strip()
    if not _PORT_PATTERN.match(value) or int(value) <= 0:
        raise ConfigurationError(
            f"{PORT_KEY} must be a positive integer, got: {raw!r}"
        )
    return int(value)


def resolve_config(
    env_file: Path | None,
    overrides: Mapping[str, str] | None = None,
    *,
    root: Path,
    tld: str = DEFAULT_TLD,
) -> StackConfig:
    """Build the stack configuration from the env file, overrides and defaults.

    Precedence is overrides, then values from ``env_file``, then defaults.
    Empty values count as absent.

    Args:
        env_file: Project ``.env`` path; may be None or point to a missing file
        overrides: Explicit values (CLI options / process variables)
        root: Project root, used to derive the default domain
        tld: Top-level domain the sites are served under

    Returns:
        Validated configuration record

    Raises:
        ConfigurationError: The port is not a positive integer or no
            non-empty domain could be determined
    """
    file_values: dict[str, str] = {}
    if env_file is not None and env_file.exists():
        try:
            pairs = read_env(env_file)
        except UnicodeDecodeError as exc:
            raise ConfigurationError(f"{env_file} is not valid UTF-8: {exc}") from exc
        # First occurrence wins, matching the secret lookup.
        for key, value in pairs:
            file_values.setdefault(key, value)
        logger.debug(f"Loaded {len(file_values)} value(s) from {env_file}")

    explicit = dict(overrides or {})

    domain = _first_non_empty(DOMAIN_KEY, explicit, file_values)
    if domain is None:
        domain = default_domain(root)
        logger.debug(f"{DOMAIN_KEY} not set; defaulting to {domain!r}")

    port_raw = _first_non_empty(PORT_KEY, explicit, file_values)
    port = DEFAULT_FRONTEND_PORT if port_raw is None else _parse_port(port_raw)

    try:
        return StackConfig(
            base_domain=domain.strip(), frontend_port=port, tld=tld.strip(".")
        )
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration (domain={domain!r}, port={port}, tld={tld!r}): {exc}"
        ) from exc
