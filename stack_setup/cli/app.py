"""Main CLI application."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import typer
from typing_extensions import Annotated

from .. import orchestrator
from .._utils import ensure
from ..core.models import Mode
from ..environment.resolver import (
    DOMAIN_KEY,
    PORT_KEY,
    ConfigurationError,
    ensure_env_file,
    resolve_config,
)
from ..gate import probe_all
from ..rendering.engine import TemplateRenderError
from ..settings import Settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="stack-setup",
    help="Scaffold and configure the Laravel + Next.js local development stack.",
    add_completion=False,
)


@app.command()
def setup(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Config only: re-render env files and Herd entries, skip scaffolding.",
        ),
    ] = False,
    root: Annotated[
        str,
        typer.Option(
            "--root",
            help="Project root containing backend/ and frontend/ (default: cwd).",
            metavar="DIR",
        ),
    ] = "",
    domain: Annotated[
        str,
        typer.Option(
            "--domain",
            envvar=DOMAIN_KEY,
            help="Base domain; sites are served as <domain>.test and api.<domain>.test.",
            metavar="NAME",
        ),
    ] = "",
    port: Annotated[
        str,
        typer.Option(
            "--port",
            envvar=PORT_KEY,
            help="Port the Next.js dev server listens on (default: 3000).",
            metavar="PORT",
        ),
    ] = "",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Set up the backend and frontend projects, or refresh their config."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    project_root = Path(root).resolve() if root else Path.cwd()
    mode = Mode.CONFIG_ONLY if force else Mode.FULL_SETUP
    settings = Settings()

    env_file = ensure_env_file(project_root)
    overrides = {DOMAIN_KEY: domain, PORT_KEY: port}
    try:
        config = resolve_config(
            env_file, overrides, root=project_root, tld=settings.tld
        )
    except ConfigurationError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc

    logger.info("Stack: Laravel + Next.js")
    logger.info(f"Domain: {config.base_domain}")
    logger.info(f"Frontend Port: {config.frontend_port}")
    if mode is Mode.CONFIG_ONLY:
        logger.info("Mode: --force (config only)")

    ensure(orchestrator.required_tools(mode, probe_all(project_root), settings))

    ctx = orchestrator.SetupContext(
        paths=orchestrator.resolve_paths(project_root),
        config=config,
        settings=settings,
    )
    try:
        orchestrator.run(ctx, mode)
    except subprocess.CalledProcessError as exc:
        logger.error(f"Command failed ({exc.returncode}): {' '.join(exc.cmd)}")
        raise typer.Exit(code=1) from exc
    except (TemplateRenderError, OSError, UnicodeDecodeError) as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
