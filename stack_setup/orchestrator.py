from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ._utils import run_logged
from .core.models import Mode, Service, ServiceState, StackConfig
from .environment.secrets import read_secret
from .gate import probe_all, service_dir
from .rendering.engine import render_to_file
from .rendering.io import copy_stub
from .settings import Settings

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess[str]]

SSO_PACKAGE = "omnify-client-laravel-sso"
SSO_COMPOSER_NAME = "omnifyjp/omnify-client-laravel-sso"
JWT_COMPOSER_NAME = "lcobucci/jwt"
REACT_PACKAGES = ("omnify-client-react", "omnify-client-react-sso")
SSO_CONFIG_TAG = "sso-client-config"

CREATE_NEXT_APP_OPTIONS = (
    "--typescript",
    "--tailwind",
    "--eslint",
    "--app",
    "--src-dir",
    "--import-alias",
    "@/*",
    "--turbopack",
    "--use-pnpm",
    "--yes",
)

# Laravel ships a Vite frontend; the Next.js app replaces it.
BACKEND_FRONTEND_DIRS = ("resources/js", "resources/css", "public/build", "node_modules")
BACKEND_FRONTEND_FILES = (
    "vite.config.js",
    "package.json",
    "package-lock.json",
    "postcss.config.js",
    "tailwind.config.js",
)

# (stub, target inside backend/, status message)
BACKEND_STATIC_STUBS = (
    ("bootstrap-app.php.stub", "bootstrap/app.php", "Middleware configured"),
    ("User.php.stub", "app/Models/User.php", "User model configured"),
)

CORS_STUB = "cors.php.stub"
BACKEND_ENV_STUB = "backend.env.stub"
FRONTEND_ENV_STUB = "frontend.env.stub"


@dataclass(frozen=True)
class Paths:
    root: Path
    env_file: Path
    backend: Path
    frontend: Path
    backend_env: Path
    frontend_env: Path


@dataclass(frozen=True)
class SetupContext:
    paths: Paths
    config: StackConfig
    settings: Settings = field(default_factory=Settings)
    runner: Runner = run_logged


def resolve_paths(root: Path) -> Paths:
    backend = service_dir(Service.BACKEND, root)
    frontend = service_dir(Service.FRONTEND, root)
    return Paths(
        root=root,
        env_file=root / ".env",
        backend=backend,
        frontend=frontend,
        backend_env=backend / ".env",
        frontend_env=frontend / ".env.local",
    )


def api_site(config: StackConfig) -> str:
    return f"api.{config.base_domain}"


def api_url(config: StackConfig) -> str:
    return f"https://{api_site(config)}.{config.tld}"


def frontend_url(config: StackConfig) -> str:
    return f"https://{config.base_domain}.{config.tld}"


def required_tools(
    mode: Mode, states: dict[Service, ServiceState], settings: Settings
) -> list[str]:
    """Executables that must be on PATH for ``mode`` given the current tree."""
    backend_missing = states[Service.BACKEND] is ServiceState.NEEDS_SCAFFOLD
    frontend_missing = states[Service.FRONTEND] is ServiceState.NEEDS_SCAFFOLD

    if mode is Mode.CONFIG_ONLY:
        tools = [settings.herd_bin]
        if not backend_missing:
            tools.append("php")
        return tools

    tools = ["npm", "php", settings.herd_bin]
    if backend_missing:
        tools.extend(["laravel", "composer"])
    if frontend_missing:
        tools.extend(["npx", "pnpm"])
    return tools


def install_dependencies(ctx: SetupContext) -> None:
    logger.info("Step 1: Install dependencies")
    ctx.runner(["npm", "install"], cwd=ctx.paths.root)
    logger.info("✓ npm dependencies")


def _strip_frontend_assets(backend: Path) -> None:
    for rel in BACKEND_FRONTEND_DIRS:
        path = backend / rel
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()
    for rel in BACKEND_FRONTEND_FILES:
        (backend / rel).unlink(missing_ok=True)


def scaffold_backend(ctx: SetupContext) -> None:
    paths = ctx.paths
    run = ctx.runner

    run(["laravel", "new", paths.backend.name, "--no-interaction"], cwd=paths.root)
    run(["php", "artisan", "install:api", "--no-interaction"], cwd=paths.backend)

    logger.info("Installing SSO Client (local)...")
    run(
        [
            "composer",
            "config",
            f"repositories.{SSO_PACKAGE}",
            "path",
            ctx.settings.package_path(SSO_PACKAGE),
        ],
        cwd=paths.backend,
    )
    run(
        [
            "composer",
            "config",
            "--no-plugins",
            f"allow-plugins.{SSO_COMPOSER_NAME}",
            "true",
        ],
        cwd=paths.backend,
    )
    run(
        [
            "composer",
            "require",
            f"{SSO_COMPOSER_NAME}:@dev",
            JWT_COMPOSER_NAME,
            "--no-interaction",
        ],
        cwd=paths.backend,
    )

    _strip_frontend_assets(paths.backend)

    render_to_file(
        ctx.settings.stub(CORS_STUB), paths.backend / "config" / "cors.php", ctx.config
    )
    logger.info("✓ CORS configured")

    for stub_name, target, message in BACKEND_STATIC_STUBS:
        copy_stub(ctx.settings.stub(stub_name), paths.backend / target)
        logger.info(f"✓ {message}")


def configure_backend_env(ctx: SetupContext) -> str | None:
    """Re-render ``backend/.env`` keeping its APP_KEY.

    A fresh key is generated through artisan when none was preserved.

    Returns:
        The preserved key, or None when a new one was generated
    """
    secret = read_secret(ctx.paths.backend_env)
    render_to_file(
        ctx.settings.stub(BACKEND_ENV_STUB),
        ctx.paths.backend_env,
        ctx.config.with_secret(secret),
    )
    logger.info("✓ backend/.env")

    if secret is None:
        ctx.runner(["php", "artisan", "key:generate", "--force"], cwd=ctx.paths.backend)
    return secret


def publish_sso_config(ctx: SetupContext) -> bool:
    """Publish the SSO client config; failures are logged and ignored."""
    try:
        ctx.runner(
            [
                "php",
                "artisan",
                "vendor:publish",
                f"--tag={SSO_CONFIG_TAG}",
                "--force",
            ],
            cwd=ctx.paths.backend,
            capture_output=True,
            echo="never",
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        detail = getattr(exc, "stderr", None) or str(exc)
        logger.warning(f"Skipping SSO config publish: {detail.strip()}")
        return False
    return True


def link_backend(ctx: SetupContext) -> None:
    herd = ctx.settings.herd_bin
    site = api_site(ctx.config)
    ctx.runner([herd, "link", site], cwd=ctx.paths.backend)
    ctx.runner([herd, "secure", site], cwd=ctx.paths.backend)
    logger.info(f"✓ {api_url(ctx.config)}")


def scaffold_frontend(ctx: SetupContext) -> None:
    paths = ctx.paths
    ctx.runner(
        [
            "npx",
            "--yes",
            "create-next-app@latest",
            paths.frontend.name,
            *CREATE_NEXT_APP_OPTIONS,
        ],
        cwd=paths.root,
    )
    ctx.runner(
        ["pnpm", "add", *(ctx.settings.package_path(p) for p in REACT_PACKAGES)],
        cwd=paths.frontend,
    )


def configure_frontend_env(ctx: SetupContext) -> None:
    render_to_file(
        ctx.settings.stub(FRONTEND_ENV_STUB), ctx.paths.frontend_env, ctx.config
    )
    logger.info("✓ frontend/.env.local")


def proxy_frontend(ctx: SetupContext) -> None:
    config = ctx.config
    ctx.runner(
        [
            ctx.settings.herd_bin,
            "proxy",
            config.base_domain,
            f"http://localhost:{config.frontend_port}",
            "--secure",
        ],
        cwd=ctx.paths.root,
    )
    logger.info(f"✓ {frontend_url(config)} → localhost:{config.frontend_port}")


def summary_lines(config: StackConfig) -> list[str]:
    return [
        f"  API:      {api_url(config)}",
        f"  Frontend: {frontend_url(config)} "
        f"(run: cd frontend && pnpm dev -p {config.frontend_port})",
    ]


def full_setup(ctx: SetupContext) -> None:
    states = probe_all(ctx.paths.root)

    install_dependencies(ctx)

    logger.info("Step 2: Create backend")
    if states[Service.BACKEND] is ServiceState.NEEDS_SCAFFOLD:
        scaffold_backend(ctx)
    else:
        logger.info("backend/ exists; skipping scaffold")

    logger.info("Step 3: Setup environment")
    configure_backend_env(ctx)
    publish_sso_config(ctx)
    logger.info("✓ Environment configured")
    link_backend(ctx)

    logger.info("Step 4: Create frontend")
    if states[Service.FRONTEND] is ServiceState.NEEDS_SCAFFOLD:
        scaffold_frontend(ctx)
    else:
        logger.info("frontend/ exists; skipping scaffold")
    configure_frontend_env(ctx)
    logger.info("✓ frontend")

    proxy_frontend(ctx)

    print("")
    print("Done!")
    for line in summary_lines(ctx.config):
        print(line)


def update_config(ctx: SetupContext) -> None:
    """Re-render env files and Herd entries without scaffolding anything."""
    logger.info("Updating configuration files...")
    states = probe_all(ctx.paths.root)

    if states[Service.BACKEND] is ServiceState.EXISTS_ALREADY:
        configure_backend_env(ctx)
    if states[Service.FRONTEND] is ServiceState.EXISTS_ALREADY:
        configure_frontend_env(ctx)
    if states[Service.BACKEND] is ServiceState.EXISTS_ALREADY:
        link_backend(ctx)

    proxy_frontend(ctx)

    print("")
    print("Config updated!")
    for line in summary_lines(ctx.config):
        print(line)


def run(ctx: SetupContext, mode: Mode) -> None:
    if mode is Mode.CONFIG_ONLY:
        update_config(ctx)
    else:
        full_setup(ctx)
