"""Shared pytest fixtures for the stack-setup test suite.

Provides:
- A project root nested so its default domain is ``acme``
- A recording stand-in for ``run_logged``
- Setup contexts wired to the bundled stubs
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable

import pytest

from stack_setup.core.models import StackConfig
from stack_setup.orchestrator import SetupContext, resolve_paths
from stack_setup.settings import Settings


class RecordingRunner:
    """Records every command instead of executing it.

    ``fail_on`` holds command prefixes that raise CalledProcessError;
    ``hooks`` maps command prefixes to callables run with the call's cwd.
    """

    def __init__(
        self,
        fail_on: list[tuple[str, ...]] | None = None,
        hooks: dict[tuple[str, ...], Callable[[Path], None]] | None = None,
    ) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self.fail_on = fail_on or []
        self.hooks = hooks or {}

    def __call__(self, cmd: Any, **kwargs: Any) -> subprocess.CompletedProcess[str]:
        command = [str(part) for part in cmd]
        cwd = kwargs.get("cwd")
        self.calls.append((command, cwd))

        for prefix in self.fail_on:
            if tuple(command[: len(prefix)]) == prefix:
                raise subprocess.CalledProcessError(
                    1, command, output="", stderr=f"{prefix[0]}: boom\n"
                )
        for prefix, hook in self.hooks.items():
            if tuple(command[: len(prefix)]) == prefix:
                hook(Path(cwd) if cwd is not None else Path.cwd())

        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    @property
    def commands(self) -> list[list[str]]:
        return [command for command, _ in self.calls]

    def invoked(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.commands)

    def executables(self) -> set[str]:
        return {command[0] for command in self.commands}


# ---------------------------------------------------------------------------
# Paths & configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project root whose parent directory is named ``acme``."""
    root = tmp_path / "acme" / "stack"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def acme_config() -> StackConfig:
    return StackConfig(base_domain="acme", frontend_port=3000)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BASE_DOMAIN",
        "FRONTEND_PORT",
        "STACK_SETUP_STUBS_DIR",
        "STACK_SETUP_PACKAGES_DIR",
        "STACK_SETUP_HERD_BIN",
        "STACK_SETUP_TLD",
    ):
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def make_context(
    project_root: Path, acme_config: StackConfig
) -> Callable[..., SetupContext]:
    def _make(
        runner: RecordingRunner, config: StackConfig | None = None
    ) -> SetupContext:
        return SetupContext(
            paths=resolve_paths(project_root),
            config=config or acme_config,
            settings=Settings(),
            runner=runner,
        )

    return _make
