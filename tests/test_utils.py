"""Tests for stack_setup._utils."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from stack_setup._utils import ensure, missing_commands, read_env, run_logged


class TestRunLogged:
    def test_success_returns_completed_process(self):
        result = run_logged(
            [sys.executable, "-c", "print('hello')"], capture_output=True, echo="never"
        )
        assert result.returncode == 0
        assert result.stdout.strip() == "hello"

    def test_failure_raises_with_output(self):
        with pytest.raises(subprocess.CalledProcessError) as excinfo:
            run_logged(
                [
                    sys.executable,
                    "-c",
                    "import sys; sys.stderr.write('bad'); sys.exit(3)",
                ],
                capture_output=True,
                echo="never",
            )
        assert excinfo.value.returncode == 3
        assert excinfo.value.stderr == "bad"

    def test_check_false_returns_failure(self):
        result = run_logged(
            [sys.executable, "-c", "raise SystemExit(2)"],
            capture_output=True,
            check=False,
            echo="never",
        )
        assert result.returncode == 2

    def test_echo_on_error_mirrors_output(self, capsys: pytest.CaptureFixture[str]):
        run_logged(
            [sys.executable, "-c", "print('diag'); raise SystemExit(1)"],
            capture_output=True,
            check=False,
            echo="on_error",
        )
        assert "diag" in capsys.readouterr().out

    def test_runs_in_cwd(self, tmp_path: Path):
        result = run_logged(
            [sys.executable, "-c", "import os; print(os.getcwd())"],
            capture_output=True,
            echo="never",
            cwd=tmp_path,
        )
        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()


class TestEnsure:
    def test_present_command(self):
        assert missing_commands([sys.executable]) == []
        ensure([sys.executable])

    def test_missing_command_exits(self, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as excinfo:
            ensure(["definitely-not-a-real-tool-xyz"])
        assert excinfo.value.code == 1
        assert "missing dependency: definitely-not-a-real-tool-xyz" in capsys.readouterr().err


def test_read_env_skips_comments_and_blanks(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("# comment\n\nBASE_DOMAIN=acme\nNOVALUE\nURL=a=b\n")
    assert read_env(env_file) == [("BASE_DOMAIN", "acme"), ("URL", "a=b")]
