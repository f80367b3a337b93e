"""Tests for deploy.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

from deploy.core.result import Err, Ok
from deploy.platform.process import ProcessError, format_command, run

PY = sys.executable


class TestRun:
    def test_success_returns_output(self, tmp_path: Path) -> None:
        result = run(PY, ["-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_stdout_then_stderr(self, tmp_path: Path) -> None:
        code = "import sys; sys.stderr.write('err\\n'); sys.stdout.write('out\\n')"

        result = run(PY, ["-c", code], cwd=tmp_path)

        assert result == Ok("out\nerr\n")

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = run(PY, ["-c", "import os; print(os.getcwd())"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert Path(result.value.strip()).resolve() == tmp_path.resolve()

    def test_args_are_not_shell_interpreted(self, tmp_path: Path) -> None:
        arg = "a b; echo $HOME"

        result = run(PY, ["-c", "import sys; print(sys.argv[1])", arg], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == arg

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        code = "import sys; print('partial'); sys.stderr.write('broken'); sys.exit(4)"

        result = run(PY, ["-c", code], cwd=tmp_path)

        assert isinstance(result, Err)
        error = result.error
        assert error.returncode == 4
        assert error.stdout.strip() == "partial"
        assert error.stderr == "broken"
        assert "partial" in error.output and "broken" in error.output
        assert error.command == PY
        assert error.args[0] == "-c"

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run("definitely-not-a-real-tool-xyz", ["--help"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_large_output_on_both_streams(self, tmp_path: Path) -> None:
        """Filling both pipes past their buffers must not hang the run."""
        size = 1_200_000
        code = (
            "import sys\n"
            f"sys.stdout.write('o' * {size})\n"
            f"sys.stderr.write('e' * {size})\n"
            "sys.stdout.flush(); sys.stderr.flush()\n"
            "sys.exit(3)\n"
        )

        result = run(PY, ["-c", code], cwd=tmp_path, timeout=60)

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert len(result.error.stdout) == size
        assert len(result.error.stderr) == size

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(PY, ["-c", "import time; time.sleep(30)"], cwd=tmp_path, timeout=0.5)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestProcessError:
    def test_str_names_the_command(self) -> None:
        error = ProcessError("dotnet", ("publish", "-c", "Release"), 1, "", "")

        assert str(error) == "Command dotnet publish -c Release failed!"

    def test_output_combines_streams(self) -> None:
        error = ProcessError("x", (), 2, "a", "b")

        assert error.output == "ab"


def test_format_command() -> None:
    assert format_command("codesign", ["--deep", "App.app"]) == "codesign --deep App.app"
    assert format_command("ls", []) == "ls"
