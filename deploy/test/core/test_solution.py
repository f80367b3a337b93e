"""Tests for deploy.core.solution module."""

from __future__ import annotations

from pathlib import Path

import pytest

from deploy.core.result import Err, Ok
from deploy.core.solution import SolutionNotFound, find_solution_root, is_solution_root


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    """Solution at tmp_path/repo with nested project directories."""
    root = tmp_path / "repo"
    (root / "Game.Desktop" / "bin").mkdir(parents=True)
    (root / "Game.sln").write_text("")
    return root


class TestFindSolutionRoot:
    def test_found_in_start_dir(self, checkout: Path) -> None:
        assert find_solution_root(checkout, "Game", env={}) == Ok(checkout.resolve())

    def test_found_walking_upward(self, checkout: Path) -> None:
        start = checkout / "Game.Desktop" / "bin"

        assert find_solution_root(start, "Game", env={}) == Ok(checkout.resolve())

    def test_found_in_known_subdir(self, tmp_path: Path, checkout: Path) -> None:
        tools = tmp_path / "deploy-tools"
        tools.mkdir()

        result = find_solution_root(tools, "Game", subdir="repo", env={})

        assert result == Ok(checkout.resolve())

    def test_not_found(self, tmp_path: Path) -> None:
        result = find_solution_root(tmp_path, "Missing", env={})

        assert isinstance(result, Err)
        assert isinstance(result.error, SolutionNotFound)
        assert result.error.searched_from == tmp_path.resolve()
        assert "Missing.sln" in str(result.error)

    def test_env_override(self, tmp_path: Path, checkout: Path) -> None:
        env = {"DEPLOY_SOLUTION_ROOT": str(checkout)}

        assert find_solution_root(tmp_path, "Game", env=env) == Ok(checkout.resolve())

    def test_env_override_must_be_valid(self, tmp_path: Path) -> None:
        env = {"DEPLOY_SOLUTION_ROOT": str(tmp_path)}

        result = find_solution_root(tmp_path, "Game", env=env)

        assert isinstance(result, Err)
        assert "DEPLOY_SOLUTION_ROOT" in str(result.error)


def test_is_solution_root(checkout: Path) -> None:
    assert is_solution_root(checkout, "Game") is True
    assert is_solution_root(checkout, "Other") is False
