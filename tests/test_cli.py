"""Tests for workspace_version_tools.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from workspace_version_tools.cli import cli
from workspace_version_tools.models import ReleaseChannel


class TestBumpCommands:
    """Tests for the bump command group."""

    @patch("workspace_version_tools.cli.run_bump")
    def test_stable_passes_options(
        self, mock_run_bump: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli,
            [
                "bump",
                "stable",
                "-w",
                str(stable_root),
                "-p",
                str(prerelease_root),
                "-b",
                "core major",
                "-b",
                "api patch",
                "--dry-run",
            ],
        )

        assert result.exit_code == 0, result.output
        mock_run_bump.assert_called_once_with(
            stable_root,
            prerelease_root,
            ["core major", "api patch"],
            ReleaseChannel.STABLE,
            dry_run=True,
            commit=False,
            update_lock=True,
        )

    @patch("workspace_version_tools.cli.run_bump")
    def test_prerelease_swaps_checkouts(
        self, mock_run_bump: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli,
            [
                "bump",
                "prerelease",
                "-w",
                str(prerelease_root),
                "-s",
                str(stable_root),
                "-b",
                "core minor",
                "--commit",
                "--skip-lock",
            ],
        )

        assert result.exit_code == 0, result.output
        mock_run_bump.assert_called_once_with(
            stable_root,
            prerelease_root,
            ["core minor"],
            ReleaseChannel.PRERELEASE,
            dry_run=False,
            commit=True,
            update_lock=False,
        )

    def test_requires_an_instruction(self, uv_workspaces: tuple[Path, Path]) -> None:
        stable_root, prerelease_root = uv_workspaces
        result = CliRunner().invoke(
            cli, ["bump", "stable", "-w", str(stable_root), "-p", str(prerelease_root)]
        )
        assert result.exit_code == 2
        assert "--bump-instruction" in result.output

    @patch("workspace_version_tools.pipeline.step")
    def test_unknown_package_is_reported(
        self, mock_step: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli,
            [
                "bump",
                "stable",
                "-w",
                str(stable_root),
                "-p",
                str(prerelease_root),
                "-b",
                "ghost major",
            ],
        )

        assert result.exit_code == 1
        assert "Error: Package ghost not found in stable" in result.output

    @patch("workspace_version_tools.pipeline.step")
    def test_malformed_instruction_is_reported(
        self, mock_step: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli,
            [
                "bump",
                "stable",
                "-w",
                str(stable_root),
                "-p",
                str(prerelease_root),
                "-b",
                "core",
            ],
        )

        assert result.exit_code == 1
        assert "Invalid bump instruction 'core'" in result.output

    @patch("workspace_version_tools.pipeline.run")
    @patch("workspace_version_tools.pipeline.step")
    def test_dry_run_end_to_end(
        self,
        mock_step: MagicMock,
        mock_run: MagicMock,
        uv_workspaces: tuple[Path, Path],
    ) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli,
            [
                "bump",
                "stable",
                "-w",
                str(stable_root),
                "-p",
                str(prerelease_root),
                "-b",
                "core major",
                "--dry-run",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Packages updated: 3" in result.output
        mock_run.assert_not_called()


class TestVersionCommands:
    """Tests for make-at-least-stable and make-prerelease."""

    @patch("workspace_version_tools.pipeline.step")
    def test_make_at_least_stable(
        self, mock_step: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        _, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli, ["make-at-least-stable", "-w", str(prerelease_root)]
        )

        assert result.exit_code == 0, result.output
        assert "Updated 3 packages" in result.output
        content = (prerelease_root / "packages" / "core" / "pyproject.toml").read_text()
        assert 'version = "1.0.1"' in content

    @patch("workspace_version_tools.pipeline.step")
    def test_make_prerelease(
        self, mock_step: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, _ = uv_workspaces

        result = CliRunner().invoke(
            cli, ["make-prerelease", "-w", str(stable_root), "--label", "beta"]
        )

        assert result.exit_code == 0, result.output
        content = (stable_root / "packages" / "api" / "pyproject.toml").read_text()
        assert 'version = "1.2.0-beta.1"' in content

    @patch("workspace_version_tools.pipeline.step")
    def test_make_prerelease_refuses_prerelease_checkout(
        self, mock_step: MagicMock, uv_workspaces: tuple[Path, Path]
    ) -> None:
        _, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli, ["make-prerelease", "-w", str(prerelease_root)]
        )

        assert result.exit_code == 1
        assert "already have a prerelease version" in result.output


class TestShow:
    def test_lists_packages_in_build_order(
        self, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, _ = uv_workspaces

        result = CliRunner().invoke(cli, ["show", "-w", str(stable_root)])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            f"stable ({stable_root.resolve()})",
            "  core 1.0.0 (packages/core) → bumps reach [api, cli]",
            "  api 1.2.0 (packages/api) ← [core] → bumps reach [cli]",
            "  cli 0.3.0 (packages/cli) ← [api]",
        ]

    def test_both_channels(self, uv_workspaces: tuple[Path, Path]) -> None:
        stable_root, prerelease_root = uv_workspaces

        result = CliRunner().invoke(
            cli, ["show", "-w", str(stable_root), "-p", str(prerelease_root)]
        )

        assert result.exit_code == 0, result.output
        assert f"prerelease ({prerelease_root.resolve()})" in result.output
        assert "  core 1.0.1-alpha (packages/core)" in result.output

    def test_package_focus(self, tmp_path: Path, uv_workspace_writer) -> None:
        root = uv_workspace_writer(
            tmp_path / "ws",
            {
                "core": ("1.0.0", []),
                "api": ("1.0.0", ["core"]),
                "web": ("1.0.0", ["api"]),
                "docs": ("0.1.0", []),
            },
        )

        result = CliRunner().invoke(cli, ["show", "-w", str(root), "--package", "API"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[1:] == [
            "  core 1.0.0 (packages/core) → bumps reach [api, web]",
            "  api 1.0.0 (packages/api) ← [core] → bumps reach [web]",
            "  web 1.0.0 (packages/web) ← [api]",
        ]

    def test_package_missing_from_workspace(
        self, uv_workspaces: tuple[Path, Path]
    ) -> None:
        stable_root, _ = uv_workspaces

        result = CliRunner().invoke(
            cli, ["show", "-w", str(stable_root), "--package", "ghost"]
        )

        assert result.exit_code == 0, result.output
        assert "  ghost is not in this workspace" in result.output
