"""
Tests for palletforge.cli
=========================

This module contains tests for the command-line interface.
Tests use Typer's CliRunner for testing CLI commands.

Test Organization
-----------------
- TestVersionCommand: Tests for --version flag
- TestHelpOutput: Tests for help text
- TestNewCommand: Tests for the new command
- TestPreviewCommand: Tests for the preview command
- TestBuildConfig: Merging flags with a config file
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from palletforge import __version__
from palletforge.cli import app, build_config
from palletforge.coordinator import generate_module
from palletforge.errors import InvalidConfiguration
from palletforge.models import CommonType, FileRole, PalletConfig, StorageShape


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a pallet configuration file."""
    path = tmp_path / "pallet.toml"
    path.write_text(
        "[pallet]\n"
        'name = "fromfile"\n'
        'common_types = ["Currency"]\n'
        'storage_shapes = ["StorageMap"]\n'
        'authors = "File Author"\n',
        encoding="utf-8",
    )
    return path


# =============================================================================
# Version Command Tests
# =============================================================================

class TestVersionCommand:
    """Tests for the --version flag."""

    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["-V"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


# =============================================================================
# Help Output Tests
# =============================================================================

class TestHelpOutput:
    """Tests for help text."""

    def test_main_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "palletforge" in result.stdout.lower()
        assert "new" in result.stdout
        assert "preview" in result.stdout

    def test_new_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["new", "--help"])

        assert result.exit_code == 0
        assert "--common-type" in result.stdout


# =============================================================================
# New Command Tests
# =============================================================================

class TestNewCommand:
    """Tests for the new command."""

    def test_new_minimal(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["new", "pricefeed", "--output", str(tmp_path)])

        assert result.exit_code == 0
        assert (tmp_path / "pallet-pricefeed" / "Cargo.toml").is_file()
        assert (tmp_path / "pallet-pricefeed" / "src" / "lib.rs").is_file()

    def test_new_with_features(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            [
                "new", "pricefeed",
                "-c", "Currency",
                "-c", "RuntimeEvent",
                "-s", "StorageMap",
                "--custom-origin",
                "--output", str(tmp_path),
            ],
        )

        assert result.exit_code == 0
        crate = tmp_path / "pallet-pricefeed"
        assert "pallet-balances" in (crate / "Cargo.toml").read_text()
        assert "MyStorageMap" in (crate / "src" / "lib.rs").read_text()
        assert "PricefeedOriginOf" in (crate / "src" / "pallet_types.rs").read_text()

    def test_new_invalid_name(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["new", "price-feed", "--output", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert list(tmp_path.iterdir()) == []

    def test_new_invalid_common_type(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["new", "pricefeed", "-c", "Balance", "--output", str(tmp_path)])

        assert result.exit_code == 1
        assert list(tmp_path.iterdir()) == []

    def test_new_existing_directory(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "pallet-pricefeed").mkdir()

        result = runner.invoke(app, ["new", "pricefeed", "--output", str(tmp_path)])

        assert result.exit_code == 1
        assert "exists" in result.stdout

    def test_new_from_config_file(
        self, runner: CliRunner, tmp_path: Path, config_file: Path
    ) -> None:
        """The positional name wins over the file's name."""
        out = tmp_path / "out"
        out.mkdir()

        result = runner.invoke(
            app, ["new", "pricefeed", "--config", str(config_file), "--output", str(out)]
        )

        assert result.exit_code == 0
        manifest = (out / "pallet-pricefeed" / "Cargo.toml").read_text()
        assert "pallet-balances" in manifest
        assert "File Author" in manifest

    def test_new_missing_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["new", "pricefeed", "--config", str(tmp_path / "missing.toml")]
        )

        assert result.exit_code != 0

    def test_new_write_failure(self, runner: CliRunner, tmp_path: Path) -> None:
        """A filesystem error is reported, not raised."""
        with patch("palletforge.generator.write_files", side_effect=PermissionError("read-only")):
            result = runner.invoke(app, ["new", "pricefeed", "--output", str(tmp_path)])

        assert result.exit_code == 1
        assert "read-only" in result.stdout
        assert not (tmp_path / "pallet-pricefeed").exists()


# =============================================================================
# Preview Command Tests
# =============================================================================

class TestPreviewCommand:
    """Tests for the preview command."""

    def test_preview_plain(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["preview", "pricefeed", "--role", "type_aliases", "--custom-origin", "--plain"]
        )

        expected = generate_module(PalletConfig(name="pricefeed", custom_origin=True))
        assert result.exit_code == 0
        assert result.stdout == expected[FileRole.TYPE_ALIASES]

    def test_preview_default_role(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["preview", "pricefeed", "--plain"])

        assert result.exit_code == 0
        assert "#[frame_support::pallet]" in result.stdout

    def test_preview_highlighted(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["preview", "pricefeed", "-r", "manifest"])

        assert result.exit_code == 0
        assert "Cargo.toml" in result.stdout

    def test_preview_writes_nothing(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        runner.invoke(app, ["preview", "pricefeed", "--plain"])

        assert list(tmp_path.iterdir()) == []

    def test_preview_invalid_role(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["preview", "pricefeed", "--role", "readme"])

        assert result.exit_code != 0

    def test_preview_invalid_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        """A manifest that would be rejected on write fails the preview too."""
        path = tmp_path / "pallet.toml"
        path.write_text(
            "[pallet]\n"
            'name = "pricefeed"\n'
            "description = 'The \"best\" feed'\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["preview", "pricefeed", "--config", str(path), "--plain"])

        assert result.exit_code == 1
        assert "Cargo.toml" in result.stdout


# =============================================================================
# Config Merging Tests
# =============================================================================

class TestBuildConfig:
    """Tests for build_config()."""

    def test_flags_only(self) -> None:
        config = build_config(
            "pricefeed",
            common_types=["RuntimeEvent"],
            storage=["StorageValue"],
            genesis=True,
        )

        assert config.common_types == frozenset({CommonType.RUNTIME_EVENT})
        assert config.storage_shapes == frozenset({StorageShape.STORAGE_VALUE})
        assert config.genesis_config is True
        assert config.custom_origin is False

    def test_file_values_kept(self, config_file: Path) -> None:
        config = build_config("pricefeed", config_file=config_file)

        assert config.name == "pricefeed"
        assert config.common_types == frozenset({CommonType.CURRENCY})
        assert config.authors == "File Author"

    def test_flags_override_file(self, config_file: Path) -> None:
        config = build_config(
            "pricefeed",
            config_file=config_file,
            common_types=["RuntimeOrigin"],
            authors="Flag Author",
        )

        assert config.common_types == frozenset({CommonType.RUNTIME_ORIGIN})
        assert config.storage_shapes == frozenset({StorageShape.STORAGE_MAP})
        assert config.authors == "Flag Author"

    def test_invalid_values(self) -> None:
        with pytest.raises(InvalidConfiguration):
            build_config("pricefeed", storage=["StorageTriple"])
