"""
palletforge.generator - Pallet Crate Generation
===============================================

This module turns a rendered module into a pallet crate on disk. It is the
file-writing collaborator of the engine: the coordinator decides *what* every
file says, this module decides *where* it goes.

Architecture
------------
The generator follows a pipeline pattern:

    1. Refuse an existing crate directory
    2. Render and validate every file-role (coordinator)
    3. Check the manifest is valid TOML
    4. Write files to disk
    5. On any failure, remove the partial crate

Usage Example
-------------
>>> from pathlib import Path
>>> from palletforge.generator import create_pallet
>>> from palletforge.models import PalletConfig
>>>
>>> result = create_pallet(PalletConfig(name="pricefeed"), Path("pallets"))
>>> result.crate_path
PosixPath('pallets/pallet-pricefeed')

See Also
--------
- coordinator.py: Rendering and cross-file validation
- templates/: Jinja2 template files
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import tomlkit
from rich.console import Console
from rich.panel import Panel
from tomlkit.exceptions import ParseError

from palletforge.coordinator import generate_module
from palletforge.models import FileRole, PalletConfig


if TYPE_CHECKING:
    from collections.abc import Mapping

    from palletforge.renderer import TemplateSet


logger = logging.getLogger(__name__)

# Console for rich output
console = Console()

# Where each file-role lands inside the crate
OUTPUT_PATHS: dict[FileRole, Path] = {
    FileRole.MANIFEST: Path("Cargo.toml"),
    FileRole.LIB: Path("src/lib.rs"),
    FileRole.CONFIG_DEFAULTS: Path("src/config_preludes.rs"),
    FileRole.TYPE_ALIASES: Path("src/pallet_types.rs"),
    FileRole.BUSINESS_LOGIC: Path("src/pallet_logic.rs"),
    FileRole.MOCK_ENVIRONMENT: Path("src/mock.rs"),
    FileRole.TESTS: Path("src/tests.rs"),
}


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class GenerationResult:
    """
    Result of a pallet generation operation.

    Attributes
    ----------
    success : bool
        Whether the crate was created successfully.

    crate_path : Path
        Path to the created crate directory.

    files_created : list[Path]
        All files that were written.

    errors : list[str]
        Errors that occurred (only populated if success=False).
    """

    success: bool
    crate_path: Path
    files_created: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Rendering
# =============================================================================


def render_pallet(
    config: PalletConfig,
    template_set: TemplateSet | None = None,
) -> dict[Path, str]:
    """
    Render every file of the crate, keyed by path relative to the crate root.

    Raises
    ------
    PalletForgeError
        If rendering or the cross-file checks fail. Nothing is returned in
        that case.
    """
    module = generate_module(config, template_set)
    return {OUTPUT_PATHS[role]: text for role, text in module.items()}


def validate_manifest(content: str) -> None:
    """
    Check that a rendered manifest is valid TOML.

    Free-text fields are copied into the manifest verbatim, so a quote in
    ``description`` can still break it.

    Raises
    ------
    ValueError
        If the manifest does not parse.
    """
    try:
        tomlkit.parse(content)
    except ParseError as e:
        raise ValueError(f"Invalid Cargo.toml: {e}") from e


# =============================================================================
# File Writing
# =============================================================================


def write_files(crate_dir: Path, files: Mapping[Path, str]) -> list[Path]:
    """
    Write rendered files into the crate directory.

    Parameters
    ----------
    crate_dir : Path
        Root directory of the crate.

    files : Mapping[Path, str]
        Mapping of relative paths to file contents.

    Returns
    -------
    list[Path]
        Paths of the written files.

    Raises
    ------
    OSError
        If file writing fails.
    """
    created_files: list[Path] = []

    for relative_path, content in files.items():
        full_path = crate_dir / relative_path

        # Ensure parent directory exists
        full_path.parent.mkdir(parents=True, exist_ok=True)

        full_path.write_text(content, encoding="utf-8")
        created_files.append(full_path)
        logger.debug("Wrote %s", full_path)

    return created_files


# =============================================================================
# Main Generation Function
# =============================================================================


def create_pallet(
    config: PalletConfig,
    output_dir: Path,
    *,
    template_set: TemplateSet | None = None,
    verbose: bool = True,
) -> GenerationResult:
    """
    Create a pallet crate from the given configuration.

    Parameters
    ----------
    config : PalletConfig
        Complete pallet configuration.

    output_dir : Path
        Directory the crate directory is created in.

    template_set : TemplateSet | None
        Templates to render; the packaged catalog by default.

    verbose : bool, default=True
        If True, display progress information to the console.

    Returns
    -------
    GenerationResult
        Result object containing the crate path and written files.

    Raises
    ------
    FileExistsError
        If the crate directory already exists.
    PalletForgeError
        If the configuration cannot be rendered into a consistent module.

    Notes
    -----
    All files are rendered and validated before anything is written. If
    writing fails partway through, the crate directory is removed.
    """
    crate_dir = output_dir / config.names.crate_name
    result = GenerationResult(success=False, crate_path=crate_dir)

    if crate_dir.exists():
        raise FileExistsError(
            f"Directory '{crate_dir}' already exists. "
            "Use a different name or remove the existing directory."
        )

    if verbose:
        console.print()
        console.print(
            Panel(
                f"[bold blue]Creating pallet:[/] [green]{config.names.crate_name}[/]\n"
                f"[dim]Common types: {', '.join(sorted(t.value for t in config.common_types)) or 'none'} | "
                f"Storage: {', '.join(sorted(s.value for s in config.storage_shapes)) or 'none'}[/]",
                title="[bold]palletforge[/]",
                border_style="blue",
            )
        )

    files = render_pallet(config, template_set)
    validate_manifest(files[OUTPUT_PATHS[FileRole.MANIFEST]])

    try:
        crate_dir.mkdir(parents=True)
        result.files_created.extend(write_files(crate_dir, files))
    except Exception as e:
        result.errors.append(str(e))

        # Clean up partial crate
        if crate_dir.exists():
            shutil.rmtree(crate_dir)

        if verbose:
            console.print(f"\n[bold red]Error:[/] {e}")
            console.print("[dim]Partial crate directory was removed.[/]")

        raise

    result.success = True

    if verbose:
        for path in result.files_created:
            console.print(f"  Created {path.relative_to(output_dir)}")
        console.print()
        console.print(
            Panel(
                f"[bold green]✨ Pallet created successfully![/]\n\n"
                f"[dim]Location:[/] {crate_dir}\n\n"
                f"[bold]Next steps:[/]\n"
                f"  cd {crate_dir}\n"
                f"  cargo test",
                title="[bold green]Success[/]",
                border_style="green",
            )
        )

    return result
