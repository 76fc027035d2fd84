"""
palletforge.cli - Command Line Interface
========================================

This module provides the command-line interface for palletforge using Typer.
It is a thin, non-interactive layer: it builds a :class:`PalletConfig` from
flags and/or a TOML file, and hands it to the generator.

Architecture
------------
    app (main entry point)
    ├── new      - Create a new pallet crate
    └── preview  - Print one rendered file-role without writing anything

Usage Examples
--------------
    $ palletforge new pricefeed --common-type Currency --storage StorageMap

    $ palletforge new pricefeed --config pallet.toml --output pallets/

    $ palletforge preview pricefeed --role type_aliases --custom-origin

See Also
--------
- generator.py: Crate generation and file writing
- models.py: Configuration data models
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax

from palletforge import __version__
from palletforge.coordinator import generate_module
from palletforge.errors import PalletForgeError
from palletforge.generator import OUTPUT_PATHS, create_pallet, validate_manifest
from palletforge.models import FileRole, PalletConfig


# =============================================================================
# CLI Application Setup
# =============================================================================

app = typer.Typer(
    name="palletforge",
    help="Scaffold consistent FRAME pallets from a feature configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Console for rich output
console = Console()


# =============================================================================
# Shared Options
# =============================================================================

CommonTypeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--common-type",
        "-c",
        help="Runtime type used by the pallet: RuntimeEvent, RuntimeOrigin, Currency (repeatable)",
    ),
]
StorageOption = Annotated[
    list[str] | None,
    typer.Option(
        "--storage",
        "-s",
        help="Storage shape to scaffold, e.g. StorageValue, StorageMap (repeatable)",
    ),
]
CustomOriginOption = Annotated[
    bool | None,
    typer.Option("--custom-origin/--no-custom-origin", help="Scaffold a custom origin"),
]
DefaultConfigOption = Annotated[
    bool | None,
    typer.Option(
        "--default-config/--no-default-config",
        help="Derive the mock runtime's config from the pallet's default prelude",
    ),
]
GenesisOption = Annotated[
    bool | None,
    typer.Option("--genesis/--no-genesis", help="Scaffold a genesis configuration"),
]
WorkspaceOption = Annotated[
    bool | None,
    typer.Option("--workspace/--no-workspace", help="Inherit workspace package settings"),
]
AuthorsOption = Annotated[
    str | None,
    typer.Option("--authors", "-a", help="Authors written to Cargo.toml"),
]
DescriptionOption = Annotated[
    str | None,
    typer.Option("--description", "-d", help="Short pallet description"),
]
ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-f",
        help="TOML file with the pallet configuration; flags override it",
        exists=True,
        dir_okay=False,
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show engine debug logging"),
]


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(Panel(
            f"[bold green]palletforge[/] version [cyan]{__version__}[/]\n\n"
            f"[dim]FRAME pallet scaffolder[/]",
            border_style="green",
        ))
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route engine logging through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def build_config(
    name: str,
    *,
    config_file: Path | None = None,
    common_types: list[str] | None = None,
    storage: list[str] | None = None,
    custom_origin: bool | None = None,
    default_config: bool | None = None,
    genesis: bool | None = None,
    workspace: bool | None = None,
    authors: str | None = None,
    description: str | None = None,
) -> PalletConfig:
    """
    Merge a TOML file (if any) with explicit flags into a configuration.

    Raises
    ------
    InvalidConfiguration
        If the merged values are invalid.
    """
    data: dict[str, Any] = {}
    if config_file is not None:
        data = PalletConfig.from_toml(config_file).model_dump()

    overrides = {
        "name": name,
        "common_types": common_types,
        "storage_shapes": storage,
        "custom_origin": custom_origin,
        "default_config": default_config,
        "genesis_config": genesis,
        "in_workspace": workspace,
        "authors": authors,
        "description": description,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    return PalletConfig.from_mapping(data)


# =============================================================================
# Main Callback
# =============================================================================

@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    [bold]palletforge[/] - FRAME pallet scaffolder.

    [bold]Quick Start:[/]

        palletforge new pricefeed --common-type RuntimeEvent --storage StorageValue
    """


# =============================================================================
# New Command - Create a New Pallet
# =============================================================================

@app.command()
def new(
    name: Annotated[str, typer.Argument(help="Name of the pallet to create")],
    common_type: CommonTypeOption = None,
    storage: StorageOption = None,
    custom_origin: CustomOriginOption = None,
    default_config: DefaultConfigOption = None,
    genesis: GenesisOption = None,
    workspace: WorkspaceOption = None,
    authors: AuthorsOption = None,
    description: DescriptionOption = None,
    config_file: ConfigFileOption = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Directory to create the crate in (default: current directory)",
        ),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Create a new pallet crate.

    [bold]Examples:[/]

        # Minimal pallet
        palletforge new pricefeed

        # Pallet with a currency, events and a storage map
        palletforge new pricefeed -c Currency -c RuntimeEvent -s StorageMap
    """
    configure_logging(verbose)

    try:
        config = build_config(
            name,
            config_file=config_file,
            common_types=common_type,
            storage=storage,
            custom_origin=custom_origin,
            default_config=default_config,
            genesis=genesis,
            workspace=workspace,
            authors=authors,
            description=description,
        )
        create_pallet(config, output_dir or Path.cwd(), verbose=True)
    except (PalletForgeError, OSError, ValueError) as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)


# =============================================================================
# Preview Command
# =============================================================================

@app.command()
def preview(
    name: Annotated[str, typer.Argument(help="Name of the pallet")],
    role: Annotated[
        FileRole,
        typer.Option("--role", "-r", help="File-role to print"),
    ] = FileRole.LIB,
    common_type: CommonTypeOption = None,
    storage: StorageOption = None,
    custom_origin: CustomOriginOption = None,
    default_config: DefaultConfigOption = None,
    genesis: GenesisOption = None,
    workspace: WorkspaceOption = None,
    config_file: ConfigFileOption = None,
    plain: Annotated[
        bool,
        typer.Option("--plain", help="Print raw text without highlighting"),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """
    Print one rendered file of a pallet without writing anything.

    The whole module is still rendered, checked against the cross-file
    rules and its manifest validated, so a preview fails whenever
    [cyan]new[/] would reject the generated files.
    """
    configure_logging(verbose)

    try:
        config = build_config(
            name,
            config_file=config_file,
            common_types=common_type,
            storage=storage,
            custom_origin=custom_origin,
            default_config=default_config,
            genesis=genesis,
            workspace=workspace,
        )
        module = generate_module(config)
        validate_manifest(module[FileRole.MANIFEST])
    except (PalletForgeError, ValueError) as e:
        rprint(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    text = module[role]
    if plain:
        typer.echo(text, nl=False)
        return

    lexer = "toml" if role is FileRole.MANIFEST else "rust"
    console.print(Panel(
        Syntax(text, lexer, theme="ansi_dark"),
        title=f"[bold]{OUTPUT_PATHS[role]}[/]",
        border_style="blue",
    ))
