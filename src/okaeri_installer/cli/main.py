"""Installer CLI commands.

Commands:
    okaeri validate   -- Check a package descriptor
    okaeri status     -- Report which package artifacts an avatar already has
    okaeri install    -- Merge a package into an avatar state file
    okaeri uninstall  -- Remove a package from an avatar state file
    okaeri list       -- List local descriptors with checksums
    okaeri adjust     -- Show the items a user may reposition or rescale
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from ruamel.yaml.error import YAMLError

from okaeri_installer.descriptor import (
    PackageDescriptor,
    discover_descriptors,
    load_descriptor,
    scan_catalog,
    validate_descriptor,
)
from okaeri_installer.engine import (
    InstallOptions,
    OperationResult,
    Phase,
    install,
    is_installed,
    resolve_adjustable_items,
    uninstall,
)
from okaeri_installer.exceptions import InstallerError
from okaeri_installer.host import HostState, load_host_state, save_host_state
from okaeri_installer.settings import InstallerSettings, load_settings

from .ui import print_errors, reasons_table, render_merge_log, render_phases

logger = logging.getLogger(__name__)

app = typer.Typer(help="Okaeri asset installer", no_args_is_help=True)
console = Console(width=120)


class _State:
    project_root: Path = Path.cwd()
    settings: InstallerSettings = InstallerSettings()


_state = _State()

_MUTATING_PHASES = frozenset(
    phase.value for phase in Phase if phase.value.startswith(("installing_", "removing_"))
)


@app.callback()
def main(
    project_root: Path = typer.Option(Path("."), "--project-root", help="Directory holding .okaeri/config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Install and uninstall asset packages on avatars."""
    _state.project_root = project_root.resolve()
    _state.settings = load_settings(_state.project_root)
    level = logging.DEBUG if verbose else getattr(logging, _state.settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("okaeri_installer").setLevel(level)


def _resolve_descriptor(reference: str) -> PackageDescriptor:
    """Load a descriptor from a file path, or by package name from the catalog."""
    path = Path(reference)
    if path.is_file():
        try:
            return load_descriptor(path)
        except (OSError, ValueError, YAMLError) as exc:
            console.print(f"[red]Error:[/red] Cannot read descriptor {path}: {exc}")
            raise typer.Exit(1) from exc
    catalog = discover_descriptors(_state.settings.configs_path(_state.project_root))
    if reference in catalog:
        logger.debug("Resolved %s from the catalog", reference)
        return catalog[reference]
    console.print(f"[red]Error:[/red] No descriptor file or catalog package named {reference!r}")
    raise typer.Exit(1)


def _load_host(path: Path) -> HostState:
    try:
        return load_host_state(path)
    except (OSError, ValueError, YAMLError) as exc:
        console.print(f"[red]Error:[/red] Cannot read avatar state {path}: {exc}")
        raise typer.Exit(1) from exc


def _report(result: OperationResult, title: str) -> None:
    console.print(render_merge_log(result.log, title))
    console.print(render_phases(result.phases))


def _mutated(exc: InstallerError) -> bool:
    """Whether the operation failed after it started changing the avatar.

    Finished steps are not undone, so the partial result is saved.
    """
    return exc.failed_phase in _MUTATING_PHASES


def _report_failure(exc: InstallerError, title: str) -> None:
    if exc.log is not None:
        console.print(render_merge_log(exc.log, title))
    if exc.failed_phase:
        console.print(f"[red]Failed during {exc.failed_phase}[/red]")


@app.command()
def validate(descriptor: str = typer.Argument(..., help="Descriptor file or package name")) -> None:
    """Check a descriptor's required fields and referenced files."""
    package = _resolve_descriptor(descriptor)
    ok, errors = validate_descriptor(package)
    if not ok:
        print_errors(console, errors)
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {package.name} is valid")


@app.command()
def status(
    descriptor: str = typer.Argument(..., help="Descriptor file or package name"),
    host: Path = typer.Argument(..., help="Avatar state YAML file"),
) -> None:
    """Report whether a package is installed on an avatar."""
    package = _resolve_descriptor(descriptor)
    avatar = _load_host(host)
    try:
        installed, reasons = is_installed(package, avatar)
    except InstallerError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    if not installed:
        console.print(f"{package.name} is not installed on {avatar.name}")
        return
    console.print(reasons_table(f"{package.name} is installed on {avatar.name}", reasons))


@app.command("install")
def install_command(
    descriptor: str = typer.Argument(..., help="Descriptor file or package name"),
    host: Path = typer.Argument(..., help="Avatar state YAML file"),
    items: Optional[bool] = typer.Option(None, "--items/--no-items", help="Place asset items"),
    layers: Optional[bool] = typer.Option(None, "--layers/--no-layers", help="Merge FX layers"),
    write_defaults: Optional[bool] = typer.Option(
        None, "--write-defaults/--no-write-defaults", help="Use the write-defaults ON FX graph"
    ),
    parameters: Optional[bool] = typer.Option(None, "--parameters/--no-parameters", help="Merge expression parameters"),
    menu: Optional[bool] = typer.Option(None, "--menu/--no-menu", help="Add the expressions menu"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run against a copy and do not save"),
) -> None:
    """Install a package on an avatar and save the result."""
    package = _resolve_descriptor(descriptor)
    avatar = _load_host(host)
    defaults = _state.settings.install.to_options()
    options = InstallOptions(
        install_items=defaults.install_items if items is None else items,
        install_layers=defaults.install_layers if layers is None else layers,
        write_defaults_on=defaults.write_defaults_on if write_defaults is None else write_defaults,
        install_parameters=defaults.install_parameters if parameters is None else parameters,
        install_menu=defaults.install_menu if menu is None else menu,
    )
    target = avatar.snapshot() if dry_run else avatar
    title = f"Install {package.name}"
    try:
        result = install(package, target, options)
    except InstallerError as exc:
        _report_failure(exc, title)
        if not dry_run and _mutated(exc):
            save_host_state(avatar, host)
        raise typer.Exit(1) from exc

    _report(result, title)
    if dry_run:
        console.print("[yellow]Dry run: avatar state not saved[/yellow]")
        return
    save_host_state(avatar, host)


@app.command("uninstall")
def uninstall_command(
    descriptor: str = typer.Argument(..., help="Descriptor file or package name"),
    host: Path = typer.Argument(..., help="Avatar state YAML file"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Run against a copy and do not save"),
) -> None:
    """Remove a package from an avatar and save the result."""
    package = _resolve_descriptor(descriptor)
    avatar = _load_host(host)
    target = avatar.snapshot() if dry_run else avatar
    title = f"Uninstall {package.name}"
    try:
        result = uninstall(package, target)
    except InstallerError as exc:
        _report_failure(exc, title)
        if not dry_run and _mutated(exc):
            save_host_state(avatar, host)
        raise typer.Exit(1) from exc

    _report(result, title)
    if not dry_run:
        save_host_state(avatar, host)


@app.command("list")
def list_command(
    configs_dir: Optional[Path] = typer.Argument(None, help="Directory of descriptor files"),
) -> None:
    """List local package descriptors."""
    directory = configs_dir or _state.settings.configs_path(_state.project_root)
    entries = scan_catalog(directory)
    if not entries:
        console.print(f"No descriptors found in {directory}")
        return

    table = Table(title=f"Packages in {directory}")
    table.add_column("File")
    table.add_column("Package", style="cyan")
    table.add_column("Valid")
    table.add_column("CRC32", style="bright_black")
    for entry in entries:
        if entry.descriptor is None:
            table.add_row(entry.path.name, "-", "[red]unreadable[/red]", entry.checksum)
            continue
        ok, _ = validate_descriptor(entry.descriptor)
        valid = "[green]yes[/green]" if ok else "[red]no[/red]"
        table.add_row(entry.path.name, entry.descriptor.name, valid, entry.checksum)
    console.print(table)


@app.command()
def adjust(
    descriptor: str = typer.Argument(..., help="Descriptor file or package name"),
    host: Path = typer.Argument(..., help="Avatar state YAML file"),
) -> None:
    """List the installed items that may be moved, rotated or scaled."""
    package = _resolve_descriptor(descriptor)
    avatar = _load_host(host)
    try:
        adjustable = resolve_adjustable_items(package, avatar)
    except InstallerError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    table = Table(title=f"Adjustable items of {package.name}")
    table.add_column("Item", style="cyan")
    table.add_column("Path")
    table.add_column("Adjust")
    for node in adjustable.movable:
        table.add_row(node.name, node.path(), "move / rotate")
    for node in adjustable.scalable:
        table.add_row(node.name, node.path(), "scale")
    console.print(table)
