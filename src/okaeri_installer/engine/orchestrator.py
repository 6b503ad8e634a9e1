"""Install / uninstall orchestration.

Sequences validation, conflict detection, budget checks and the four merge
steps (items, FX layers, expression parameters, menu) through
:class:`~okaeri_installer.engine.phases.PhaseTracker`. Cleanup always runs.

Completed steps are not rolled back when a later step fails: the host keeps
whatever was applied before the failure, and the error names the phase it
was raised in.
"""

from __future__ import annotations

import copy
import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from okaeri_installer.descriptor.assets import PackageAssets, load_package_assets
from okaeri_installer.descriptor.models import PackageDescriptor
from okaeri_installer.descriptor.validator import ensure_valid
from okaeri_installer.exceptions import ConflictError, InstallerError
from okaeri_installer.host.blanks import blank_fx_graph, blank_menu, blank_parameters
from okaeri_installer.host.models import HostState

from .budget import check_menu_capacity, check_parameter_budget
from .detector import InstalledState, NoFxLayer, detect
from .layers import merge_graphs, remove_from_graph, replace_graph
from .log import MergeLog
from .menu import insert_submenu, remove_submenu
from .parameters import merge_parameters, remove_parameters
from .phases import Phase, PhaseTracker
from .placement import apply_placement, deactivate_asset_item, plan_placement, remove_items
from .workspace import MergeWorkspace, merge_workspace

logger = logging.getLogger(__name__)

__all__ = [
    "InstallOptions",
    "OperationResult",
    "install",
    "is_installed",
    "uninstall",
]


@dataclass
class InstallOptions:
    """Which artifact categories an install merges."""

    install_items: bool = True
    install_layers: bool = True
    write_defaults_on: bool = False
    install_parameters: bool = True
    install_menu: bool = True


@dataclass
class OperationResult:
    """Outcome of a completed install or uninstall."""

    log: MergeLog
    phases: list[Phase] = field(default_factory=list)
    detected: InstalledState | None = None


@dataclass
class _Context:
    """Everything one operation reads and writes, passed to every step."""

    descriptor: PackageDescriptor
    host: HostState
    assets: PackageAssets | None
    log: MergeLog
    tracker: PhaseTracker = field(default_factory=PhaseTracker)
    detected: InstalledState | None = None
    workspace: MergeWorkspace | None = None


def _run(
    ctx: _Context,
    body: Callable[[_Context, ExitStack], None],
    success_message: str,
) -> OperationResult:
    stack = ExitStack()
    succeeded = False
    failure: Exception | None = None
    try:
        body(ctx, stack)
        succeeded = True
    except Exception as exc:
        failure = exc
        if isinstance(exc, InstallerError):
            ctx.log.error(str(exc))
        else:
            ctx.log.error(f"Unexpected error: {exc}")
        raise
    finally:
        failed_phase = ctx.tracker.phase
        if ctx.tracker.phase is not Phase.IDLE:
            ctx.tracker.advance(Phase.CLEANING_UP)
        ctx.log.info("Cleaning up")
        stack.close()
        if ctx.tracker.phase is Phase.CLEANING_UP:
            ctx.tracker.advance(Phase.DONE if succeeded else Phase.FAILED)
        if isinstance(failure, InstallerError):
            failure.log = ctx.log
            failure.failed_phase = failed_phase.value

    ctx.log.success(success_message)
    return OperationResult(log=ctx.log, phases=list(ctx.tracker.history), detected=ctx.detected)


def _validate(ctx: _Context) -> PackageAssets:
    ctx.tracker.advance(Phase.VALIDATING)
    ctx.log.info("Validating asset configuration", 1)
    ensure_valid(ctx.descriptor)
    if ctx.assets is None:
        ctx.assets = load_package_assets(ctx.descriptor)
    return ctx.assets


# ---------------------------------------------------------------------------
# Install
# ---------------------------------------------------------------------------


def _check_conflicts(ctx: _Context, assets: PackageAssets) -> InstalledState:
    name = ctx.descriptor.name
    ctx.tracker.advance(Phase.CONFLICT_CHECKING)
    ctx.log.info("Checking if asset items are already installed on the avatar", 1)
    state = detect(assets, ctx.host)
    ctx.detected = state
    if state.items:
        raise ConflictError(
            f"Cannot install {name}: Asset items are already installed.",
            reasons=[node.name for node in state.items],
        )
    ctx.log.info("Checking avatar FX layers and parameters", 1)
    if state.layers:
        raise ConflictError(
            f"Cannot install {name}: Avatar FX graph already contains some layers from the asset.",
            reasons=state.layers,
        )
    if state.fx_parameters:
        raise ConflictError(
            f"Cannot install {name}: Avatar FX graph already contains some parameters from the asset.",
            reasons=state.fx_parameters,
        )
    return state


def _check_budget(ctx: _Context, assets: PackageAssets, options: InstallOptions) -> None:
    ctx.tracker.advance(Phase.BUDGET_CHECKING)
    if options.install_parameters:
        ctx.log.info("Checking avatar expression parameters", 1)
        total = check_parameter_budget(ctx.host.parameters, assets.parameters)
        logger.debug("Combined parameter cost %d", total)
    if options.install_menu and assets.menu is not None:
        ctx.log.info("Checking avatar expressions menu", 1)
        already_present = ctx.detected is not None and ctx.detected.menu is not None
        if already_present:
            ctx.log.info("Asset expressions menu already installed!", 1)
        check_menu_capacity(ctx.host.menu, already_present)


def _install_items(ctx: _Context, assets: PackageAssets) -> None:
    ctx.log.info("Installing items on avatar")
    plan = plan_placement(assets.unpack_prefab(), ctx.host)
    for move in apply_placement(plan, ctx.host):
        ctx.log.info(move, 1)
    for skipped in plan.skipped:
        ctx.log.info(f"No attachment slot for {skipped}, skipped", 1)
    if deactivate_asset_item(ctx.host, ctx.descriptor.item_name):
        ctx.log.info(f"Disabled {ctx.descriptor.item_name}", 1)


def _install_layers(ctx: _Context, assets: PackageAssets, options: InstallOptions) -> None:
    variant = "WD ON" if options.write_defaults_on else "WD OFF"
    package_graph = assets.fx_graph(options.write_defaults_on)
    if package_graph is None:
        ctx.log.info(f"Asset has no FX graph ({variant}), skipping FX merge")
        return

    ctx.log.info(f"Merging asset FX animations ({variant})")
    slot = ctx.host.fx_layer()
    if slot is None:
        raise NoFxLayer(ctx.host.name)
    host_graph = slot.graph
    if host_graph is None:
        ctx.log.info("Avatar has no FX graph, using a blank one", 1)
        host_graph = blank_fx_graph(ctx.host.name)

    ctx.log.info(f"Folding {len(host_graph.layers)} avatar and {len(package_graph.layers)} asset layers", 1)
    merged = merge_graphs(host_graph, package_graph)
    if ctx.workspace is not None:
        ctx.workspace.checkpoint_graph(merged)
    replace_graph(slot, merged)


def _install_parameters(ctx: _Context, assets: PackageAssets) -> None:
    if assets.parameters is None:
        ctx.log.info("Asset has no expression parameters, skipping")
        return
    ctx.log.info("Merging asset expression parameters")
    if ctx.host.parameters is None:
        ctx.log.info("Avatar has no expression parameters, using blank ones", 1)
        ctx.host.parameters = blank_parameters(ctx.host.name)
    added = merge_parameters(ctx.host.parameters, assets.parameters)
    updated = len(assets.parameters.parameters) - len(added)
    ctx.log.info(f"Added {len(added)}, updated {updated}", 1)


def _install_menu(ctx: _Context, assets: PackageAssets) -> None:
    if assets.menu is None:
        ctx.log.info("Asset has no expressions menu, skipping")
        return
    if ctx.detected is not None and ctx.detected.menu is not None:
        ctx.log.info("Asset expressions menu already installed, skipping")
        return
    ctx.log.info("Merging asset expressions menu")
    if ctx.host.menu is None:
        ctx.log.info("Avatar has no expressions menu, using a blank one", 1)
        ctx.host.menu = blank_menu(ctx.host.name)
    insert_submenu(ctx.host.menu, ctx.descriptor.name, copy.deepcopy(assets.menu))


def install(
    descriptor: PackageDescriptor,
    host: HostState,
    options: InstallOptions | None = None,
    *,
    assets: PackageAssets | None = None,
    log: MergeLog | None = None,
    scratch_dir: Path | None = None,
) -> OperationResult:
    """Install ``descriptor``'s package on ``host`` (mutated in place).

    Validation, conflict, budget and capacity errors are raised before the
    host is touched. Errors during the install steps abort the remaining
    steps without undoing the finished ones.

    Raises:
        InstallerError: Any failure; ``error.log`` carries the merge log.
    """
    options = options or InstallOptions()
    ctx = _Context(descriptor, host, assets, log if log is not None else MergeLog())

    def body(ctx: _Context, stack: ExitStack) -> None:
        ctx.log.info(f"Preparing {descriptor.name} for {host.name}")
        ctx.log.info("Performing pre-install checks")
        assets = _validate(ctx)
        _check_conflicts(ctx, assets)
        _check_budget(ctx, assets, options)

        ctx.workspace = stack.enter_context(merge_workspace(scratch_dir))

        ctx.tracker.advance(Phase.INSTALLING_ITEMS)
        if options.install_items:
            _install_items(ctx, assets)
        ctx.tracker.advance(Phase.INSTALLING_LAYERS)
        if options.install_layers:
            _install_layers(ctx, assets, options)
        ctx.tracker.advance(Phase.INSTALLING_PARAMETERS)
        if options.install_parameters:
            _install_parameters(ctx, assets)
        ctx.tracker.advance(Phase.INSTALLING_MENU)
        if options.install_menu:
            _install_menu(ctx, assets)

    return _run(ctx, body, f"{descriptor.name} installed successfully!")


# ---------------------------------------------------------------------------
# Uninstall
# ---------------------------------------------------------------------------


def uninstall(
    descriptor: PackageDescriptor,
    host: HostState,
    *,
    assets: PackageAssets | None = None,
    log: MergeLog | None = None,
) -> OperationResult:
    """Remove every artifact of ``descriptor``'s package found on ``host``.

    Raises:
        InstallerError: Any failure; ``error.log`` carries the merge log.
    """
    ctx = _Context(descriptor, host, assets, log if log is not None else MergeLog())

    def body(ctx: _Context, stack: ExitStack) -> None:
        ctx.log.info(f"Uninstalling {descriptor.name} from {host.name}")
        assets = _validate(ctx)

        ctx.tracker.advance(Phase.DETECTING)
        state = detect(assets, host)
        ctx.detected = state
        if not state.installed:
            ctx.log.info(f"{descriptor.name} is not installed on {host.name}", 1)

        ctx.tracker.advance(Phase.REMOVING_ITEMS)
        ctx.log.info("Removing items", 1)
        for name in remove_items(host, state.items):
            ctx.log.info(name, 2)

        ctx.tracker.advance(Phase.REMOVING_LAYERS)
        ctx.log.info("Removing FX layers and parameters", 1)
        slot = host.fx_layer()
        if slot is not None and slot.graph is not None and (state.layers or state.fx_parameters):
            slot.graph = remove_from_graph(slot.graph, state.layers, state.fx_parameters)

        ctx.tracker.advance(Phase.REMOVING_PARAMETERS)
        ctx.log.info("Removing expression parameters", 1)
        if host.parameters is not None and state.parameters:
            remove_parameters(host.parameters, state.parameters)

        ctx.tracker.advance(Phase.REMOVING_MENU)
        if state.menu is not None and host.menu is not None and assets.menu is not None:
            ctx.log.info("Removing expressions menu", 1)
            remove_submenu(host.menu, assets.menu.name)

    return _run(ctx, body, f"{descriptor.name} uninstalled successfully!")


def is_installed(
    descriptor: PackageDescriptor,
    host: HostState,
    assets: PackageAssets | None = None,
) -> tuple[bool, list[str]]:
    """Return ``(installed, reasons)`` for the package on ``host``. Read-only."""
    if assets is None:
        assets = load_package_assets(descriptor)
    state = detect(assets, host)
    return state.installed, state.reasons()
