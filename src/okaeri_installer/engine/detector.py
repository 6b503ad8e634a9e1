"""Installed-state detection.

Four read-only probes report which package artifacts are already present on
an avatar. Install uses them as a conflict gate; uninstall uses them to find
what to remove.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from okaeri_installer.core.constants import CONTAINER_SUFFIX, RESERVED_PARAMETERS
from okaeri_installer.descriptor.assets import PackageAssets
from okaeri_installer.exceptions import StructuralError
from okaeri_installer.host.hierarchy import Node
from okaeri_installer.host.models import HostState, Menu, MenuControl

logger = logging.getLogger(__name__)


class NoFxLayer(StructuralError):
    """The avatar declares no FX playable layer."""

    def __init__(self, avatar: str):
        super().__init__(f"Avatar {avatar} has no FX animation layer")


@dataclass
class MenuMatch:
    """Location of a package sub-menu control inside the host menu tree."""

    parent: Menu
    control: MenuControl

    @property
    def index(self) -> int:
        return next(i for i, c in enumerate(self.parent.controls) if c is self.control)


@dataclass
class InstalledState:
    """Aggregated probe results for one (package, avatar) pair."""

    items: list[Node] = field(default_factory=list)
    layers: list[str] = field(default_factory=list)
    fx_parameters: list[str] = field(default_factory=list)
    parameters: list[str] = field(default_factory=list)
    menu: MenuMatch | None = None

    @property
    def installed(self) -> bool:
        return bool(self.items or self.layers or self.fx_parameters or self.parameters or self.menu)

    @property
    def has_conflicts(self) -> bool:
        """Artifacts that block a fresh install."""
        return bool(self.items or self.layers or self.fx_parameters)

    def reasons(self) -> list[str]:
        reasons: list[str] = []
        if self.items:
            reasons.append("Items already on avatar: " + ", ".join(n.name for n in self.items))
        if self.layers:
            reasons.append("FX layers already on avatar: " + ", ".join(self.layers))
        if self.fx_parameters:
            reasons.append("FX parameters already on avatar: " + ", ".join(self.fx_parameters))
        if self.parameters:
            reasons.append("Expression parameters already on avatar: " + ", ".join(self.parameters))
        if self.menu is not None:
            reasons.append(f"Expressions menu {self.menu.control.submenu.name} already on avatar")  # type: ignore[union-attr]
        return reasons


def _ordered_intersection(names: list[str], wanted: set[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for name in names:
        if name in wanted and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def package_item_names(prefab: Node) -> list[str]:
    """Top-level item names of a prefab, unwrapping container children."""
    names: list[str] = []
    for child in prefab.children:
        if child.name.endswith(CONTAINER_SUFFIX):
            names.extend(grandchild.name for grandchild in child.children)
        else:
            names.append(child.name)
    return names


def find_installed_items(assets: PackageAssets, host: HostState) -> list[Node]:
    """Host nodes whose names match a package item (pre-order)."""
    prefab = assets.unpack_prefab()
    wanted = set(package_item_names(prefab))
    return [node for node in host.root.descendants() if node.name in wanted]


def find_installed_layers(assets: PackageAssets, host: HostState) -> tuple[list[str], list[str]]:
    """FX layer names and FX parameter names the package shares with the host.

    Both write-defaults variants are considered. Reserved framework
    parameters are never reported.

    Raises:
        NoFxLayer: If the host declares no FX playable layer.
    """
    fx_layer = host.fx_layer()
    if fx_layer is None:
        raise NoFxLayer(host.name)
    if fx_layer.graph is None:
        return [], []

    package_layers: set[str] = set()
    package_parameters: set[str] = set()
    for graph in assets.fx_variants():
        package_layers.update(graph.layer_names())
        package_parameters.update(graph.parameter_names())
    package_parameters -= RESERVED_PARAMETERS

    layers = _ordered_intersection(fx_layer.graph.layer_names(), package_layers)
    parameters = _ordered_intersection(fx_layer.graph.parameter_names(), package_parameters)
    return layers, parameters


def find_installed_parameters(assets: PackageAssets, host: HostState) -> list[str]:
    """Expression parameter names the package shares with the host."""
    if host.parameters is None or assets.parameters is None:
        return []
    return _ordered_intersection(host.parameters.names(), set(assets.parameters.names()))


def find_submenu(menu: Menu, target: str) -> MenuMatch | None:
    """Pre-order depth-first search for a sub-menu control named ``target``.

    A control matches when its sub-menu's name equals ``target``. The first
    match wins; matched sub-menus are not searched further.
    """
    for control in menu.controls:
        if control.is_submenu:
            if control.submenu.name == target:  # type: ignore[union-attr]
                return MenuMatch(parent=menu, control=control)
            nested = find_submenu(control.submenu, target)  # type: ignore[arg-type]
            if nested is not None:
                return nested
    return None


def find_installed_menu(assets: PackageAssets, host: HostState) -> MenuMatch | None:
    if host.menu is None or assets.menu is None:
        return None
    return find_submenu(host.menu, assets.menu.name)


def detect(assets: PackageAssets, host: HostState) -> InstalledState:
    """Run all four probes.

    Raises:
        NoFxLayer: If the host declares no FX playable layer.
    """
    layers, fx_parameters = find_installed_layers(assets, host)
    state = InstalledState(
        items=find_installed_items(assets, host),
        layers=layers,
        fx_parameters=fx_parameters,
        parameters=find_installed_parameters(assets, host),
        menu=find_installed_menu(assets, host),
    )
    logger.debug("Detected %s on %s: %s", "installed" if state.installed else "absent", host.name, state.reasons())
    return state
