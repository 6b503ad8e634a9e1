"""Loading of the documents a package ships (prefab, graphs, parameters, menu)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from okaeri_installer.exceptions import AssetLoadError
from okaeri_installer.host.hierarchy import Node, node_from_dict
from okaeri_installer.host.models import (
    LayerGraph,
    Menu,
    ParameterList,
    layer_graph_from_dict,
    menu_from_dict,
    parameter_list_from_dict,
)

from .models import PackageDescriptor

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PackageAssets:
    """Parsed package documents. Optional documents are ``None`` when unset."""

    prefab: Node
    fx_graph_wd_off: LayerGraph | None = None
    fx_graph_wd_on: LayerGraph | None = None
    parameters: ParameterList | None = None
    menu: Menu | None = None

    def fx_graph(self, write_defaults_on: bool) -> LayerGraph | None:
        return self.fx_graph_wd_on if write_defaults_on else self.fx_graph_wd_off

    def fx_variants(self) -> list[LayerGraph]:
        return [g for g in (self.fx_graph_wd_off, self.fx_graph_wd_on) if g is not None]

    def unpack_prefab(self) -> Node:
        """Fresh transient copy of the prefab hierarchy."""
        return self.prefab.clone()


def _read_document(path: Path, build: Callable[[dict[str, Any], str], T]) -> T:
    yaml = YAML(typ="safe")
    try:
        data = yaml.load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise AssetLoadError(path, exc.strerror or str(exc)) from exc
    except YAMLError as exc:
        raise AssetLoadError(path, f"malformed YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise AssetLoadError(path, "document must be a mapping")
    try:
        return build(data, path.stem)
    except (KeyError, TypeError, ValueError) as exc:
        raise AssetLoadError(path, f"invalid document: {exc}") from exc


def _optional(descriptor: PackageDescriptor, relative: str, build: Callable[[dict[str, Any], str], T]) -> T | None:
    if not relative.strip():
        return None
    return _read_document(descriptor.resolve(relative), build)


def _prefab(data: dict[str, Any], stem: str) -> Node:
    return node_from_dict({"name": stem, **data})


def load_package_assets(descriptor: PackageDescriptor) -> PackageAssets:
    """Read every document ``descriptor`` references.

    Raises:
        AssetLoadError: If a referenced document is unreadable or malformed.
    """
    if not descriptor.prefab.strip():
        raise AssetLoadError(descriptor.base_path, "descriptor declares no prefab")
    assets = PackageAssets(
        prefab=_read_document(descriptor.resolve(descriptor.prefab), _prefab),
        fx_graph_wd_off=_optional(descriptor, descriptor.fx_graph_wd_off, layer_graph_from_dict),
        fx_graph_wd_on=_optional(descriptor, descriptor.fx_graph_wd_on, layer_graph_from_dict),
        parameters=_optional(descriptor, descriptor.parameters, parameter_list_from_dict),
        menu=_optional(descriptor, descriptor.menu, menu_from_dict),
    )
    logger.debug("Loaded package assets for %s", descriptor.name)
    return assets
