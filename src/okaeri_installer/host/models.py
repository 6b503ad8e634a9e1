"""Data models for the avatar (host) configuration graph.

The host state is owned by the caller and mutated in place by the engine.
Package documents (FX graph variants, parameter lists, menus) reuse the same
types so that merging is a plain transform between two values of one model.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .hierarchy import BoneSlot, Node, node_from_dict, node_to_dict


class ParameterType(Enum):
    """Type of a layer-graph parameter."""

    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    TRIGGER = "trigger"


class ValueType(Enum):
    """Type of a synced expression parameter."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


# Synced bits consumed per expression parameter type.
PARAMETER_TYPE_COST: dict[ValueType, int] = {
    ValueType.INT: 8,
    ValueType.FLOAT: 8,
    ValueType.BOOL: 1,
}


class ControlType(Enum):
    """Kind of an expressions menu control."""

    BUTTON = "button"
    TOGGLE = "toggle"
    SUB_MENU = "sub_menu"
    TWO_AXIS_PUPPET = "two_axis_puppet"
    FOUR_AXIS_PUPPET = "four_axis_puppet"
    RADIAL_PUPPET = "radial_puppet"


class LayerKind(Enum):
    """Slot of a playable layer on the avatar descriptor."""

    BASE = "base"
    ADDITIVE = "additive"
    GESTURE = "gesture"
    ACTION = "action"
    FX = "fx"


# ---------------------------------------------------------------------------
# Layer graph
# ---------------------------------------------------------------------------


@dataclass
class GraphParameter:
    """Parameter declared on a layer graph."""

    name: str
    type: ParameterType = ParameterType.FLOAT
    default: float | int | bool = 0.0


@dataclass
class Layer:
    """A named animation layer.

    ``bindings`` lists the graph parameters the layer drives. ``body`` holds
    the state machine payload, which the installer never interprets.
    """

    name: str
    weight: float = 1.0
    bindings: list[str] = field(default_factory=list)
    body: dict[str, Any] = field(default_factory=dict)


@dataclass
class LayerGraph:
    """Ordered named layers plus their parameter declarations."""

    name: str
    layers: list[Layer] = field(default_factory=list)
    parameters: list[GraphParameter] = field(default_factory=list)

    def layer_names(self) -> list[str]:
        return [layer.name for layer in self.layers]

    def parameter_names(self) -> list[str]:
        return [parameter.name for parameter in self.parameters]

    def find_parameter(self, name: str) -> GraphParameter | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None


@dataclass
class PlayableLayer:
    """One animation layer slot of the avatar descriptor."""

    kind: LayerKind
    graph: LayerGraph | None = None
    is_default: bool = True


# ---------------------------------------------------------------------------
# Expression parameters
# ---------------------------------------------------------------------------


@dataclass
class ExpressionParameter:
    """A synced avatar parameter."""

    name: str
    value_type: ValueType = ValueType.BOOL
    default_value: float = 0.0
    saved: bool = True
    network_synced: bool = True

    @property
    def cost(self) -> int:
        return PARAMETER_TYPE_COST[self.value_type]


@dataclass
class ParameterList:
    """Ordered expression parameters with unique names."""

    name: str = "Parameters"
    parameters: list[ExpressionParameter] = field(default_factory=list)

    def names(self) -> list[str]:
        return [parameter.name for parameter in self.parameters]

    def find(self, name: str) -> ExpressionParameter | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def total_cost(self) -> int:
        return sum(parameter.cost for parameter in self.parameters)


# ---------------------------------------------------------------------------
# Expressions menu
# ---------------------------------------------------------------------------


@dataclass
class MenuControl:
    """A menu entry; sub-menu controls point at a nested :class:`Menu`."""

    name: str
    type: ControlType = ControlType.BUTTON
    parameter: str | None = None
    value: float = 1.0
    submenu: Menu | None = None

    @property
    def is_submenu(self) -> bool:
        return self.type is ControlType.SUB_MENU and self.submenu is not None


@dataclass
class Menu:
    """A named expressions menu (recursive through sub-menu controls)."""

    name: str
    controls: list[MenuControl] = field(default_factory=list)

    def shape(self) -> tuple[str, tuple[Any, ...]]:
        """Structural fingerprint (names, types and nesting)."""
        return (
            self.name,
            tuple(
                (c.name, c.type.value, c.submenu.shape() if c.submenu else None)
                for c in self.controls
            ),
        )


# ---------------------------------------------------------------------------
# Host state
# ---------------------------------------------------------------------------


@dataclass
class HostState:
    """Mutable avatar configuration the engine reconciles packages into.

    ``bones`` maps an armature slot to the path of its node below ``root``.
    """

    name: str
    root: Node
    bones: dict[BoneSlot, str] = field(default_factory=dict)
    playable_layers: list[PlayableLayer] = field(default_factory=list)
    parameters: ParameterList | None = None
    menu: Menu | None = None

    def fx_layer(self) -> PlayableLayer | None:
        """Return the FX playable layer slot, if the avatar declares one."""
        for playable in self.playable_layers:
            if playable.kind is LayerKind.FX:
                return playable
        return None

    def bone(self, slot: BoneSlot) -> Node | None:
        path = self.bones.get(slot)
        if path is None:
            return None
        return self.root.find(path)

    def snapshot(self) -> HostState:
        """Independent deep copy of the whole state."""
        return copy.deepcopy(self)


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def layer_graph_to_dict(graph: LayerGraph) -> dict[str, Any]:
    return {
        "name": graph.name,
        "layers": [
            {
                "name": layer.name,
                "weight": layer.weight,
                "bindings": list(layer.bindings),
                **({"body": layer.body} if layer.body else {}),
            }
            for layer in graph.layers
        ],
        "parameters": [
            {"name": p.name, "type": p.type.value, "default": p.default}
            for p in graph.parameters
        ],
    }


def layer_graph_from_dict(data: dict[str, Any], default_name: str = "FX") -> LayerGraph:
    return LayerGraph(
        name=str(data.get("name") or default_name),
        layers=[
            Layer(
                name=str(item["name"]),
                weight=float(item.get("weight", 1.0)),
                bindings=[str(b) for b in item.get("bindings") or []],
                body=dict(item.get("body") or {}),
            )
            for item in data.get("layers") or []
        ],
        parameters=[
            GraphParameter(
                name=str(item["name"]),
                type=ParameterType(item.get("type", "float")),
                default=item.get("default", 0.0),
            )
            for item in data.get("parameters") or []
        ],
    )


def parameter_list_to_dict(parameters: ParameterList) -> dict[str, Any]:
    return {
        "name": parameters.name,
        "parameters": [
            {
                "name": p.name,
                "type": p.value_type.value,
                "default": p.default_value,
                "saved": p.saved,
                "synced": p.network_synced,
            }
            for p in parameters.parameters
        ],
    }


def parameter_list_from_dict(data: dict[str, Any], default_name: str = "Parameters") -> ParameterList:
    return ParameterList(
        name=str(data.get("name") or default_name),
        parameters=[
            ExpressionParameter(
                name=str(item["name"]),
                value_type=ValueType(item.get("type", "bool")),
                default_value=float(item.get("default", 0.0)),
                saved=bool(item.get("saved", True)),
                network_synced=bool(item.get("synced", True)),
            )
            for item in data.get("parameters") or []
        ],
    )


def menu_to_dict(menu: Menu) -> dict[str, Any]:
    controls = []
    for control in menu.controls:
        entry: dict[str, Any] = {"name": control.name, "type": control.type.value}
        if control.parameter:
            entry["parameter"] = control.parameter
            entry["value"] = control.value
        if control.submenu is not None:
            entry["submenu"] = menu_to_dict(control.submenu)
        controls.append(entry)
    return {"name": menu.name, "controls": controls}


def menu_from_dict(data: dict[str, Any], default_name: str = "Menu") -> Menu:
    controls = []
    for item in data.get("controls") or []:
        submenu = item.get("submenu")
        controls.append(
            MenuControl(
                name=str(item["name"]),
                type=ControlType(item.get("type", "button")),
                parameter=item.get("parameter"),
                value=float(item.get("value", 1.0)),
                submenu=menu_from_dict(submenu) if submenu else None,
            )
        )
    return Menu(name=str(data.get("name") or default_name), controls=controls)


def host_state_to_dict(state: HostState) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": state.name,
        "hierarchy": node_to_dict(state.root),
        "bones": {slot.value: path for slot, path in state.bones.items()},
        "playable_layers": [
            {
                "kind": playable.kind.value,
                "is_default": playable.is_default,
                **({"graph": layer_graph_to_dict(playable.graph)} if playable.graph else {}),
            }
            for playable in state.playable_layers
        ],
    }
    if state.parameters is not None:
        data["parameters"] = parameter_list_to_dict(state.parameters)
    if state.menu is not None:
        data["menu"] = menu_to_dict(state.menu)
    return data


def host_state_from_dict(data: dict[str, Any]) -> HostState:
    if not isinstance(data, dict) or "hierarchy" not in data:
        raise ValueError("Host state must be a mapping with a 'hierarchy' key")
    parameters = data.get("parameters")
    menu = data.get("menu")
    return HostState(
        name=str(data.get("name") or data["hierarchy"].get("name", "Avatar")),
        root=node_from_dict(data["hierarchy"]),
        bones={BoneSlot(slot): str(path) for slot, path in (data.get("bones") or {}).items()},
        playable_layers=[
            PlayableLayer(
                kind=LayerKind(item["kind"]),
                graph=layer_graph_from_dict(item["graph"]) if item.get("graph") else None,
                is_default=bool(item.get("is_default", True)),
            )
            for item in data.get("playable_layers") or []
        ],
        parameters=parameter_list_from_dict(parameters) if parameters is not None else None,
        menu=menu_from_dict(menu) if menu is not None else None,
    )
