"""Avatar (host) configuration model."""

from .blanks import blank_fx_graph, blank_menu, blank_parameters
from .hierarchy import BoneSlot, Node
from .models import (
    ControlType,
    ExpressionParameter,
    GraphParameter,
    HostState,
    Layer,
    LayerGraph,
    LayerKind,
    Menu,
    MenuControl,
    ParameterList,
    ParameterType,
    PlayableLayer,
    ValueType,
)
from .store import load_host_state, save_host_state

__all__ = [
    "BoneSlot",
    "ControlType",
    "ExpressionParameter",
    "GraphParameter",
    "HostState",
    "Layer",
    "LayerGraph",
    "LayerKind",
    "Menu",
    "MenuControl",
    "Node",
    "ParameterList",
    "ParameterType",
    "PlayableLayer",
    "ValueType",
    "blank_fx_graph",
    "blank_menu",
    "blank_parameters",
    "load_host_state",
    "save_host_state",
]
