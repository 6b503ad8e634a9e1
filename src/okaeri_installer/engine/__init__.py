"""Reconciliation engine: detection, checks, merging and orchestration."""

from .budget import check_menu_capacity, check_parameter_budget, parameter_cost
from .detector import InstalledState, MenuMatch, NoFxLayer, detect, find_submenu
from .layers import fold_graph, merge_graphs, remove_from_graph
from .log import LogLine, LogSeverity, MergeLog, parse_line
from .menu import insert_submenu, remove_submenu
from .orchestrator import InstallOptions, OperationResult, install, is_installed, uninstall
from .parameters import merge_parameters, remove_parameters
from .phases import Phase, PhaseTracker
from .placement import (
    AdjustableItems,
    SLOT_SUFFIXES,
    resolve_adjustable_items,
    resolve_slot,
)

__all__ = [
    "AdjustableItems",
    "InstallOptions",
    "InstalledState",
    "LogLine",
    "LogSeverity",
    "MenuMatch",
    "MergeLog",
    "NoFxLayer",
    "OperationResult",
    "Phase",
    "PhaseTracker",
    "SLOT_SUFFIXES",
    "check_menu_capacity",
    "check_parameter_budget",
    "detect",
    "find_submenu",
    "fold_graph",
    "insert_submenu",
    "install",
    "is_installed",
    "merge_graphs",
    "merge_parameters",
    "parameter_cost",
    "parse_line",
    "remove_from_graph",
    "remove_parameters",
    "remove_submenu",
    "resolve_adjustable_items",
    "resolve_slot",
    "uninstall",
]
