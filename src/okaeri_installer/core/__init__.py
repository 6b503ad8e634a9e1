"""Core constants shared across the installer."""

from .constants import (
    CONTAINER_SUFFIX,
    ITEMS_CONTAINER,
    MAX_MENU_CONTROLS,
    MAX_PARAMETER_COST,
    RESERVED_PARAMETERS,
)

__all__ = [
    "CONTAINER_SUFFIX",
    "ITEMS_CONTAINER",
    "MAX_MENU_CONTROLS",
    "MAX_PARAMETER_COST",
    "RESERVED_PARAMETERS",
]
