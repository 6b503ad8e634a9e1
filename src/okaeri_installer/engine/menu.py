"""Menu tree splicing."""

from __future__ import annotations

from okaeri_installer.host.models import ControlType, Menu, MenuControl

from .detector import find_submenu


def insert_submenu(root: Menu, display_name: str, submenu: Menu) -> MenuControl:
    """Append a sub-menu control for ``submenu`` to the root menu."""
    control = MenuControl(name=display_name, type=ControlType.SUB_MENU, submenu=submenu)
    root.controls.append(control)
    return control


def remove_submenu(root: Menu, target: str) -> MenuControl | None:
    """Remove the first sub-menu control (pre-order) whose sub-menu is named ``target``.

    Only that one control is removed; siblings and later matches are left
    alone. Returns the removed control, or ``None`` when nothing matched.
    """
    match = find_submenu(root, target)
    if match is None:
        return None
    del match.parent.controls[match.index]
    return match.control
