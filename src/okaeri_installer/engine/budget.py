"""Parameter budget and menu capacity checks.

Both checks are read-only and run before any mutation of the host.
"""

from __future__ import annotations

from okaeri_installer.core.constants import MAX_MENU_CONTROLS, MAX_PARAMETER_COST
from okaeri_installer.exceptions import BudgetExceededError, CapacityError
from okaeri_installer.host.models import ExpressionParameter, Menu, ParameterList


def parameter_cost(parameters: ParameterList | list[ExpressionParameter] | None) -> int:
    """Sum of per-type unit costs."""
    if parameters is None:
        return 0
    if isinstance(parameters, ParameterList):
        return parameters.total_cost()
    return sum(parameter.cost for parameter in parameters)


def check_parameter_budget(
    host: ParameterList | None,
    package: ParameterList | None,
    ceiling: int = MAX_PARAMETER_COST,
) -> int:
    """Return the combined cost, or raise if it exceeds ``ceiling``.

    Raises:
        BudgetExceededError: If ``host + package > ceiling``.
    """
    host_cost = parameter_cost(host)
    package_cost = parameter_cost(package)
    if host_cost + package_cost > ceiling:
        raise BudgetExceededError(required=package_cost, available=max(ceiling - host_cost, 0))
    return host_cost + package_cost


def check_menu_capacity(menu: Menu | None, already_present: bool, limit: int = MAX_MENU_CONTROLS) -> None:
    """Ensure the root menu can take one more control.

    A package whose sub-menu is already present needs no new slot.

    Raises:
        CapacityError: If the root menu already holds ``limit`` controls.
    """
    if already_present or menu is None:
        return
    if len(menu.controls) >= limit:
        raise CapacityError(limit)
