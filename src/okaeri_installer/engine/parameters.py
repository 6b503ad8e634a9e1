"""Expression parameter list merging (add-or-update) and removal."""

from __future__ import annotations

from typing import Iterable

from okaeri_installer.host.models import ExpressionParameter, ParameterList


def merge_parameters(host: ParameterList, package: ParameterList) -> list[str]:
    """Merge ``package`` into ``host`` in place.

    Existing names get the package's default value, saved flag and sync flag;
    their type and position are kept. New names are appended in package
    order. Returns the names that were appended.
    """
    added: list[str] = []
    for parameter in package.parameters:
        existing = host.find(parameter.name)
        if existing is not None:
            existing.default_value = parameter.default_value
            existing.saved = parameter.saved
            existing.network_synced = parameter.network_synced
            continue

        host.parameters.append(
            ExpressionParameter(
                name=parameter.name,
                value_type=parameter.value_type,
                default_value=parameter.default_value,
                saved=parameter.saved,
                network_synced=parameter.network_synced,
            )
        )
        added.append(parameter.name)
    return added


def remove_parameters(host: ParameterList, names: Iterable[str]) -> list[str]:
    """Drop every parameter whose name is in ``names``; return the dropped names."""
    drop = set(names)
    removed = [p.name for p in host.parameters if p.name in drop]
    host.parameters = [p for p in host.parameters if p.name not in drop]
    return removed
