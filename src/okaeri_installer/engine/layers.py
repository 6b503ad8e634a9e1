"""Layer-graph merging and removal.

Merging folds the host graph and then the package graph into a fresh
destination graph; the host's FX slot is only repointed once both folds have
succeeded, so a failed fold leaves the host's graph untouched.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable

from okaeri_installer.exceptions import ConflictError
from okaeri_installer.host.models import LayerGraph, PlayableLayer

logger = logging.getLogger(__name__)


def fold_graph(destination: LayerGraph, source: LayerGraph) -> LayerGraph:
    """Append ``source``'s layers and parameters to ``destination``.

    Names are preserved. A parameter already declared on ``destination`` is
    replaced in place by the source declaration (last fold wins).

    Raises:
        ConflictError: If a layer name already exists on ``destination``.
    """
    existing = set(destination.layer_names())
    clashes = [layer.name for layer in source.layers if layer.name in existing]
    if clashes:
        raise ConflictError(
            f"Cannot merge {source.name} into {destination.name}: duplicate layers",
            reasons=clashes,
        )

    for layer in source.layers:
        destination.layers.append(copy.deepcopy(layer))

    for parameter in source.parameters:
        current = destination.find_parameter(parameter.name)
        if current is None:
            destination.parameters.append(copy.deepcopy(parameter))
        else:
            current.type = parameter.type
            current.default = parameter.default
    return destination


def merge_graphs(host_graph: LayerGraph, package_graph: LayerGraph) -> LayerGraph:
    """Union of two graphs in a new container named after the host graph."""
    merged = LayerGraph(name=host_graph.name)
    fold_graph(merged, host_graph)
    fold_graph(merged, package_graph)
    logger.debug(
        "Merged %d host and %d package layers into %s",
        len(host_graph.layers),
        len(package_graph.layers),
        merged.name,
    )
    return merged


def replace_graph(slot: PlayableLayer, graph: LayerGraph) -> None:
    """Single reference swap of the slot's graph."""
    slot.graph = graph
    slot.is_default = False


def remove_from_graph(graph: LayerGraph, layers: Iterable[str], parameters: Iterable[str]) -> LayerGraph:
    """Copy of ``graph`` without the named layers and parameters."""
    drop_layers = set(layers)
    drop_parameters = set(parameters)
    return LayerGraph(
        name=graph.name,
        layers=[copy.deepcopy(l) for l in graph.layers if l.name not in drop_layers],
        parameters=[copy.deepcopy(p) for p in graph.parameters if p.name not in drop_parameters],
    )
