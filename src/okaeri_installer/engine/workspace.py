"""Scratch storage for an install, released on every exit path."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ruamel.yaml import YAML

from okaeri_installer.host.models import LayerGraph, layer_graph_to_dict

logger = logging.getLogger(__name__)


class MergeWorkspace:
    """Temporary directory holding intermediate merge results."""

    def __init__(self, root: Path):
        self.root = root

    def checkpoint_graph(self, graph: LayerGraph) -> Path:
        """Persist a merged graph before it replaces the host's graph."""
        path = self.root / f"{graph.name}.merged.yaml"
        yaml = YAML()
        yaml.default_flow_style = False
        with path.open("w", encoding="utf-8") as handle:
            yaml.dump(layer_graph_to_dict(graph), handle)
        return path


@contextmanager
def merge_workspace(parent: Path | None = None) -> Iterator[MergeWorkspace]:
    """Create a scratch directory and always remove it afterwards."""
    root = Path(tempfile.mkdtemp(prefix="okaeri_install_", dir=parent))
    logger.debug("Created merge workspace %s", root)
    try:
        yield MergeWorkspace(root)
    finally:
        if root.exists():
            shutil.rmtree(root)
        logger.debug("Removed merge workspace %s", root)
