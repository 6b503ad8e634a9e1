"""Load and save host state documents."""

from __future__ import annotations

import logging
from pathlib import Path

from ruamel.yaml import YAML

from .models import HostState, host_state_from_dict, host_state_to_dict

logger = logging.getLogger(__name__)


def load_host_state(path: Path) -> HostState:
    """Read a host state YAML document.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the document does not describe a host state.
    """
    yaml = YAML(typ="safe")
    data = yaml.load(path.read_text(encoding="utf-8"))
    state = host_state_from_dict(data or {})
    logger.debug("Loaded host state %s from %s", state.name, path)
    return state


def save_host_state(state: HostState, path: Path) -> None:
    """Write ``state`` to ``path`` as YAML, replacing any existing file."""
    yaml = YAML()
    yaml.default_flow_style = False
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        yaml.dump(host_state_to_dict(state), handle)
    tmp_path.replace(path)
    logger.debug("Saved host state %s to %s", state.name, path)
