"""Read and write package descriptor documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from .models import PackageDescriptor

logger = logging.getLogger(__name__)


def descriptor_from_dict(data: dict[str, Any], origin: Path | None = None) -> PackageDescriptor:
    """Build a descriptor from parsed data.

    A relative ``base_path`` is anchored at ``origin`` (the directory holding
    the descriptor file) so packages can ship self-contained.
    """
    values = {key: value for key, value in data.items() if key in PackageDescriptor.model_fields}
    for key in ("movable_items", "scalable_items"):
        values[key] = tuple(str(item) for item in values.get(key) or ())
    for key, value in list(values.items()):
        if value is None:
            values.pop(key)
        elif key not in ("movable_items", "scalable_items"):
            values[key] = str(value)

    base_path = values.get("base_path", "")
    if origin is not None and base_path.strip() and not Path(base_path).is_absolute():
        values["base_path"] = str(origin / base_path)

    unknown = sorted(set(data) - set(PackageDescriptor.model_fields))
    if unknown:
        logger.warning("Ignoring unknown descriptor keys: %s", ", ".join(unknown))
    return PackageDescriptor(**values)


def load_descriptor(path: Path) -> PackageDescriptor:
    """Load a descriptor YAML document.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the document is not a mapping.
    """
    yaml = YAML(typ="safe")
    data = yaml.load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Descriptor {path} must be a mapping")
    return descriptor_from_dict(data, origin=path.parent)


def dump_descriptor(descriptor: PackageDescriptor, path: Path) -> None:
    """Write ``descriptor`` to ``path`` as YAML."""
    data = descriptor.model_dump()
    data["movable_items"] = list(descriptor.movable_items)
    data["scalable_items"] = list(descriptor.scalable_items)
    yaml = YAML()
    yaml.default_flow_style = False
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(data, handle)
