"""Local catalog of package descriptors."""

from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml.error import YAMLError

from .loader import load_descriptor
from .models import PackageDescriptor

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES: tuple[str, ...] = (".yaml", ".yml")


@dataclass(frozen=True)
class CatalogEntry:
    """One descriptor file; ``descriptor`` is None when it failed to load."""

    path: Path
    checksum: str
    descriptor: PackageDescriptor | None


def _descriptor_files(configs_dir: Path) -> list[Path]:
    if not configs_dir.is_dir():
        return []
    return sorted(
        path for path in configs_dir.iterdir() if path.is_file() and path.suffix in DESCRIPTOR_SUFFIXES
    )


def _checksum(path: Path) -> str:
    return f"{zlib.crc32(path.read_bytes()) & 0xFFFFFFFF:08x}"


def scan_catalog(configs_dir: Path) -> list[CatalogEntry]:
    """Load every descriptor file in ``configs_dir``, in file name order."""
    entries: list[CatalogEntry] = []
    for path in _descriptor_files(configs_dir):
        descriptor: PackageDescriptor | None
        try:
            descriptor = load_descriptor(path)
        except (OSError, ValueError, YAMLError) as exc:
            logger.warning("Skipping descriptor %s: %s", path.name, exc)
            descriptor = None
        entries.append(CatalogEntry(path=path, checksum=_checksum(path), descriptor=descriptor))
    return entries


def discover_descriptors(configs_dir: Path) -> dict[str, PackageDescriptor]:
    """Load every descriptor in ``configs_dir`` keyed by package name.

    Unreadable documents and documents without a name are skipped with a
    warning. When two files declare the same name the first (by file name)
    wins.
    """
    result: dict[str, PackageDescriptor] = {}
    for entry in scan_catalog(configs_dir):
        descriptor = entry.descriptor
        if descriptor is None:
            continue
        if not descriptor.name.strip():
            logger.warning("Skipping descriptor %s: no package name", entry.path.name)
            continue
        if descriptor.name in result:
            logger.warning("Duplicate package %s in %s ignored", descriptor.name, entry.path.name)
            continue
        result[descriptor.name] = descriptor
    return result


def descriptor_checksums(configs_dir: Path) -> dict[str, str]:
    """CRC32 (hex) of every descriptor file, keyed by file stem."""
    return {path.stem: _checksum(path) for path in _descriptor_files(configs_dir)}
