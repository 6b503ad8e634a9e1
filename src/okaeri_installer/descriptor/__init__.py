"""Package descriptors: model, schema validation, loading and catalog."""

from .assets import PackageAssets, load_package_assets
from .catalog import CatalogEntry, descriptor_checksums, discover_descriptors, scan_catalog
from .loader import descriptor_from_dict, dump_descriptor, load_descriptor
from .models import DESCRIPTOR_SCHEMA, FieldRule, PackageDescriptor
from .validator import (
    MissingField,
    PathNotFound,
    collect_issues,
    ensure_valid,
    validate_descriptor,
)

__all__ = [
    "CatalogEntry",
    "DESCRIPTOR_SCHEMA",
    "FieldRule",
    "MissingField",
    "PackageAssets",
    "PackageDescriptor",
    "PathNotFound",
    "collect_issues",
    "descriptor_checksums",
    "descriptor_from_dict",
    "discover_descriptors",
    "dump_descriptor",
    "ensure_valid",
    "load_descriptor",
    "load_package_assets",
    "scan_catalog",
    "validate_descriptor",
]
