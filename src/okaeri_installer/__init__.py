"""Okaeri asset installer.

Reconciles third-party asset packages (items, FX layers, expression
parameters, menus) into an avatar configuration and removes them again.
"""

from okaeri_installer.descriptor import PackageDescriptor, load_descriptor, validate_descriptor
from okaeri_installer.engine import (
    InstallOptions,
    MergeLog,
    OperationResult,
    install,
    is_installed,
    uninstall,
)
from okaeri_installer.exceptions import (
    AlreadyInstalledError,
    AssetLoadError,
    BudgetExceededError,
    CapacityError,
    ConflictError,
    InstallerError,
    StructuralError,
    ValidationError,
)
from okaeri_installer.host import HostState, load_host_state, save_host_state

__version__ = "0.1.0"

__all__ = [
    "AlreadyInstalledError",
    "AssetLoadError",
    "BudgetExceededError",
    "CapacityError",
    "ConflictError",
    "HostState",
    "InstallOptions",
    "InstallerError",
    "MergeLog",
    "OperationResult",
    "PackageDescriptor",
    "StructuralError",
    "ValidationError",
    "install",
    "is_installed",
    "load_descriptor",
    "load_host_state",
    "save_host_state",
    "uninstall",
    "validate_descriptor",
]
