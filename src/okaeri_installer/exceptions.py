"""Exception hierarchy for the asset installer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .descriptor.validator import ValidationIssue
    from .engine.log import MergeLog


class InstallerError(Exception):
    """Base exception for installer errors.

    The orchestrator attaches the operation log to ``log`` and the phase the
    error was raised in to ``failed_phase`` before the error leaves
    :func:`okaeri_installer.engine.install` or ``uninstall``.
    """

    log: "MergeLog | None" = None
    failed_phase: str | None = None


class ValidationError(InstallerError):
    """Descriptor has missing required fields or missing package files."""

    def __init__(self, issues: Sequence["ValidationIssue"]):
        self.issues = list(issues)
        details = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"Invalid asset configuration: {details}")


class ConflictError(InstallerError):
    """Package artifacts are already present on the avatar."""

    def __init__(self, message: str, reasons: Sequence[str] = ()):
        self.reasons = list(reasons)
        super().__init__(message)


class AlreadyInstalledError(ConflictError):
    """An item with the same name already occupies the target slot."""

    def __init__(self, item: str, slot: str):
        self.item = item
        self.slot = slot
        super().__init__(
            f"Error assigning {item} to {slot}: Asset already installed. "
            "Uninstall the asset and try again.",
            reasons=[item],
        )


class BudgetExceededError(InstallerError):
    """Combined expression parameter cost is over the ceiling."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            "Error merging the expression parameters: not enough space for the "
            f"asset parameters. The asset requires {required} parameters, "
            f"{available} available."
        )


class CapacityError(InstallerError):
    """The avatar expressions menu has no room for another control."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"No space for additional menu controls available (max {limit}).")


class StructuralError(InstallerError):
    """The avatar is missing a substructure the operation needs."""


class AssetLoadError(StructuralError):
    """A package document could not be read or parsed."""

    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load package asset {path}: {reason}")
