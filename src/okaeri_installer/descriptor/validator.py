"""Descriptor validation against :data:`DESCRIPTOR_SCHEMA`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from okaeri_installer.exceptions import ValidationError

from .models import DESCRIPTOR_SCHEMA, PackageDescriptor


@dataclass(frozen=True)
class MissingField:
    """A required descriptor field is empty or blank."""

    field: str

    def __str__(self) -> str:
        return f"Invalid or empty {self.field}"


@dataclass(frozen=True)
class PathNotFound:
    """A declared package path does not resolve to an existing file."""

    field: str
    label: str
    resolved_path: Path

    def __str__(self) -> str:
        return f"{self.label} cannot be found at {self.resolved_path}"


ValidationIssue = MissingField | PathNotFound


def collect_issues(descriptor: PackageDescriptor) -> list[ValidationIssue]:
    """Evaluate every schema rule; required checks come before path checks."""
    issues: list[ValidationIssue] = []

    for rule in DESCRIPTOR_SCHEMA:
        if rule.required and not str(getattr(descriptor, rule.field)).strip():
            issues.append(MissingField(rule.field))

    for rule in DESCRIPTOR_SCHEMA:
        if not rule.path_checked:
            continue
        value = str(getattr(descriptor, rule.field))
        if not value.strip():
            continue
        resolved = descriptor.resolve(value)
        if not resolved.is_file():
            issues.append(PathNotFound(rule.field, rule.label, resolved))

    return issues


def validate_descriptor(descriptor: PackageDescriptor) -> tuple[bool, list[str]]:
    """Return ``(ok, errors)`` for ``descriptor``. Has no side effects."""
    errors = [str(issue) for issue in collect_issues(descriptor)]
    return not errors, errors


def ensure_valid(descriptor: PackageDescriptor) -> None:
    """Raise :class:`ValidationError` if ``descriptor`` has any issue."""
    issues = collect_issues(descriptor)
    if issues:
        raise ValidationError(issues)
