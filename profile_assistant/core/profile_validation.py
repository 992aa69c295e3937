"""Structural validation for profile documents and sections.

Validation is a pure function: it never raises on bad data, it returns a
``ValidationResult`` whose ``issues`` name the offending field paths in wire
spelling (``skills.0.proficiency``). The store turns a failed result into a
``ValidationFailure``.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import TypeAdapter, ValidationError

from profile_assistant.core.schemas_profile import ID_SECTIONS, SECTION_TYPES, Profile

_SECTION_ADAPTERS = {name: TypeAdapter(tp) for name, tp in SECTION_TYPES.items()}


@dataclass(frozen=True)
class ValidationIssue:
    """A single constraint violation."""

    path: str
    message: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "type": self.type}


@dataclass
class ValidationResult:
    """Normalized value (wire spelling, defaults filled) or the issues found."""

    value: Any = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def summary(self) -> str:
        if self.ok:
            return "valid"
        first = self.issues[0]
        where = first.path or "document"
        return f"Validation error: {where}: {first.message}"


def _issues_from(error: ValidationError, prefix: str = "") -> list[ValidationIssue]:
    issues = []
    for err in error.errors():
        parts = [prefix] if prefix else []
        parts.extend(str(p) for p in err["loc"])
        issues.append(
            ValidationIssue(path=".".join(parts), message=err["msg"], type=err["type"])
        )
    return issues


def _duplicate_id_issues(section: str, entries: Any) -> list[ValidationIssue]:
    """Entries of one list section must not share an id."""
    if not isinstance(entries, list):
        return []
    seen: set[str] = set()
    issues = []
    for index, entry in enumerate(entries):
        entry_id = entry.get("id") if isinstance(entry, dict) else None
        if not entry_id:
            continue
        if entry_id in seen:
            issues.append(
                ValidationIssue(
                    path=f"{section}.{index}.id",
                    message=f"duplicate id '{entry_id}'",
                    type="duplicate_id",
                )
            )
        seen.add(entry_id)
    return issues


def validate_profile(data: Any) -> ValidationResult:
    """Validate a whole (possibly partial) profile document."""
    try:
        profile = Profile.model_validate(data)
    except ValidationError as e:
        return ValidationResult(issues=_issues_from(e))
    value = dump_model(profile)
    issues = [
        issue for name in ID_SECTIONS for issue in _duplicate_id_issues(name, value.get(name))
    ]
    if issues:
        return ValidationResult(issues=issues)
    return ValidationResult(value=value)


def validate_section(name: str, data: Any) -> ValidationResult:
    """
    Validate the value of one top-level section.

    Args:
        name: Section name in wire spelling (e.g. "socialLinks")
        data: Section value (object or list)

    Returns:
        ValidationResult; an unknown section name is reported as an issue
    """
    adapter = _SECTION_ADAPTERS.get(name)
    if adapter is None:
        return ValidationResult(
            issues=[ValidationIssue(path=name, message="unknown section", type="unknown_section")]
        )
    try:
        value = adapter.validate_python(data)
    except ValidationError as e:
        return ValidationResult(issues=_issues_from(e, prefix=name))
    dumped = adapter.dump_python(value, mode="json", by_alias=True, exclude_none=True)
    if name in ID_SECTIONS:
        issues = _duplicate_id_issues(name, dumped)
        if issues:
            return ValidationResult(issues=issues)
    return ValidationResult(value=dumped)


def dump_model(model: Profile) -> dict[str, Any]:
    """Serialize a profile model to its on-disk dict form."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
