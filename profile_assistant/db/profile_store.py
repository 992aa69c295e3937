"""Profile document persistence over a single JSON file."""

import contextlib
import json
import os
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any

from profile_assistant.core.config import get_settings
from profile_assistant.core.exceptions import InternalFailure, InvalidInput, NotFound, ValidationFailure
from profile_assistant.core.logging import get_logger
from profile_assistant.core.profile_validation import ValidationResult, validate_profile, validate_section
from profile_assistant.core.schemas_profile import (
    ID_SECTIONS,
    PROFILE_SCHEMA_VERSION,
    SECTION_NAMES,
    WRITABLE_SECTIONS,
)

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_ts(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _parse_ts(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def placeholder_profile() -> dict[str, Any]:
    """Document written on first startup when nothing is stored yet."""
    now = _format_ts(_utc_now())
    return {
        "biography": {
            "name": "Your Name",
            "title": "Your Title",
            "description": "Add your personal description here",
            "location": "Your Location",
        },
        "skills": [],
        "projects": [],
        "preferences": {
            "interests": [],
            "goals": [],
        },
        "socialLinks": [],
        "experience": [],
        "education": [],
        "metadata": {
            "createdAt": now,
            "updatedAt": now,
            "version": PROFILE_SCHEMA_VERSION,
        },
    }


def assign_ids(entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Give every entry lacking an id a fresh one; existing ids are kept."""
    return [entry if entry.get("id") else {**entry, "id": str(uuid.uuid4())} for entry in entries]


def stamp_metadata(
    stored: dict[str, Any] | None, incoming: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build the metadata block for a write.

    createdAt comes from the stored document, else the incoming one, else now.
    updatedAt is now, but never earlier than createdAt.
    """
    stored = stored or {}
    incoming = incoming or {}
    now = _utc_now()

    created_raw = stored.get("createdAt") or incoming.get("createdAt")
    created = _parse_ts(created_raw)
    if created is None:
        created, created_raw = now, _format_ts(now)

    return {
        "createdAt": created_raw,
        "updatedAt": _format_ts(max(now, created)),
        "version": PROFILE_SCHEMA_VERSION,
    }


def _raise_if_invalid(result: ValidationResult) -> None:
    if not result.ok:
        raise ValidationFailure(result.summary(), [issue.to_dict() for issue in result.issues])


class ProfileStore:
    """
    Single-document store for the personal profile.

    Writes are serialized on a lock and land through a temp file plus
    ``os.replace``, so readers (which take no lock) always see either the
    previous or the new document, never a truncated one.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.is_file()

    def initialize(self) -> bool:
        """
        Create the placeholder document if nothing is stored.

        Returns:
            True if a new document was created
        """
        with self._write_lock:
            if self.exists():
                return False
            self._persist(placeholder_profile())
        logger.info(f"Initialized placeholder profile at {self.path}")
        return True

    def read(self) -> dict[str, Any]:
        """
        Read the full document.

        Raises:
            NotFound: If no document exists yet
            InternalFailure: If the file cannot be read or parsed
        """
        if not self.exists():
            raise NotFound("Personal data not found")
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise NotFound("Personal data not found") from e
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read profile document {self.path}: {e}")
            raise InternalFailure("Failed to read personal data") from e
        if not isinstance(data, dict):
            raise InternalFailure("Stored personal data is not an object")
        return data

    def read_section(self, name: str) -> Any | None:
        """Return a top-level section, or None if it is unknown or absent."""
        if name not in SECTION_NAMES:
            return None
        return self.read().get(name)

    def write(self, doc: Any) -> dict[str, Any]:
        """
        Validate and replace the whole document.

        Args:
            doc: Partial or complete profile document (wire spelling)

        Returns:
            The stored document, ids and metadata filled in

        Raises:
            ValidationFailure: If any field violates the schema (nothing written)
        """
        result = validate_profile(doc)
        _raise_if_invalid(result)
        value: dict[str, Any] = result.value

        with self._write_lock:
            stored_meta = self._stored_metadata()
            for name in ID_SECTIONS:
                if name in value:
                    value[name] = assign_ids(value[name])
            value["metadata"] = stamp_metadata(stored_meta, value.get("metadata"))
            self._persist(value)

        logger.info(f"Profile document written ({', '.join(sorted(value))})")
        return value

    def write_section(self, name: str, section_value: Any) -> Any:
        """
        Validate and replace one top-level section, leaving the rest untouched.

        Raises:
            InvalidInput: If the section name is unknown or not writable
            ValidationFailure: If the section value violates its schema
        """
        if name not in WRITABLE_SECTIONS:
            raise InvalidInput(f"Section '{name}' cannot be written")

        result = validate_section(name, section_value)
        _raise_if_invalid(result)
        value = result.value
        if name in ID_SECTIONS:
            value = assign_ids(value)

        with self._write_lock:
            current = self.read()
            current[name] = value
            stored_meta = current.get("metadata")
            current["metadata"] = stamp_metadata(stored_meta if isinstance(stored_meta, dict) else None)
            self._persist(current)

        logger.info(f"Profile section '{name}' written")
        return value

    def _stored_metadata(self) -> dict[str, Any] | None:
        if not self.exists():
            return None
        meta = self.read().get("metadata")
        return meta if isinstance(meta, dict) else None

    def _persist(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
        except OSError as e:
            raise InternalFailure("Failed to write personal data") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            logger.error(f"Failed to write profile document {self.path}: {e}")
            raise InternalFailure("Failed to write personal data") from e


@lru_cache(maxsize=1)
def get_profile_store() -> ProfileStore:
    """
    Get the process-wide profile store (cached singleton).

    The placeholder document is created on first access.
    """
    store = ProfileStore(get_settings().PROFILE_DATA_PATH)
    store.initialize()
    return store
