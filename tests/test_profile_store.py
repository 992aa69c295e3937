"""Tests for the JSON-file profile store."""

import json
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from profile_assistant.core.exceptions import InternalFailure, InvalidInput, NotFound, ValidationFailure
from profile_assistant.db.profile_store import stamp_metadata
from tests.fixtures_profile import sample_profile


class TestInitialization:
    """Placeholder document creation."""

    def test_read_before_initialization_is_not_found(self, empty_store):
        with pytest.raises(NotFound):
            empty_store.read()

    def test_empty_store_reads_placeholder(self, empty_store):
        assert empty_store.initialize() is True

        doc = empty_store.read()
        assert doc["skills"] == []
        assert doc["metadata"]["version"] == "1.0.0"
        assert doc["biography"]["name"] == "Your Name"

    def test_initialize_does_not_overwrite(self, store):
        stored = store.write(sample_profile())
        assert store.initialize() is False
        assert store.read() == stored

    def test_creates_parent_directories(self, tmp_path):
        from profile_assistant.db.profile_store import ProfileStore

        nested = ProfileStore(tmp_path / "a" / "b" / "personal_data.json")
        nested.initialize()
        assert nested.path.is_file()


class TestWrite:
    """Whole-document writes."""

    def test_assigns_ids_to_list_entries(self, store):
        stored = store.write(sample_profile())
        for section in ("skills", "projects", "experience", "education", "socialLinks"):
            ids = [entry["id"] for entry in stored[section]]
            assert all(ids)
            assert len(set(ids)) == len(ids)

    def test_idempotent_resave_changes_only_updated_at(self, store):
        store.write(sample_profile())
        first = store.read()

        second = store.write(first)

        assert second["metadata"]["createdAt"] == first["metadata"]["createdAt"]
        first_rest = {k: v for k, v in first.items() if k != "metadata"}
        second_rest = {k: v for k, v in second.items() if k != "metadata"}
        assert first_rest == second_rest
        assert store.read() == second

    def test_carried_ids_are_stable(self, store):
        stored = store.write(sample_profile())
        skill_id = stored["skills"][0]["id"]

        again = store.write(stored)
        assert again["skills"][0]["id"] == skill_id

    def test_new_entry_gets_exactly_one_fresh_id(self, store):
        stored = store.write(sample_profile())
        existing = {s["id"] for s in stored["skills"]}

        stored["skills"].append({"name": "Rust", "category": "programming", "proficiency": "beginner"})
        updated = store.write(stored)

        new_ids = {s["id"] for s in updated["skills"]} - existing
        assert len(new_ids) == 1
        assert len(updated["skills"]) == 4

    def test_preserves_created_at_and_bumps_updated_at(self, store):
        created = store.read()["metadata"]["createdAt"]
        stored = store.write(sample_profile())
        assert stored["metadata"]["createdAt"] == created
        assert stored["metadata"]["updatedAt"] >= created

    def test_validation_failure_references_proficiency(self, store):
        before = store.read()

        with pytest.raises(ValidationFailure) as exc_info:
            store.write({"skills": [{"name": "X", "category": "c", "proficiency": "bogus"}]})

        assert "proficiency" in exc_info.value.field
        assert "proficiency" in str(exc_info.value)
        assert store.read() == before

    def test_partial_document_replaces_whole_document(self, store):
        stored = store.write({"skills": []})
        assert set(stored) == {"skills", "metadata"}
        assert "biography" not in store.read()

    def test_file_is_pretty_printed_json(self, store):
        store.write(sample_profile())
        text = store.path.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")
        assert json.loads(text)["biography"]["name"] == "Jane Doe"

    def test_failed_write_leaves_previous_document_intact(self, store):
        before = store.read()

        with patch("profile_assistant.db.profile_store.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(InternalFailure):
                store.write(sample_profile())

        assert store.read() == before
        leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    def test_repeated_ids_are_rejected_and_nothing_written(self, store):
        before = store.read()
        skills = [
            {"id": "dup", "name": "A", "category": "c", "proficiency": "beginner"},
            {"id": "dup", "name": "B", "category": "c", "proficiency": "expert"},
        ]

        with pytest.raises(ValidationFailure) as exc_info:
            store.write({"skills": skills})
        assert exc_info.value.field == "skills.1.id"

        with pytest.raises(ValidationFailure):
            store.write_section("skills", skills)

        assert store.read() == before

    def test_concurrent_writes_leave_one_complete_document(self, store):
        def writer(n):
            skills = [{"name": f"Skill {n}", "category": f"writer-{n}", "proficiency": "expert"}]
            if n % 2:
                store.write({"skills": skills})
            else:
                store.write_section("skills", skills)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(writer, range(30)))

        doc = json.loads(store.path.read_text(encoding="utf-8"))
        assert len(doc["skills"]) == 1
        skill = doc["skills"][0]
        assert skill["name"] == "Skill " + skill["category"].removeprefix("writer-")
        assert doc["metadata"]["version"] == "1.0.0"
        leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []


class TestSections:
    """Section reads and writes."""

    def test_read_section(self, store):
        store.write(sample_profile())
        assert store.read_section("biography")["name"] == "Jane Doe"

    def test_read_empty_list_section_is_not_absent(self, store):
        assert store.read_section("skills") == []

    def test_read_absent_or_unknown_section(self, store):
        store.write({"skills": []})
        assert store.read_section("biography") is None
        assert store.read_section("hobbies") is None

    def test_write_section_replaces_only_that_section(self, store):
        before = store.write(sample_profile())

        skills = store.write_section(
            "skills", [{"name": "Go", "category": "programming", "proficiency": "expert"}]
        )

        after = store.read()
        assert skills[0]["id"]
        assert after["skills"] == skills
        assert after["projects"] == before["projects"]
        assert after["metadata"]["createdAt"] == before["metadata"]["createdAt"]
        assert after["metadata"]["updatedAt"] >= before["metadata"]["updatedAt"]

    def test_write_section_validates_shape(self, store):
        with pytest.raises(ValidationFailure) as exc_info:
            store.write_section("projects", [{"name": "P", "description": "d", "status": "??"}])
        assert exc_info.value.field == "projects.0.status"

    def test_write_unknown_section(self, store):
        with pytest.raises(InvalidInput):
            store.write_section("hobbies", [])

    def test_metadata_is_not_writable(self, store):
        with pytest.raises(InvalidInput):
            store.write_section("metadata", {"version": "9"})


class TestStampMetadata:
    """Metadata stamping rules."""

    def test_falls_back_to_incoming_created_at(self):
        meta = stamp_metadata(None, {"createdAt": "2020-01-01T00:00:00Z"})
        assert meta["createdAt"] == "2020-01-01T00:00:00Z"
        assert meta["version"] == "1.0.0"

    def test_updated_at_never_precedes_created_at(self):
        meta = stamp_metadata({"createdAt": "2999-01-01T00:00:00Z"})
        assert meta["updatedAt"].startswith("2999-01-01")

    def test_no_created_at_uses_now(self):
        meta = stamp_metadata(None, None)
        assert meta["createdAt"] == meta["updatedAt"]
