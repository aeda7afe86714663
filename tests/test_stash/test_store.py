"""Unit tests for stash.store."""

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from stash.loader import load_notes
from stash.parser import parse_note
from stash.store import new_note, note_filename, save_note, soft_delete_note

NOW = datetime(2026, 10, 18, 9, 30, 5, tzinfo=timezone.utc)


class TestNewNote:
    def test_fresh_uuid(self):
        a = new_note("body", now=NOW)
        b = new_note("body", now=NOW)
        assert a.id != b.id
        assert uuid.UUID(a.id).version == 4

    def test_metadata_extracted_and_merged(self):
        note = new_note("Learned #Rust for +book", tags=["lang"], projects=["blog"], now=NOW)
        assert note.tags == {"rust", "lang"}
        assert note.projects == {"book", "blog"}

    def test_title(self):
        assert new_note("# Heading\nbody", now=NOW).title == "Heading"
        assert new_note("body", title="  Given  ", now=NOW).title == "Given"

    def test_created_defaults_to_now_utc(self):
        note = new_note("body")
        assert note.created.tzinfo is not None
        assert note.created.utcoffset().total_seconds() == 0

    def test_naive_now_is_taken_as_utc(self):
        note = new_note("body", now=datetime(2026, 10, 18, 9, 30, 5))
        assert note.created == NOW

    def test_aware_now_converted_to_utc(self):
        local = datetime(2026, 10, 18, 11, 30, 5, tzinfo=timezone(timedelta(hours=2)))
        note = new_note("body", now=local)
        assert note.created == NOW
        assert note.created.tzinfo == timezone.utc

    def test_links_extracted(self):
        assert new_note("see [[Ownership]]", now=NOW).links_to == ("Ownership",)


class TestSaveNote:
    def test_filename(self):
        note = new_note("body", now=NOW)
        assert note_filename(note) == f"20261018-093005-{note.id[:8]}.md"

    def test_save_then_load(self, tmp_path: Path):
        notes_dir = tmp_path / "notes"
        saved = save_note(new_note("Quick #idea for +stash", now=NOW), notes_dir)
        assert saved.source_path.parent == notes_dir
        assert parse_note(saved.source_path) == saved

        result = load_notes(notes_dir)
        assert result.notes == [saved]
        assert result.failures == []

    def test_never_overwrites(self, tmp_path: Path):
        note = new_note("body", now=NOW)
        save_note(note, tmp_path)
        with pytest.raises(FileExistsError):
            save_note(note, tmp_path)


class TestSoftDelete:
    def test_tags_and_rewrites_file(self, tmp_path: Path):
        saved = save_note(new_note("Quick #idea", now=NOW), tmp_path)
        later = datetime(2026, 10, 20, tzinfo=timezone.utc)

        deleted = soft_delete_note(saved, now=later)
        assert deleted.tags == {"idea", "deleted"}
        assert deleted.updated == later
        assert deleted.source_path == saved.source_path
        assert parse_note(saved.source_path) == deleted
        assert len(list(tmp_path.glob("*.md"))) == 1

    def test_already_deleted_is_unchanged(self, tmp_path: Path):
        saved = save_note(new_note("gone #deleted", now=NOW), tmp_path)
        before = saved.source_path.read_text(encoding="utf-8")
        assert soft_delete_note(saved) is saved
        assert saved.source_path.read_text(encoding="utf-8") == before

    def test_unsaved_note_rejected(self):
        with pytest.raises(ValueError, match="not been saved"):
            soft_delete_note(new_note("body", now=NOW))
