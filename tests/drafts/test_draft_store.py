"""
Tests for the draft slot and its side caches.
"""

from datetime import datetime, timedelta

import pytest

from exam_drafter.core.models import Document, FormSnapshot
from exam_drafter.document import build_document
from exam_drafter.drafts import (
    DRAFT_KEY,
    DraftRecord,
    DraftStore,
    EditorSnapshotCache,
    JsonFileKeyValueStore,
    PreviewCache,
    format_saved_label,
)


@pytest.fixture
def drafts(kv, clock):
    return DraftStore(kv, clock=clock)


@pytest.fixture
def doc(metadata, three_questions):
    return build_document(metadata, three_questions)


class TestDraftStore:
    def test_when_nothing_saved_then_load_returns_none(self, drafts):
        assert drafts.load() is None
        assert not drafts.has_draft()

    def test_when_saved_then_load_restores_form_document_and_step(self, drafts, form, doc, clock):
        drafts.save(form, doc, current_step=2, record_id="rec-1")

        record = drafts.load()

        assert record.form_snapshot == form
        assert record.document_snapshot == doc
        assert record.current_step == 2
        assert record.record_id == "rec-1"
        assert record.saved_at == clock.now

    def test_when_saved_without_document_then_document_is_none(self, drafts, form):
        drafts.save(form, None)

        assert drafts.load().document_snapshot is None

    def test_when_saved_twice_then_last_write_wins(self, drafts, form, doc, clock):
        drafts.save(form, None)
        clock.advance(30)
        drafts.save(FormSnapshot(title="Outra prova"), doc)

        record = drafts.load()

        assert record.form_snapshot.title == "Outra prova"
        assert record.document_snapshot == doc
        assert drafts.write_count == 2

    def test_when_draft_older_than_max_age_then_removed(self, drafts, kv, form, clock):
        drafts.save(form, None)
        clock.advance(timedelta(days=7, seconds=1).total_seconds())

        assert drafts.load() is None
        assert kv.get(DRAFT_KEY) is None
        assert drafts.expired_on_last_load is True

    def test_when_loaded_again_after_expiry_then_flag_resets(self, drafts, form, clock):
        drafts.save(form, None)
        clock.advance(8 * 86400)
        drafts.load()

        assert drafts.load() is None
        assert drafts.expired_on_last_load is False

    def test_when_draft_exactly_max_age_then_still_loaded(self, drafts, form, clock):
        drafts.save(form, None)
        clock.advance(timedelta(days=7).total_seconds())

        assert drafts.load() is not None

    def test_when_payload_corrupt_then_ignored(self, drafts, kv):
        kv.set(DRAFT_KEY, {"schemaVersion": 1, "formSnapshot": "oops", "savedAt": 1.0})

        assert drafts.load() is None

    def test_when_payload_from_unknown_schema_version_then_ignored(self, drafts, kv, form, doc):
        record = drafts.save(form, doc)
        payload = record.to_dict()
        payload["schemaVersion"] = 99
        kv.set(DRAFT_KEY, payload)

        assert drafts.load() is None

    def test_when_cleared_then_slot_is_empty(self, drafts, kv, form):
        drafts.save(form, None)

        drafts.clear()

        assert kv.get(DRAFT_KEY) is None

    def test_when_custom_key_then_default_slot_untouched(self, kv, clock, form):
        DraftStore(kv, key="other-surface", clock=clock).save(form, None)

        assert kv.get(DRAFT_KEY) is None
        assert kv.get("other-surface") is not None

    def test_when_backed_by_json_file_then_draft_survives_restart(self, tmp_path, clock, form, doc):
        path = tmp_path / "local.json"
        DraftStore(JsonFileKeyValueStore(path), clock=clock).save(form, doc, current_step=2)

        record = DraftStore(JsonFileKeyValueStore(path), clock=clock).load()

        assert record.form_snapshot == form
        assert record.document_snapshot == doc


class TestDraftRecord:
    def test_to_dict_carries_schema_version_and_keys(self, form):
        data = DraftRecord(form, None, saved_at=10.0).to_dict()

        assert set(data) == {
            "schemaVersion", "formSnapshot", "documentSnapshot",
            "savedAt", "currentStep", "recordId",
        }
        assert data["schemaVersion"] == 1

    def test_last_saved_label_uses_local_time(self, form):
        ts = datetime(2024, 3, 5, 14, 7, 9).timestamp()

        assert DraftRecord(form, None, saved_at=ts).last_saved_label == "05/03/2024 14:07:09"
        assert format_saved_label(ts) == "05/03/2024 14:07:09"


class TestSideCaches:
    def test_preview_round_trip(self, kv, clock, form, three_questions):
        cache = PreviewCache(kv, clock=clock)
        cache.save(form, three_questions)

        entry = cache.load()

        assert entry.form == form
        assert entry.questions == three_questions
        assert entry.saved_at == clock.now

    def test_when_preview_corrupt_then_load_returns_none(self, kv):
        cache = PreviewCache(kv)
        kv.set("criar-prova-5-preview", {"generatedQuestions": [{"type": "essay", "question": "x"}]})

        assert cache.load() is None

    def test_editor_snapshot_round_trip(self, kv, clock, form, three_questions):
        cache = EditorSnapshotCache(kv, clock=clock)
        cache.save("<p>edited</p>", form, three_questions)

        snapshot = cache.load()

        assert snapshot.content == "<p>edited</p>"
        assert snapshot.has_content
        assert snapshot.form == form
        assert snapshot.questions == three_questions

    def test_when_snapshot_is_blank_then_has_no_content(self, kv):
        cache = EditorSnapshotCache(kv)
        cache.save("   ")

        assert cache.load().has_content is False
        assert cache.load().form is None

    def test_when_snapshot_content_not_a_string_then_ignored(self, kv):
        kv.set("editor-prova-5-latest", {"content": 12})

        assert EditorSnapshotCache(kv).load() is None

    def test_caches_are_independent_of_draft_slot(self, kv, clock, form):
        drafts = DraftStore(kv, clock=clock)
        drafts.save(form, Document.empty())
        EditorSnapshotCache(kv, clock=clock).save("<p>x</p>")

        drafts.clear()

        assert EditorSnapshotCache(kv).load().content == "<p>x</p>"
