"""
Tests for record stores and the record <-> session mapping.
"""

import uuid

import pytest

from exam_drafter.core.errors import RecordNotFound, ValidationError
from exam_drafter.core.models import Document, FormSnapshot, QuestionType
from exam_drafter.document import build_document
from exam_drafter.session import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    record_fields_from,
    session_from_record,
)


@pytest.fixture
def doc(metadata, three_questions):
    return build_document(metadata, three_questions)


class TestRecordFieldsFrom:
    def test_columns_follow_form_and_document(self, form, doc):
        fields = record_fields_from(form, doc)

        assert fields["title"] == "Simulado de Inglês"
        assert fields["description"] == "present perfect"
        assert fields["instructions_text"] == "Prova de english - Nível b1"
        assert fields["content_html"] == doc.canonical_html
        assert fields["questions_count"] == 3
        assert fields["versions_count"] == 1

    def test_questions_use_record_vocabulary(self, form, doc):
        questions = record_fields_from(form, doc)["content_json"]["questions"]

        assert questions[0] == {
            "enunciado": "She ___ to school every day.",
            "tipo": "multipla_escolha",
            "opcoes": {"options": ["go", "goes", "going", "gone"]},
            "resposta_correta": "1",
        }
        assert questions[2]["tipo"] == "verdadeiro_falso"
        assert questions[2]["opcoes"] is None

    def test_when_class_and_material_are_placeholders_then_null(self, doc):
        form = FormSnapshot(title="t", class_ref="none", selected_material="9A")

        fields = record_fields_from(form, doc)

        assert fields["turma_id"] is None
        assert fields["material_id"] is None

    def test_when_class_is_uuid_then_kept(self, doc):
        class_id = str(uuid.uuid4())

        fields = record_fields_from(FormSnapshot(title="t", class_ref=class_id), doc)

        assert fields["turma_id"] == class_id


class TestSessionFromRecord:
    def test_round_trip_restores_form_and_document(self, form, doc):
        restored_form, restored_doc = session_from_record(record_fields_from(form, doc))

        assert restored_form.title == form.title
        assert restored_form.language == form.language
        assert restored_form.topics == form.topics
        assert restored_form.question_types == form.question_types
        assert restored_doc.canonical_html == doc.canonical_html
        assert [q.prompt for q in restored_doc.questions] == [q.prompt for q in doc.questions]
        assert restored_doc.questions[0].options == doc.questions[0].options

    def test_when_questions_in_generator_format_then_parsed(self):
        fields = {
            "title": "t",
            "content_json": {"questions": [{"type": "fillBlanks", "question": "I [blank]."}]},
        }

        _, document = session_from_record(fields)

        assert document.questions[0].type is QuestionType.FILL_BLANKS

    def test_when_record_is_sparse_then_defaults(self):
        form, document = session_from_record({"title": "Só título"})

        assert form.title == "Só título"
        assert form.questions_count == 10
        assert document.is_empty
        assert document.questions == ()

    def test_when_questions_not_a_list_then_raises(self):
        with pytest.raises(ValidationError):
            session_from_record({"title": "t", "content_json": {"questions": "x"}})


class TestInMemoryRecordStore:
    def test_create_then_load(self, form, doc):
        store = InMemoryRecordStore()

        record_id = store.create(record_fields_from(form, doc))

        assert store.load(record_id)["title"] == form.title

    def test_update_overwrites_columns(self, form, doc):
        store = InMemoryRecordStore()
        record_id = store.create(record_fields_from(form, doc))

        store.update(record_id, record_fields_from(FormSnapshot(title="Novo"), Document.empty()))

        assert store.load(record_id)["title"] == "Novo"

    def test_when_unknown_id_then_record_not_found(self):
        store = InMemoryRecordStore()

        with pytest.raises(RecordNotFound):
            store.load("missing")
        with pytest.raises(KeyError):
            store.update("missing", {"title": "t"})

    def test_when_fields_invalid_then_create_rejected(self):
        with pytest.raises(ValidationError):
            InMemoryRecordStore().create({"title": 3})


class TestJsonFileRecordStore:
    def test_records_persist_across_instances(self, tmp_path, form, doc):
        path = tmp_path / "records.json"
        record_id = JsonFileRecordStore(path).create(record_fields_from(form, doc))

        loaded = JsonFileRecordStore(path).load(record_id)

        assert loaded["content_html"] == doc.canonical_html

    def test_update_merges_into_existing_record(self, tmp_path, form, doc):
        store = JsonFileRecordStore(tmp_path / "records.json")
        record_id = store.create(record_fields_from(form, doc))

        store.update(record_id, {"title": "Revisada"})

        loaded = store.load(record_id)
        assert loaded["title"] == "Revisada"
        assert loaded["content_html"] == doc.canonical_html

    def test_when_updating_unknown_id_then_file_unchanged(self, tmp_path, form, doc):
        path = tmp_path / "records.json"
        store = JsonFileRecordStore(path)
        store.create(record_fields_from(form, doc))
        before = path.read_text(encoding="utf-8")

        with pytest.raises(RecordNotFound):
            store.update("missing", {"title": "x"})

        assert path.read_text(encoding="utf-8") == before

    def test_when_file_missing_then_load_raises_not_found(self, tmp_path):
        with pytest.raises(RecordNotFound):
            JsonFileRecordStore(tmp_path / "none.json").load("x")
