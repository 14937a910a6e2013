"""
Unit tests for canonical HTML derivation.
"""

from exam_drafter.core.models import AnswerEntry, Document, DocumentMetadata, Question, QuestionType
from exam_drafter.document import (
    apply_external_edit,
    build_answer_key,
    build_document,
    derive_html,
    option_letter,
)
from exam_drafter.document.renderer import ANSWER_KEY_HEADING, DATE_PLACEHOLDER


class TestDeriveHtml:
    def test_when_two_choice_and_one_true_false_then_three_numbered_blocks(self, metadata, three_questions):
        # Act
        html = derive_html(metadata, three_questions)

        # Assert
        assert html.count('<div class="question"') == 3
        assert "<strong>1.</strong>" in html
        assert "<strong>2.</strong>" in html
        assert "<strong>3.</strong>" in html
        assert "<strong>4.</strong>" not in html

    def test_when_multiple_choice_then_options_lettered_a_to_d(self, metadata, three_questions):
        html = derive_html(metadata, three_questions)

        for letter in "abcd":
            assert html.count(f"<p>{letter}) ") == 2
        assert "<p>e) " not in html

    def test_when_true_false_then_renders_both_choices(self, metadata, three_questions):
        html = derive_html(metadata, three_questions)

        assert "( ) Verdadeiro" in html
        assert "( ) Falso" in html

    def test_when_no_answer_key_then_no_gabarito_block(self, metadata, three_questions):
        assert ANSWER_KEY_HEADING not in derive_html(metadata, three_questions)
        assert ANSWER_KEY_HEADING not in derive_html(metadata, three_questions, answer_key=())

    def test_when_answer_key_given_then_gabarito_lists_pairs_in_order(self, metadata, three_questions):
        key = (AnswerEntry(1, "b"), AnswerEntry(2, "b"), AnswerEntry(3, "Verdadeiro"))

        html = derive_html(metadata, three_questions, key)

        assert f"<h3>{ANSWER_KEY_HEADING}</h3>" in html
        assert "<p>1. b | 2. b | 3. Verdadeiro</p>" in html
        assert html.index(ANSWER_KEY_HEADING) > html.index("<strong>3.</strong>")

    def test_when_called_twice_then_output_is_byte_identical(self, metadata, make_questions):
        questions = make_questions(6)
        key = build_answer_key(questions)

        assert derive_html(metadata, questions, key) == derive_html(metadata, questions, key)

    def test_header_shows_labels_title_and_date(self, metadata, three_questions):
        html = derive_html(metadata, three_questions)

        assert "<h1>SIMULADO DE INGLÊS</h1>" in html
        assert "<strong>Disciplina:</strong> English" in html
        assert "<strong>Nível:</strong> Intermediário" in html
        assert "<strong>Data:</strong> 05/03/2024" in html
        assert "<strong>Turma:</strong> 9A" in html
        assert "Prova contém 3 questões." in html

    def test_when_no_date_then_prints_blank_date_line(self, three_questions):
        html = derive_html(DocumentMetadata(title="t"), three_questions)

        assert DATE_PLACEHOLDER in html

    def test_when_unknown_language_code_then_code_is_printed(self, three_questions):
        html = derive_html(DocumentMetadata(title="t", language="latin"), three_questions)

        assert "<strong>Disciplina:</strong> latin" in html

    def test_when_prompt_contains_markup_then_it_is_escaped(self, metadata):
        q = Question(id="1", type=QuestionType.OPEN_ENDED, prompt="Explain <b>tags</b> & entities")

        html = derive_html(metadata, [q])

        assert "Explain &lt;b&gt;tags&lt;/b&gt; &amp; entities" in html
        assert "<b>tags</b>" not in html

    def test_when_fill_blanks_then_marker_becomes_line(self, metadata):
        q = Question(id="1", type=QuestionType.FILL_BLANKS, prompt="I [blank] a student.")

        html = derive_html(metadata, [q])

        assert "I _____ a student." in html
        assert "[blank]" not in html

    def test_when_open_ended_then_answer_box_rendered(self, metadata):
        q = Question(id="1", type=QuestionType.OPEN_ENDED, prompt="Describe your day.")

        assert "Espaço para resposta" in derive_html(metadata, [q])


class TestBuildAnswerKey:
    def test_when_choice_answer_is_index_or_text_then_printed_as_letter(self, three_questions):
        key = build_answer_key(three_questions)

        assert key == (
            AnswerEntry(1, "b"),
            AnswerEntry(2, "b"),
            AnswerEntry(3, "Verdadeiro"),
        )

    def test_when_answer_missing_then_question_skipped(self):
        questions = [
            Question(id="1", type=QuestionType.OPEN_ENDED, prompt="a"),
            Question(id="2", type=QuestionType.FILL_BLANKS, prompt="b", correct_answer="went"),
        ]

        assert build_answer_key(questions) == (AnswerEntry(2, "went"),)

    def test_when_choice_answer_matches_no_option_then_kept_verbatim(self):
        q = Question(
            id="1", type=QuestionType.MULTIPLE_CHOICE, prompt="p",
            options=("x", "y"), correct_answer="z",
        )

        assert build_answer_key([q]) == (AnswerEntry(1, "z"),)


class TestDocumentConstruction:
    def test_build_document_keeps_structured_and_derived_forms(self, metadata, three_questions):
        doc = build_document(metadata, three_questions)

        assert doc.questions == three_questions
        assert doc.canonical_html == derive_html(metadata, three_questions)
        assert doc.answer_key is None

    def test_apply_external_edit_replaces_html_only(self, metadata, three_questions):
        doc = build_document(metadata, three_questions)

        edited = apply_external_edit(doc, "<p>freeform</p>")

        assert isinstance(edited, Document)
        assert edited.canonical_html == "<p>freeform</p>"
        assert edited.questions == doc.questions
        assert edited.metadata == doc.metadata

    def test_option_letter(self):
        assert [option_letter(i) for i in range(4)] == ["a", "b", "c", "d"]
