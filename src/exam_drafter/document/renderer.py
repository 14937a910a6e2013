"""
Module: document.renderer

Purpose:
    Derive the canonical HTML of an exam document from its structured
    questions and metadata. Pure and deterministic: identical inputs give
    byte-identical output (no clock reads, no randomness).

Key Functions:
    - derive_html(): Render metadata + questions + answer key to HTML
    - apply_external_edit(): Replace canonical html only (editor edits)
    - build_document(): Construct a Document with derived html
    - build_answer_key(): Answer key from questions' correct answers

Layout:
    header (title, subject/level/date, name line, class line)
    instructions box
    QUESTÕES heading
    one <div class="question"> per question, numbered from 1
    optional GABARITO block (single line of "n. answer" pairs)

Dependencies:
    - html (std): Escaping user-supplied text
    - core.models: Document, DocumentMetadata, Question, AnswerEntry

Used By:
    - versions.manager: Re-derive html after a version switch
    - session.reconciliation: Rebuild html from preview questions
    - session.controller: Initial render after generation
"""

from __future__ import annotations

import html
import logging
from typing import Optional, Sequence

from exam_drafter.core.models import (
    AnswerEntry,
    Document,
    DocumentMetadata,
    Question,
    QuestionType,
)

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Label tables
# ─────────────────────────────────────────────────────────────────────────────

LANGUAGE_LABELS = {
    "portuguese": "Português",
    "english": "English",
    "spanish": "Español",
    "french": "Français",
    "german": "Deutsch",
    "italian": "Italiano",
}

DIFFICULTY_LABELS = {
    "a1": "Básico",
    "a2": "Pré-intermediário",
    "b1": "Intermediário",
    "b2": "Intermediário superior",
    "c1": "Avançado",
    "c2": "Proficiente",
}

BLANK_MARKER = "[blank]"
BLANK_RENDERED = "_____"
ANSWER_KEY_SEPARATOR = " | "
ANSWER_KEY_HEADING = "GABARITO"
DATE_PLACEHOLDER = "___/___/______"
CLASS_PLACEHOLDER = "_______"

INSTRUCTIONS = (
    "Leia atentamente todas as questões antes de respondê-las.",
    "Use caneta azul ou preta para as respostas.",
    "Mantenha sua prova organizada e com letra legível.",
    "Tempo sugerido: 2 horas.",
)


def option_letter(index: int) -> str:
    """Letter for a 0-based option index: 0 -> a, 1 -> b, ..."""
    return chr(ord("a") + index)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def derive_html(
    metadata: DocumentMetadata,
    questions: Sequence[Question],
    answer_key: Optional[Sequence[AnswerEntry]] = None,
) -> str:
    """
    Render a document's canonical HTML.

    Args:
        metadata: Document metadata (title, language, level, class, date)
        questions: Questions in display order
        answer_key: Optional answer key; no GABARITO block when None/empty

    Returns:
        Canonical HTML string

    Example:
        >>> html_a = derive_html(meta, questions)
        >>> html_a == derive_html(meta, questions)
        True
    """
    parts = [
        '<div class="exam">',
        _render_header(metadata),
        _render_instructions(len(questions)),
        '<div class="questions">',
        "<h2>QUESTÕES</h2>",
    ]
    for number, question in enumerate(questions, start=1):
        parts.append(_render_question(number, question))
    parts.append("</div>")

    if answer_key:
        parts.append(_render_answer_key(answer_key))

    parts.append("</div>")
    return "\n".join(parts)


def apply_external_edit(doc: Document, new_html: str) -> Document:
    """
    Replace a document's canonical html, leaving structured data untouched.

    After this call the structured questions no longer describe the html
    exactly; they are kept as-is and are not re-derived.
    """
    return doc.with_html(new_html)


def build_document(
    metadata: DocumentMetadata,
    questions: Sequence[Question],
    answer_key: Optional[Sequence[AnswerEntry]] = None,
) -> Document:
    """Construct a Document whose html is derived from its structured form."""
    key = tuple(answer_key) if answer_key is not None else None
    return Document(
        canonical_html=derive_html(metadata, questions, key),
        questions=tuple(questions),
        answer_key=key,
        metadata=metadata,
    )


def build_answer_key(questions: Sequence[Question]) -> tuple[AnswerEntry, ...]:
    """
    Build an answer key from the questions' correct answers.

    Multiple-choice answers given as an option index are printed as the
    option letter; answers given as option text are matched back to their
    letter when possible. Questions without a correct answer are skipped.
    """
    entries = []
    for number, question in enumerate(questions, start=1):
        answer = question.correct_answer
        if answer is None or answer == "":
            continue
        if question.type is QuestionType.MULTIPLE_CHOICE:
            if isinstance(answer, int) and 0 <= answer < len(question.options):
                answer = option_letter(answer)
            elif answer in question.options:
                answer = option_letter(question.options.index(answer))
        entries.append(AnswerEntry(number=number, answer=str(answer)))
    return tuple(entries)


# ─────────────────────────────────────────────────────────────────────────────
# Block renderers
# ─────────────────────────────────────────────────────────────────────────────

def _esc(text: str) -> str:
    return html.escape(text, quote=False)


def _render_header(metadata: DocumentMetadata) -> str:
    language = LANGUAGE_LABELS.get(metadata.language, metadata.language)
    level = DIFFICULTY_LABELS.get(metadata.difficulty_level, metadata.difficulty_level)
    date = metadata.date or DATE_PLACEHOLDER
    class_ref = metadata.class_ref or CLASS_PLACEHOLDER
    return "\n".join([
        '<div class="header" style="text-align: center;">',
        f"<h1>{_esc(metadata.title.upper())}</h1>",
        (
            f"<p><strong>Disciplina:</strong> {_esc(language)} | "
            f"<strong>Nível:</strong> {_esc(level)} | "
            f"<strong>Data:</strong> {_esc(date)}</p>"
        ),
        "<p><strong>Nome:</strong> ________________________________________________</p>",
        f"<p><strong>Turma:</strong> {_esc(class_ref)} | <strong>Número:</strong> _______</p>",
        "</div>",
    ])


def _render_instructions(question_count: int) -> str:
    items = [f"<li>{line}</li>" for line in INSTRUCTIONS]
    items.append(f"<li>Prova contém {question_count} questões.</li>")
    return "\n".join([
        '<div class="instructions">',
        "<h3>INSTRUÇÕES:</h3>",
        "<ul>",
        *items,
        "</ul>",
        "</div>",
    ])


def _render_question(number: int, question: Question) -> str:
    prompt = _esc(question.prompt)
    if question.type is QuestionType.FILL_BLANKS:
        prompt = prompt.replace(BLANK_MARKER, BLANK_RENDERED)

    lines = [
        f'<div class="question" data-type="{question.type.value}">',
        f"<p><strong>{number}.</strong> {prompt}</p>",
    ]

    if question.type is QuestionType.MULTIPLE_CHOICE:
        lines.append('<div class="options">')
        lines.extend(
            f"<p>{option_letter(i)}) {_esc(option)}</p>"
            for i, option in enumerate(question.options)
        )
        lines.append("</div>")
    elif question.type is QuestionType.TRUE_FALSE:
        lines.append('<div class="options">')
        lines.append("<p>( ) Verdadeiro</p>")
        lines.append("<p>( ) Falso</p>")
        lines.append("</div>")
    elif question.type is QuestionType.OPEN_ENDED:
        lines.append('<div class="answer-box" style="border: 1px solid #ccc; height: 100px;">')
        lines.append("<p><em>Espaço para resposta:</em></p>")
        lines.append("</div>")

    lines.append("</div>")
    return "\n".join(lines)


def _render_answer_key(answer_key: Sequence[AnswerEntry]) -> str:
    pairs = ANSWER_KEY_SEPARATOR.join(
        f"{entry.number}. {_esc(entry.answer)}" for entry in answer_key
    )
    return "\n".join([
        '<div class="answer-key">',
        f"<h3>{ANSWER_KEY_HEADING}</h3>",
        f"<p>{pairs}</p>",
        "</div>",
    ])
