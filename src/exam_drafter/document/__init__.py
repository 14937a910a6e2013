"""
Module: document

Purpose:
    Canonical HTML derivation for exam documents.

Key Functions:
    - derive_html(): Structured questions -> canonical HTML
    - apply_external_edit(): Editor html replaces canonical html
    - build_document(): Document with derived html
    - build_answer_key(): Answer key from correct answers
"""

from .renderer import (
    apply_external_edit,
    build_answer_key,
    build_document,
    derive_html,
    option_letter,
)

__all__ = [
    "apply_external_edit",
    "build_answer_key",
    "build_document",
    "derive_html",
    "option_letter",
]
