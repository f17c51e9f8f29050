"""Interactive Review Package"""

from aicommit.review.state import (
    Decision,
    Mode,
    Option,
    ReviewResult,
    ReviewState,
    REVIEW_OPTIONS,
    EDIT_OPTIONS,
    new_review,
    options_for,
    resize,
    update,
)
from aicommit.review.render import render
from aicommit.review.terminal import run_review, ReviewPrompt
from aicommit.review.editor import EditSession, EditResult, EditorError, edit_in_editor, resolve_editor

__all__ = [
    "Decision",
    "Mode",
    "Option",
    "ReviewResult",
    "ReviewState",
    "REVIEW_OPTIONS",
    "EDIT_OPTIONS",
    "new_review",
    "options_for",
    "resize",
    "update",
    "render",
    "run_review",
    "ReviewPrompt",
    "EditSession",
    "EditResult",
    "EditorError",
    "edit_in_editor",
    "resolve_editor",
]
