"""Review State Machine - pure transitions over key events.

``update(state, key)`` is the whole behaviour: it never touches the terminal,
so every transition can be exercised with plain key names.
"""

from dataclasses import dataclass, replace
from enum import Enum


class Decision(Enum):
    """Outcome of one review prompt."""
    CONFIRM = "confirm"
    REGENERATE = "regenerate"
    CLUE = "clue"
    EDIT = "edit"  # "Edit Again" after an edit pass
    CANCEL = "cancel"


class Mode(Enum):
    VIEWING = "viewing"
    SELECTING = "selecting"
    INPUTTING = "inputting"


@dataclass(frozen=True)
class Option:
    label: str
    decision: Decision


REVIEW_OPTIONS = (
    Option("Yes", Decision.CONFIRM),
    Option("Regenerate", Decision.REGENERATE),
    Option("Add Clue", Decision.CLUE),
    Option("Edit", Decision.EDIT),
    Option("Cancel", Decision.CANCEL),
)

EDIT_OPTIONS = (
    Option("Yes", Decision.CONFIRM),
    Option("Edit Again", Decision.EDIT),
    Option("Regenerate", Decision.REGENERATE),
    Option("Add Clue", Decision.CLUE),
    Option("Cancel", Decision.CANCEL),
)

UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")


def options_for(edit_mode: bool = False, offer_clue: bool = True) -> tuple[Option, ...]:
    options = EDIT_OPTIONS if edit_mode else REVIEW_OPTIONS
    if not offer_clue:
        options = tuple(o for o in options if o.decision is not Decision.CLUE)
    return options


@dataclass(frozen=True)
class ReviewResult:
    """Decision plus the clue text, which is only set for Decision.CLUE."""
    decision: Decision
    clue: str = ""


@dataclass(frozen=True)
class ReviewState:
    message: str
    options: tuple[Option, ...] = REVIEW_OPTIONS
    edit_mode: bool = False
    mode: Mode = Mode.VIEWING
    cursor: int = 0
    scroll: int = 0
    viewport_height: int = 10
    input_text: str = ""
    input_cursor: int = 0

    @property
    def lines(self) -> list[str]:
        return self.message.split('\n')

    @property
    def max_scroll(self) -> int:
        return max(len(self.lines) - self.viewport_height, 0)

    @property
    def selected(self) -> Option:
        return self.options[self.cursor]


def new_review(message: str, edit_mode: bool = False, offer_clue: bool = True,
               viewport_height: int = 10) -> ReviewState:
    return ReviewState(
        message=message,
        options=options_for(edit_mode, offer_clue),
        edit_mode=edit_mode,
        viewport_height=max(viewport_height, 1),
    )


def resize(state: ReviewState, viewport_height: int) -> ReviewState:
    """Apply a new viewport height, keeping the scroll offset in range."""
    resized = replace(state, viewport_height=max(viewport_height, 1))
    return replace(resized, scroll=min(resized.scroll, resized.max_scroll))


def update(state: ReviewState, key: str) -> tuple[ReviewState, Decision | None]:
    """Apply one key. A returned Decision ends the review."""
    if key == "ctrl+c":
        return state, Decision.CANCEL

    if state.mode is Mode.VIEWING:
        return _update_viewing(state, key), None
    if state.mode is Mode.SELECTING:
        return _update_selecting(state, key)
    return _update_inputting(state, key)


def _update_viewing(state: ReviewState, key: str) -> ReviewState:
    if key in UP_KEYS:
        return replace(state, scroll=max(state.scroll - 1, 0))
    if key in DOWN_KEYS:
        return replace(state, scroll=min(state.scroll + 1, state.max_scroll))
    if key in ("tab", "enter"):
        return replace(state, mode=Mode.SELECTING)
    return state


def _update_selecting(state: ReviewState, key: str) -> tuple[ReviewState, Decision | None]:
    if key in UP_KEYS:
        return replace(state, cursor=max(state.cursor - 1, 0)), None
    if key in DOWN_KEYS:
        return replace(state, cursor=min(state.cursor + 1, len(state.options) - 1)), None
    if key == "tab":
        return replace(state, mode=Mode.VIEWING), None
    if key == "enter":
        decision = state.selected.decision
        if decision is Decision.CLUE:
            return replace(state, mode=Mode.INPUTTING, input_text="", input_cursor=0), None
        return state, decision
    return state, None


def _update_inputting(state: ReviewState, key: str) -> tuple[ReviewState, Decision | None]:
    text, pos = state.input_text, state.input_cursor

    if key == "escape":
        return replace(state, mode=Mode.SELECTING, input_text="", input_cursor=0), None
    if key == "enter":
        return state, Decision.CLUE
    if key == "backspace":
        if pos > 0:
            return replace(state, input_text=text[:pos - 1] + text[pos:], input_cursor=pos - 1), None
        return state, None
    if key == "left":
        return replace(state, input_cursor=max(pos - 1, 0)), None
    if key == "right":
        return replace(state, input_cursor=min(pos + 1, len(text))), None
    if key == "home":
        return replace(state, input_cursor=0), None
    if key == "end":
        return replace(state, input_cursor=len(text)), None
    if len(key) == 1 and key.isprintable():
        return replace(state, input_text=text[:pos] + key + text[pos:], input_cursor=pos + 1), None
    return state, None
