"""Review Renderer - draw a ReviewState as text."""

from aicommit.output import UNICODE_ENABLED, bold, box, colorize_commit_type, dim, highlight, italic
from aicommit.review.state import Mode, ReviewState

NAV_HINTS = {
    Mode.VIEWING: "↑/↓ to scroll • Tab/Enter to select options",
    Mode.SELECTING: "↑/↓ to navigate • Enter to select • Tab to view message",
    Mode.INPUTTING: "Type your clue • Enter to confirm • Escape to cancel",
}

ELLIPSIS = '…' if UNICODE_ENABLED else '~'
MIN_WIDTH = 20

# Rows taken by everything except the message viewport and the menu items:
# header + blank, viewport border, scroll line, blank + hint, menu border
CHROME_ROWS = 2 + 2 + 1 + 2 + 2


def viewport_height_for(state: ReviewState, terminal_rows: int) -> int:
    """Message rows that fit once the header, hint and menu are drawn."""
    if state.mode is Mode.INPUTTING:
        content_rows = 4
    else:
        content_rows = len(state.options)
    return max(terminal_rows - CHROME_ROWS - content_rows, 3)


def _fit(line: str, width: int) -> str:
    if len(line) <= width:
        return line
    return line[:width - 1] + ELLIPSIS


def _nav_hint(mode: Mode) -> str:
    hint = NAV_HINTS[mode]
    if not UNICODE_ENABLED:
        hint = hint.replace('↑/↓', 'up/down').replace('•', '|')
    return dim(italic(hint))


def render_viewport(state: ReviewState, width: int) -> list[str]:
    lines = state.lines
    visible = lines[state.scroll:state.scroll + state.viewport_height]
    body = [colorize_commit_type(_fit(line, width)) if i == 0 and state.scroll == 0 else _fit(line, width)
            for i, line in enumerate(visible)]
    color = highlight if state.mode is Mode.VIEWING else dim
    framed = box(body, width, color=color)

    if len(lines) > state.viewport_height:
        end = state.scroll + len(visible)
        framed.append(dim(f"  lines {state.scroll + 1}-{end} of {len(lines)}"))
    else:
        framed.append("")
    return framed


def render_menu(state: ReviewState, width: int) -> list[str]:
    items = []
    for i, option in enumerate(state.options):
        active = state.mode is Mode.SELECTING and i == state.cursor
        cursor = ">" if active else " "
        label = highlight(bold(option.label)) if active else option.label
        items.append(f"{cursor} {label}")
    color = highlight if state.mode is Mode.SELECTING else dim
    return box(items, width, color=color)


def render_input(state: ReviewState, width: int) -> list[str]:
    text = state.input_text[:state.input_cursor] + "|" + state.input_text[state.input_cursor:]
    # Keep the cursor visible when the clue outgrows the box
    if len(text) > width:
        start = max(min(state.input_cursor - width // 2, len(text) - width), 0)
        text = text[start:start + width]
    lines = [highlight(bold("Enter your clue for the AI:")), "", text, ""]
    return box(lines, width, color=highlight)


def render(state: ReviewState, width: int = 80) -> str:
    """Full frame for the current state."""
    inner = max(width - 4, MIN_WIDTH)
    title = "Edited Commit Message:" if state.edit_mode else "Generated Commit Message:"

    parts = [highlight(bold(title)), ""]
    parts.extend(render_viewport(state, inner))
    parts.append(_nav_hint(state.mode))
    parts.append("")
    if state.mode is Mode.INPUTTING:
        parts.extend(render_input(state, inner))
    else:
        parts.extend(render_menu(state, inner))
    return "\n".join(parts)
