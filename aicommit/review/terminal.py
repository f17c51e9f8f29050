"""Terminal Runner - drive the review state machine with prompt_toolkit."""

import sys

from prompt_toolkit.application import Application, get_app
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl

from aicommit.output import print_error
from aicommit.review.render import render, viewport_height_for
from aicommit.review.state import Decision, ReviewResult, new_review, resize, update

# prompt_toolkit key -> key name understood by review.state.update.
# Everything else arrives through Keys.Any as the typed character.
KEY_NAMES = {
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "tab": "tab",
    "enter": "enter",
    "escape": "escape",
    "backspace": "backspace",
    "c-c": "ctrl+c",
}

# Frame size when keys are replayed without a terminal
REPLAY_SIZE = (80, 24)

# Seconds to wait after a lone Escape before treating it as the Escape key
ESCAPE_TIMEOUT = 0.05


class ReviewPrompt:
    """One review prompt: the state, the bindings that feed it and the
    full-screen Application that shows it."""

    def __init__(self, message: str, edit_mode: bool = False, offer_clue: bool = True):
        self.state = new_review(message, edit_mode=edit_mode, offer_clue=offer_clue)

    def feed(self, key: str) -> ReviewResult | None:
        self.state, decision = update(self.state, key)
        if decision is None:
            return None
        clue = self.state.input_text if decision is Decision.CLUE else ""
        return ReviewResult(decision, clue)

    def frame(self, columns: int, rows: int) -> str:
        self.state = resize(self.state, viewport_height_for(self.state, rows))
        return render(self.state, columns)

    # -- prompt_toolkit ----------------------------------------------------

    def key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        for binding, key in KEY_NAMES.items():
            kb.add(binding)(self._handler(key))

        @kb.add(Keys.Any)
        def _typed(event):
            self._apply(event, event.data)

        return kb

    def _handler(self, key: str):
        def handle(event):
            self._apply(event, key)
        return handle

    def _apply(self, event, key: str) -> None:
        result = self.feed(key)
        if result is not None:
            event.app.exit(result=result)

    def _formatted(self):
        size = get_app().output.get_size()
        return ANSI(self.frame(size.columns, size.rows))

    def application(self, input=None, output=None) -> Application:
        control = FormattedTextControl(self._formatted, focusable=True, show_cursor=False)
        app = Application(
            layout=Layout(Window(content=control)),
            key_bindings=self.key_bindings(),
            full_screen=True,
            input=input,
            output=output,
        )
        app.ttimeoutlen = ESCAPE_TIMEOUT
        return app

    # -- headless ----------------------------------------------------------

    def replay(self, keys, stream) -> ReviewResult:
        """Feed key names in order, writing the frame shown before each one."""
        columns, rows = REPLAY_SIZE
        for key in keys:
            stream.write(self.frame(columns, rows) + "\n")
            result = self.feed(key)
            if result is not None:
                return result
        raise EOFError("no more keys")


def run_review(message: str, edit_mode: bool = False, offer_clue: bool = True,
               keys=None, stream=None, input=None, output=None) -> ReviewResult:
    """Show message and block until the user reaches a decision.

    ``keys`` replays key names instead of reading the keyboard, with frames
    written to ``stream``. ``input``/``output`` are handed to prompt_toolkit.
    Interrupts, closed input and interface errors all end in Decision.CANCEL.
    """
    prompt = ReviewPrompt(message, edit_mode=edit_mode, offer_clue=offer_clue)
    try:
        if keys is not None:
            return prompt.replay(keys, stream or sys.stdout)
        result = prompt.application(input=input, output=output).run()
    except (KeyboardInterrupt, EOFError):
        return ReviewResult(Decision.CANCEL)
    except Exception as e:
        print_error(f"Error running interface: {e}")
        return ReviewResult(Decision.CANCEL)
    return result or ReviewResult(Decision.CANCEL)
