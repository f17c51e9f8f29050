"""Edit Session - hand-edit a message in the user's editor, then review it again."""

import os
import shlex
import subprocess
import sys
import tempfile
from dataclasses import dataclass

from aicommit.output import underline, warning
from aicommit.review.state import Decision
from aicommit.review.terminal import run_review


class EditorError(Exception):
    """Raised when the editor cannot be run or its file cannot be read."""
    pass


@dataclass(frozen=True)
class EditResult:
    """How an edit session ended, with the text as last edited."""
    decision: Decision
    message: str
    clue: str = ""


def resolve_editor(setting: str | None = None) -> list[str]:
    """Editor command: explicit setting, then $VISUAL, then $EDITOR, then a platform default."""
    editor = setting or os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'
    command = shlex.split(editor, posix=sys.platform != 'win32')
    if not command:
        raise EditorError("No editor configured. Set $EDITOR or \"editor\" in .aicommitrc")
    return command


def edit_in_editor(message: str, command: list[str]) -> str:
    """One pass: temp file in, editor run, text back out. The temp file never outlives the call."""
    tmp = tempfile.NamedTemporaryFile(
        mode='w', prefix='COMMIT_EDITMSG', suffix='.gitcommit',
        delete=False, encoding='utf-8', newline='',
    )
    try:
        try:
            tmp.write(message)
        finally:
            tmp.close()
        subprocess.run([*command, tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except subprocess.CalledProcessError as e:
        raise EditorError(f"Editor '{command[0]}' exited with status {e.returncode}") from e
    except FileNotFoundError as e:
        if e.filename == tmp.name:
            raise EditorError(f"Edited file disappeared: {tmp.name}") from e
        raise EditorError(f"Editor '{command[0]}' not found. Set $EDITOR or \"editor\" in .aicommitrc") from e
    except UnicodeDecodeError as e:
        raise EditorError(f"Edited message is not valid UTF-8: {e}") from e
    except OSError as e:
        raise EditorError(f"Could not edit commit message: {e}") from e
    finally:
        try:
            os.unlink(tmp.name)
        except FileNotFoundError:
            pass
        except OSError as e:
            print(warning(f"Warning: Could not delete temp file {tmp.name}: {e}"), file=sys.stderr)


class EditSession:
    """Loop of editor pass + post-edit review until the user leaves it.

    Edit Again stays inside the loop; Yes, Regenerate and Cancel (and Add Clue
    when ``offer_clue`` is set) hand the decision back to the caller.
    """

    def __init__(self, editor: str | None = None, reviewer=None, offer_clue: bool = False):
        self.editor = editor
        self.reviewer = reviewer or run_review
        self.offer_clue = offer_clue

    def run(self, message: str) -> EditResult:
        command = resolve_editor(self.editor)
        while True:
            message = edit_in_editor(message, command)
            print(underline("Commit message edited!"))

            result = self.reviewer(message, edit_mode=True, offer_clue=self.offer_clue)
            if result.decision is Decision.EDIT:
                continue
            return EditResult(result.decision, message, result.clue)
