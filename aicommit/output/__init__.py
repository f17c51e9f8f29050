"""Terminal Output - ANSI styling, framed boxes and progress lines."""

import os
import re
import sys
import threading
from itertools import cycle


class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    ITALIC = '\033[3m'
    UNDERLINE = '\033[4m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def _enable_windows_ansi() -> bool:
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        return bool(kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7))
    except (AttributeError, OSError):
        return False


def _supports_color(stream=None) -> bool:
    """NO_COLOR and FORCE_COLOR win; otherwise only real terminals get color."""
    stream = stream or sys.stdout
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not getattr(stream, 'isatty', lambda: False)():
        return False
    if sys.platform == 'win32':
        return _enable_windows_ansi()
    return True


def _supports_unicode(stream=None) -> bool:
    encoding = getattr(stream or sys.stdout, 'encoding', None) or 'utf-8'
    try:
        '✓✗╭│⠋'.encode(encoding)
        return True
    except (UnicodeEncodeError, LookupError):
        return False


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

if UNICODE_ENABLED:
    CHECK, CROSS = '✓', '✗'
else:
    CHECK, CROSS = '[OK]', '[X]'

ANSI_RE = re.compile(r'\033\[[0-9;?]*[A-Za-z]')


def _paint(text: str, *codes: str) -> str:
    if not COLORS_ENABLED:
        return text
    return ''.join(codes) + text + Colors.RESET


def _style(*codes: str):
    def apply(text: str) -> str:
        return _paint(text, *codes)
    return apply


success = _style(Colors.GREEN)
error = _style(Colors.RED)
warning = _style(Colors.YELLOW)
info = _style(Colors.CYAN)
highlight = _style(Colors.MAGENTA)
dim = _style(Colors.DIM)
bold = _style(Colors.BOLD)
italic = _style(Colors.ITALIC)
underline = _style(Colors.UNDERLINE)


def visible_len(text: str) -> int:
    """Length of text as shown on screen, ignoring ANSI codes."""
    return len(ANSI_RE.sub('', text))


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


BOX_CHARS = ('╭', '╮', '╰', '╯', '─', '│') if UNICODE_ENABLED else ('+', '+', '+', '+', '-', '|')


def box(lines: list[str], width: int, color=None) -> list[str]:
    """Frame lines in a border whose inner width is ``width``.

    Lines must already fit; ANSI codes inside them do not count towards padding.
    """
    paint = color or dim
    top_left, top_right, bottom_left, bottom_right, horizontal, side = BOX_CHARS
    rule = horizontal * (width + 2)

    framed = [paint(top_left + rule + top_right)]
    for line in lines:
        pad = ' ' * max(width - visible_len(line), 0)
        framed.append(f"{paint(side)} {line}{pad} {paint(side)}")
    framed.append(paint(bottom_left + rule + bottom_right))
    return framed


COMMIT_TYPE_COLORS = {
    'feat': Colors.GREEN,
    'perf': Colors.GREEN,
    'fix': Colors.RED,
    'refactor': Colors.YELLOW,
    'test': Colors.MAGENTA,
    'docs': Colors.CYAN,
    'ci': Colors.CYAN,
    'build': Colors.CYAN,
    'chore': Colors.DIM,
    'style': Colors.DIM,
}

COMMIT_PREFIX_RE = re.compile(r'^(\w+)(\([^)]*\))?!?:')


def colorize_commit_type(message: str) -> str:
    """Color the ``type(scope):`` prefix of the subject line."""
    subject, sep, rest = message.partition('\n')
    match = COMMIT_PREFIX_RE.match(subject)
    if not match or match.group(1) not in COMMIT_TYPE_COLORS:
        return message
    prefix = match.group(0)
    painted = _paint(prefix, Colors.BOLD, COMMIT_TYPE_COLORS[match.group(1)])
    return painted + subject[len(prefix):] + sep + rest


class Spinner:
    """Animated progress line while a blocking call runs. Silent when stdout is not a terminal."""

    FRAMES = '⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏' if UNICODE_ENABLED else '-\\|/'
    INTERVAL = 0.08

    def __init__(self, label: str = ''):
        self.label = label
        self._stop = threading.Event()
        self._thread = None

    def _spin(self):
        for frame in cycle(self.FRAMES):
            if self._stop.is_set():
                break
            sys.stdout.write(f'\r\033[K{frame} {self.label}')
            sys.stdout.flush()
            self._stop.wait(self.INTERVAL)

    def __enter__(self):
        if sys.stdout.isatty():
            self._stop.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        return self

    def __exit__(self, *args):
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None
        sys.stdout.write('\r\033[K')
        sys.stdout.flush()


def run_with_progress(label: str, func, *args, **kwargs):
    """Call ``func`` behind a spinner, then leave ``label ✓`` on screen.

    Exceptions propagate once the spinner line has been cleared.
    """
    with Spinner(highlight(label)):
        result = func(*args, **kwargs)
    print(f"{highlight(label)} {success(CHECK)}")
    return result


__all__ = [
    "Colors", "COLORS_ENABLED", "UNICODE_ENABLED", "ANSI_RE",
    "CHECK", "CROSS",
    "success", "error", "warning", "info", "dim", "bold", "italic", "underline", "highlight",
    "visible_len", "print_success", "print_error", "box",
    "colorize_commit_type", "Spinner", "run_with_progress", "COMMIT_TYPE_COLORS",
]
