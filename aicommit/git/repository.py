"""Git Repository - Preconditions, staged-change detection and committing."""

import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path


# Lock files never reach the generator
DEFAULT_LOCK_FILE_PATTERNS = [
    "**/package-lock.json",
    "**/yarn.lock",
    "**/Gemfile.lock",
    "**/Cargo.lock",
    "**/go.sum",
    "**/composer.lock",
    "**/poetry.lock",
    "**/Pipfile.lock",
    "**/pnpm-lock.yaml",
]

# Non-ASCII paths come back verbatim instead of as octal escapes
GIT_COMMAND = ['git', '-c', 'core.quotePath=false']

QUOTED_ESCAPE_RE = re.compile(r'\\([0-7]{3}|.)')
QUOTED_ESCAPES = {'a': '\a', 'b': '\b', 't': '\t', 'n': '\n', 'v': '\v', 'f': '\f', 'r': '\r'}


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting: '"caf\\303\\251.py"' -> 'café.py'. Unquoted paths pass through."""
    if len(path) < 2 or path[0] != '"' or path[-1] != '"':
        return path
    body = path[1:-1]
    raw = bytearray()
    pos = 0
    for match in QUOTED_ESCAPE_RE.finditer(body):
        raw += body[pos:match.start()].encode('utf-8')
        code = match.group(1)
        if len(code) == 3:
            raw.append(int(code, 8))
        else:
            raw += QUOTED_ESCAPES.get(code, code).encode('utf-8')
        pos = match.end()
    raw += body[pos:].encode('utf-8')
    return raw.decode('utf-8', errors='replace')


@dataclass
class FileChange:
    """One added or modified path with its line counts (binary files count as 0)."""
    path: str
    additions: int
    deletions: int

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions


@dataclass
class StagedChanges:
    """Everything detected in the index: line-counted files, deletions and the diff of the former."""
    files: list[FileChange] = field(default_factory=list)
    deleted_files: list[str] = field(default_factory=list)
    diff: str = ""

    @property
    def total_files(self) -> int:
        return len(self.files) + len(self.deleted_files)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @property
    def is_empty(self) -> bool:
        return self.total_files == 0


class GitError(Exception):
    """Base for every failure talking to git or the repository."""


class ToolMissingError(GitError):
    """git is not installed or not on PATH."""


class NotARepositoryError(GitError):
    """The working directory is not inside a git repository."""


class StageError(GitError):
    pass


class DetectionError(GitError):
    pass


class NothingStagedError(GitError):
    pass


class HookError(GitError):
    """The pre-commit hook exited non-zero or could not be started."""


class CommitError(GitError):
    pass


class GitRepository:
    """Runs git in the current working directory."""

    def __init__(self, exclude_patterns: list[str] | None = None):
        if exclude_patterns is None:
            exclude_patterns = DEFAULT_LOCK_FILE_PATTERNS
        self.exclude_patterns = list(exclude_patterns)

    def _run_git(self, *args: str) -> str:
        """stdout of ``git *args``; non-zero exits become GitError."""
        try:
            result = subprocess.run(
                [*GIT_COMMAND, *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"`git {' '.join(args)}` exited with {e.returncode}: {(e.stderr or '').strip()}")
        except FileNotFoundError:
            raise ToolMissingError("Git is not installed or not in PATH")

    # -- preconditions -----------------------------------------------------

    def verify_tool_installed(self) -> None:
        """Raises ToolMissingError unless `git --version` runs."""
        try:
            self._run_git('--version')
        except GitError as e:
            raise ToolMissingError(f"git is not installed. {e}")

    def verify_inside_repository(self) -> None:
        """Raises NotARepositoryError outside a work tree."""
        try:
            self._run_git('rev-parse', '--show-toplevel')
        except ToolMissingError:
            raise
        except GitError as e:
            raise NotARepositoryError(f"the current directory must be a git repository. {e}")

    # -- pre-commit hook ---------------------------------------------------

    def pre_commit_hook_path(self) -> Path:
        """Location git would run the pre-commit hook from (honours core.hooksPath)."""
        output = self._run_git('rev-parse', '--git-path', 'hooks/pre-commit').strip()
        path = Path(output)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    def has_pre_commit_hook(self) -> bool:
        try:
            return self.pre_commit_hook_path().is_file()
        except GitError:
            return False

    def is_executable(self, path: Path) -> bool:
        return os.path.isfile(path) and os.access(path, os.X_OK)

    def run_pre_commit_hook(self, path: Path) -> None:
        """Run the hook with its output streamed straight to the terminal."""
        try:
            subprocess.run([str(path)], check=True)
        except subprocess.CalledProcessError as e:
            raise HookError(f"pre-commit hook failed with exit code {e.returncode}")
        except OSError as e:
            raise HookError(f"pre-commit hook could not be run: {e}")

    # -- staging and detection ---------------------------------------------

    def stage_all_tracked(self) -> None:
        try:
            self._run_git('add', '-u')
        except GitError as e:
            raise StageError(f"failed to update tracked files. {e}")

    def _diff_args(self, *extra: str) -> list[str]:
        args = ['diff', '--cached', '--no-renames', '--diff-algorithm=minimal', *extra, '--', '.']
        args.extend(f':(exclude){pattern}' for pattern in self.exclude_patterns)
        return args

    def detect_staged_changes(self) -> StagedChanges:
        """Modified/added files with line counts, deleted files, and the diff text.

        Returns an empty StagedChanges when nothing is staged; the caller
        decides how to report that.
        """
        try:
            numstat = self._run_git(*self._diff_args('--numstat', '--diff-filter=AM'))
            deleted = self._run_git(*self._diff_args('--name-only', '--diff-filter=D'))
        except ToolMissingError:
            raise
        except GitError as e:
            raise DetectionError(str(e))

        files = self._parse_numstat(numstat)
        deleted_files = [unquote_path(line) for line in deleted.strip().split('\n') if line]

        if not files and not deleted_files:
            return StagedChanges()

        diff = ""
        if files:
            try:
                diff = self._run_git(*self._diff_args('--diff-filter=AM'))
            except GitError as e:
                raise DetectionError(str(e))

        return StagedChanges(files=files, deleted_files=deleted_files, diff=diff)

    def _parse_numstat(self, output: str) -> list[FileChange]:
        """One FileChange per numstat line; binary files report "-" and count as 0."""
        files = []
        for line in output.splitlines():
            parts = line.split('\t', 2)
            if len(parts) != 3:
                continue
            added, removed, path = parts
            files.append(FileChange(
                path=unquote_path(path),
                additions=0 if added == '-' else int(added),
                deletions=0 if removed == '-' else int(removed),
            ))
        return files

    # -- commit ------------------------------------------------------------

    def commit(self, message: str) -> str:
        """Create the commit and return git's summary output."""
        if not message.strip():
            raise CommitError("failed to commit changes. the commit message is empty")
        try:
            return self._run_git('commit', '-m', message)
        except ToolMissingError:
            raise
        except GitError as e:
            raise CommitError(f"failed to commit changes. {e}")
