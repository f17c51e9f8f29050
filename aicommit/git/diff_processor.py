"""Diff Processor - shrink a staged diff into prompt-sized context."""

import re
from dataclasses import dataclass, field
from enum import IntEnum

from aicommit.git.repository import FileChange, unquote_path


class Priority(IntEnum):
    """Order in which files are listed and given diff budget."""
    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4
    NOISE = 99


PRIORITY_LABELS = {
    Priority.SOURCE: "Source",
    Priority.TEST: "Tests",
    Priority.CONFIG: "Config",
    Priority.DOCS: "Docs",
}

# Checked top to bottom; first match wins, anything unmatched is SOURCE
CLASSIFICATION_RULES: list[tuple[Priority, list[str]]] = [
    (Priority.NOISE, [
        r'(package-lock\.json|yarn\.lock|pnpm-lock\.yaml|poetry\.lock|Cargo\.lock'
        r'|Gemfile\.lock|composer\.lock|Pipfile\.lock|go\.sum)$',
        r'\.(min\.js|min\.css|map|pyc|class)$',
        r'(^|/)(dist|build|node_modules|vendor|venv|\.venv|\.idea|\.vscode|__pycache__)/',
        r'\.egg-info/', r'\.DS_Store$',
    ]),
    (Priority.TEST, [
        r'(^|/)(tests?|specs?|__tests__)/',
        r'[._](test|spec)\.', r'Tests?\.java$',
    ]),
    (Priority.DOCS, [
        r'\.(md|rst|txt)$', r'(^|/)docs/', r'README', r'CHANGELOG', r'LICENSE',
    ]),
    (Priority.CONFIG, [
        r'\.(json|ya?ml|toml|ini)$', r'\.env', r'\.config\.',
        r'(^|/)(config|settings)/', r'(Makefile|Dockerfile)$', r'docker-compose',
    ]),
]

# Paths with quotes, backslashes or control characters stay C-quoted by git
DIFF_HEADER_RE = re.compile(r'^diff --git (?:"a/((?:[^"\\]|\\.)*)"|a/(.+?)) "?b/')


@dataclass
class ProcessedDiff:
    """Prompt-ready view of the staged changes."""
    summary: str
    detailed_diff: str
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False
    deleted_files: list[str] = field(default_factory=list)
    file_details: list[tuple[str, int, int]] = field(default_factory=list)

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    max_tokens: int = 3000
    max_lines_per_file: int = 200


class DiffProcessor:
    """Classifies changed files, drops noise and fits the rest into a token budget."""

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._rules = [
            (priority, re.compile('|'.join(f'(?:{p})' for p in patterns), re.IGNORECASE))
            for priority, patterns in CLASSIFICATION_RULES
        ]

    def classify(self, path: str) -> Priority:
        for priority, pattern in self._rules:
            if pattern.search(path):
                return priority
        return Priority.SOURCE

    def process(self, diff: str, deleted_files: list[str] | None = None) -> ProcessedDiff:
        deleted_files = list(deleted_files or [])
        sections = self.split_by_file(diff)

        ranked = []
        for path, text in sections.items():
            ranked.append((self.classify(path), count_changes(path, text)))
        kept = sorted((r for r in ranked if r[0] is not Priority.NOISE),
                      key=lambda r: (r[0], -r[1].total_changes))
        noise_count = len(ranked) - len(kept)

        detailed, included, truncated = self._fit_to_budget(kept, sections)

        return ProcessedDiff(
            summary=self._summarize(kept, deleted_files, noise_count),
            detailed_diff=detailed,
            total_files=len(sections) + len(deleted_files),
            included_files=included,
            filtered_files=noise_count,
            truncated=truncated,
            deleted_files=deleted_files,
            file_details=[(c.path, c.additions, c.deletions) for _, c in kept],
        )

    def split_by_file(self, diff: str) -> dict[str, str]:
        """Per-file chunks of a unified diff, keyed by path, in diff order."""
        chunks: dict[str, list[str]] = {}
        current = None
        for line in diff.split('\n'):
            match = DIFF_HEADER_RE.match(line)
            if match:
                quoted, plain = match.groups()
                current = unquote_path(f'"{quoted}"') if quoted is not None else plain
                chunks[current] = []
            if current is not None:
                chunks[current].append(line)
        return {path: '\n'.join(lines) for path, lines in chunks.items()}

    def _summarize(self, kept: list[tuple[Priority, FileChange]], deleted_files: list[str],
                   noise_count: int) -> str:
        lines = ["FILES CHANGED:"]
        group = None
        for priority, change in kept:
            if priority is not group:
                group = priority
                lines.append(f"\n[{PRIORITY_LABELS.get(priority, 'Other')}]")
            lines.append(f"  {change.path} (+{change.additions} -{change.deletions})")

        if deleted_files:
            lines.append("\n[Deleted]")
            lines += [f"  {path}" for path in deleted_files]
        if noise_count:
            lines.append(f"\n[Filtered: {noise_count} files (lock files, generated code)]")
        return "\n".join(lines)

    def _fit_to_budget(self, kept: list[tuple[Priority, FileChange]],
                       sections: dict[str, str]) -> tuple[str, int, bool]:
        """Highest-priority file diffs first, stopping at the first one that does not fit."""
        parts = []
        used = 0
        for _, change in kept:
            text = self._clip(sections[change.path], change.path)
            cost = len(text) // 4
            if used + cost > self.config.max_tokens:
                return "\n".join(parts), len(parts), True
            parts.append(text)
            used += cost
        return "\n".join(parts), len(parts), False

    def _clip(self, text: str, path: str) -> str:
        lines = text.split('\n')
        limit = self.config.max_lines_per_file
        if len(lines) <= limit:
            return text
        hidden = len(lines) - limit
        return '\n'.join(lines[:limit] + [f"\n... [{hidden} more lines truncated from {path}]"])


def count_changes(path: str, text: str) -> FileChange:
    """Added and removed lines in one file's diff chunk, ignoring the ---/+++ headers."""
    additions = sum(1 for line in text.split('\n') if line.startswith('+') and not line.startswith('+++'))
    deletions = sum(1 for line in text.split('\n') if line.startswith('-') and not line.startswith('---'))
    return FileChange(path=path, additions=additions, deletions=deletions)
