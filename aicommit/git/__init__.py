"""Git Operations Package"""

from aicommit.git.repository import (
    GitRepository,
    GitError,
    ToolMissingError,
    NotARepositoryError,
    StageError,
    DetectionError,
    NothingStagedError,
    HookError,
    CommitError,
    FileChange,
    StagedChanges,
    DEFAULT_LOCK_FILE_PATTERNS,
    unquote_path,
)
from aicommit.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig, Priority

__all__ = [
    "GitRepository",
    "GitError",
    "ToolMissingError",
    "NotARepositoryError",
    "StageError",
    "DetectionError",
    "NothingStagedError",
    "HookError",
    "CommitError",
    "FileChange",
    "StagedChanges",
    "DEFAULT_LOCK_FILE_PATTERNS",
    "unquote_path",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
    "Priority",
]
