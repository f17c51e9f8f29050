"""Shared fakes for the workflow and review tests."""

from pathlib import Path

import pytest

from aicommit.git import FileChange, StagedChanges
from aicommit.llm import LLMError, MessageGenerator
from aicommit.review import Decision, EditResult, ReviewResult


class FakeRepository:
    """VersionControl stand-in that records every call."""

    def __init__(self, changes=None, hook=False, hook_executable=True, hook_error=None,
                 commit_error=None, precondition_error=None):
        self.changes = changes if changes is not None else StagedChanges(
            files=[FileChange("src/app.py", 3, 1)],
            deleted_files=["src/old.py"],
            diff="diff --git a/src/app.py b/src/app.py\n+new line\n",
        )
        self.hook = hook
        self.hook_executable = hook_executable
        self.hook_error = hook_error
        self.commit_error = commit_error
        self.precondition_error = precondition_error
        self.calls = []
        self.commits = []

    def verify_tool_installed(self):
        self.calls.append("verify_tool_installed")
        if self.precondition_error:
            raise self.precondition_error

    def verify_inside_repository(self):
        self.calls.append("verify_inside_repository")

    def has_pre_commit_hook(self):
        self.calls.append("has_pre_commit_hook")
        return self.hook

    def pre_commit_hook_path(self):
        return Path("/repo/.git/hooks/pre-commit")

    def is_executable(self, path):
        return self.hook_executable

    def run_pre_commit_hook(self, path):
        self.calls.append("run_pre_commit_hook")
        if self.hook_error:
            raise self.hook_error

    def stage_all_tracked(self):
        self.calls.append("stage_all_tracked")

    def detect_staged_changes(self):
        self.calls.append("detect_staged_changes")
        return self.changes

    def commit(self, message):
        self.calls.append("commit")
        if self.commit_error:
            raise self.commit_error
        self.commits.append(message)
        return "[main abc1234] " + message.split('\n')[0]


class FakeGenerator(MessageGenerator):
    """Returns queued messages and records each request."""

    def __init__(self, messages=None, error=None):
        self.messages = list(messages) if messages is not None else ["feat(app): add thing"]
        self.error = error
        self.requests = []

    @property
    def name(self):
        return "Fake"

    def generate(self, diff, deleted_files, refinement=None):
        self.requests.append((diff, list(deleted_files), refinement))
        if self.error:
            raise self.error
        if len(self.messages) > 1:
            return self.messages.pop(0)
        return self.messages[0]


class ScriptedReviewer:
    """Reviewer that answers with queued results and records what it was shown."""

    def __init__(self, *results):
        self.results = [r if isinstance(r, ReviewResult) else ReviewResult(r) for r in results]
        self.shown = []

    def __call__(self, message, edit_mode=False, offer_clue=True):
        self.shown.append((message, edit_mode, offer_clue))
        return self.results.pop(0)


class ScriptedEditSession:
    def __init__(self, *results):
        self.results = list(results)
        self.received = []

    def run(self, message):
        self.received.append(message)
        return self.results.pop(0)


def no_progress(label, func, *args, **kwargs):
    return func(*args, **kwargs)


@pytest.fixture
def repo():
    return FakeRepository()


@pytest.fixture
def generator():
    return FakeGenerator()


__all__ = [
    "FakeRepository", "FakeGenerator", "ScriptedReviewer", "ScriptedEditSession",
    "no_progress", "Decision", "EditResult", "ReviewResult", "LLMError",
]
