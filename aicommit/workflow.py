"""Commit Workflow - generate, review, act, until the user commits or cancels."""

from dataclasses import dataclass, field
from enum import Enum

from aicommit.git import NothingStagedError, StagedChanges
from aicommit.llm import LLMError, NoMessageGeneratedError
from aicommit.output import (
    bold, dim, error, italic, print_success, run_with_progress, underline,
)
from aicommit.review import Decision, EditSession, run_review

NOTHING_STAGED = ("no staged changes found. stage your changes manually, "
                  "or automatically stage all changes with the `--all` flag")
NOTHING_GENERATED = "no commit messages were generated. try again"


class Outcome(Enum):
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass
class WorkflowResult:
    outcome: Outcome
    message: str = ""


@dataclass
class ReviewRound:
    """One generation attempt and the decision reached on it."""
    diff: str
    deleted_files: list[str] = field(default_factory=list)
    refinement: str | None = None
    message: str = ""
    decision: Decision | None = None


def _refinement_from(clue: str) -> str | None:
    """A blank clue clears the refinement; anything else replaces it."""
    clue = clue.strip()
    return clue or None


class CommitWorkflow:
    """Wires a VersionControl and a MessageGenerator to the review prompts.

    Collaborators are passed in so tests can script every step:
    ``reviewer(message) -> ReviewResult``, ``edit_session.run(message) ->
    EditResult`` and ``progress(label, func, *args)``.
    """

    def __init__(self, vcs, generator, reviewer=None, edit_session=None,
                 progress=None, verbose: bool = False):
        self.vcs = vcs
        self.generator = generator
        self.reviewer = reviewer or run_review
        self.edit_session = edit_session or EditSession(reviewer=self.reviewer)
        self.progress = progress or run_with_progress
        self.verbose = verbose

    def run(self, stage_all: bool = False, clue: str | None = None) -> WorkflowResult:
        self._check_preconditions()
        self._run_pre_commit_hook()

        if stage_all:
            self.vcs.stage_all_tracked()

        changes = self.progress("Detecting staged files...", self.vcs.detect_staged_changes)
        if changes.is_empty:
            raise NothingStagedError(NOTHING_STAGED)
        self._display_changes(changes)

        refinement = _refinement_from(clue or "")
        while True:
            current = ReviewRound(
                diff=changes.diff,
                deleted_files=list(changes.deleted_files),
                refinement=refinement,
            )
            current.message = self._generate(current)

            result = self.reviewer(current.message)
            current.decision = result.decision

            if current.decision is Decision.CONFIRM:
                return self._commit(current.message)
            if current.decision is Decision.REGENERATE:
                continue
            if current.decision is Decision.CLUE:
                refinement = self._apply_clue(result.clue)
                continue
            if current.decision is Decision.EDIT:
                edited = self.edit_session.run(current.message)
                if edited.decision is Decision.CONFIRM:
                    return self._commit(edited.message)
                if edited.decision is Decision.REGENERATE:
                    continue
                if edited.decision is Decision.CLUE:
                    refinement = self._apply_clue(edited.clue)
                    continue
            return self._cancel()

    # -- steps -------------------------------------------------------------

    def _check_preconditions(self) -> None:
        self.vcs.verify_tool_installed()
        self.vcs.verify_inside_repository()

    def _run_pre_commit_hook(self) -> None:
        if not self.vcs.has_pre_commit_hook():
            return
        hook_path = self.vcs.pre_commit_hook_path()
        if not self.vcs.is_executable(hook_path):
            return
        print_success("Running pre-commit hook...")
        self.vcs.run_pre_commit_hook(hook_path)
        print_success("Pre-commit hook ran successfully.")

    def _display_changes(self, changes: StagedChanges) -> None:
        total = changes.total_files
        noun = "file" if total == 1 else "files"
        print(underline(f"Detected {total} staged {noun}:"))

        idx = 1
        for change in changes.files:
            print(f"     {idx}. {bold(change.path)} {dim(f'(+{change.additions} -{change.deletions})')}")
            idx += 1
        for path in changes.deleted_files:
            print(f"     {idx}. {bold(error(path))} {error('(deleted)')}")
            idx += 1
        if self.verbose and changes.files:
            print(dim(f"     {changes.total_additions} insertions(+), {changes.total_deletions} deletions(-)"))

    def _generate(self, current: ReviewRound) -> str:
        try:
            message = self.progress(
                "The AI is analyzing your changes...",
                self.generator.generate,
                current.diff,
                current.deleted_files,
                current.refinement,
            )
        except LLMError as e:
            raise NoMessageGeneratedError(f"{NOTHING_GENERATED}\n{e}") from e

        if not message or not message.strip():
            raise NoMessageGeneratedError(NOTHING_GENERATED)

        if self.verbose:
            self._print_stats(current)
        print()
        print(underline("Changes analyzed!"))
        return message

    def _print_stats(self, current: ReviewRound) -> None:
        print(dim(f"  Generator: {self.generator.name}"))
        context = getattr(self.generator, "last_context", None)
        if context is not None:
            print(dim(f"  Context: {context.total_files} files, ~{context.estimated_tokens} tokens"))
        response = getattr(self.generator, "last_response", None)
        if response is not None and response.tokens_used:
            print(dim(f"  Tokens used: {response.tokens_used}"))
        if current.refinement:
            print(dim(f"  Clue: {current.refinement}"))

    def _apply_clue(self, clue: str) -> str | None:
        refinement = _refinement_from(clue)
        if refinement:
            print()
            print(italic("Regenerating with provided clue..."))
            print()
        return refinement

    def _commit(self, message: str) -> WorkflowResult:
        output = self.vcs.commit(message)
        if output:
            print(output.rstrip())
        print_success("Successfully committed!")
        return WorkflowResult(Outcome.COMMITTED, message)

    def _cancel(self) -> WorkflowResult:
        print(error("Commit cancelled"))
        return WorkflowResult(Outcome.CANCELLED)
