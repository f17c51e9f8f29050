"""Message generators: the abstract contract and the shared LLM plumbing."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from aicommit import COMMIT_TYPE_NAMES
from aicommit.git import DiffProcessor, ProcessedDiff
from aicommit.prompts import PromptBuilder, PromptConfig


SYSTEM_PROMPT = """You write git commit messages for the staged changes you are shown.

Read the diff the way a reviewer would: find the one change that matters most and name it in the subject line. A reader skimming `git log --oneline` months from now should know what happened without opening the commit.

Guidelines:
- Lead with a precise verb (add, fix, remove, rename, extract); avoid "update" and "change"
- Describe intent and effect, not line-by-line edits
- Body bullets only carry what the subject cannot
- Reply with the commit message alone; it is committed exactly as written"""

TYPES_PATTERN = '|'.join(COMMIT_TYPE_NAMES)

MIN_MESSAGE_LENGTH = 10

CONVENTIONAL_SUBJECT_RE = re.compile(rf'^({TYPES_PATTERN})(\(.+\))?!?:')
SUBJECT_START_RE = re.compile(rf'^[`\s]*({TYPES_PATTERN})[(!:]')
# Code fences and pasted diff output end the message
TRAILING_JUNK_RE = re.compile(r'^(```|diff --git |@@\s|[+-]{3}\s[ab]/|index [0-9a-f])')

RETRY_NOTE = ("\n\nIMPORTANT: Your previous response was invalid ({error}). "
              "Start directly with the commit type, e.g., 'feat(scope):'")


def validate_commit_message(content: str, conventional: bool = True) -> tuple[bool, str]:
    """Return ``(ok, problem)`` for a raw reply. ``problem`` is quoted back to the model on retry."""
    text = content.strip() if content else ""
    if len(text) < MIN_MESSAGE_LENGTH:
        return False, "Response too short"

    if conventional:
        subject = text.splitlines()[0]
        if not CONVENTIONAL_SUBJECT_RE.match(subject):
            return False, f"Missing conventional commit format. Got: {subject[:50]}"

    return True, ""


def clean_commit_message(text: str) -> str:
    """Cut chatter around the message.

    Drops any preamble before the first typed subject line and everything
    from the first code fence or pasted diff line after it.
    """
    lines = text.strip().splitlines()
    start = next((i for i, line in enumerate(lines) if SUBJECT_START_RE.match(line)), 0)
    end = next((i for i in range(start + 1, len(lines)) if TRAILING_JUNK_RE.match(lines[i])), len(lines))

    kept = lines[start:end]
    if not kept:
        return ""
    kept[0] = kept[0].strip('`').strip()
    return '\n'.join(kept).strip()


@dataclass
class LLMResponse:
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """A provider could not be reached or did not answer usefully."""


class NoMessageGeneratedError(LLMError):
    """Generation failed or came back empty; the user has to ask again."""


class MessageGenerator(ABC):
    """Anything that turns a staged diff into a candidate commit message."""

    # Whether the deleted-file list reaches the prompt
    supports_deleted_files: bool = True

    @abstractmethod
    def generate(self, diff: str, deleted_files: list[str], refinement: str | None = None) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class LLMClient(MessageGenerator):
    """Abstract base for LLM clients.

    Subclasses implement ``_request``; ``generate`` turns the diff into a
    prompt, calls the model through the retry loop and cleans the reply.
    """

    MAX_RETRIES = 2

    def __init__(self, prompt_config: PromptConfig | None = None,
                 supports_deleted_files: bool = True,
                 processor: DiffProcessor | None = None):
        self.prompt_config = prompt_config or PromptConfig()
        self.supports_deleted_files = supports_deleted_files
        self.processor = processor or DiffProcessor()
        self.last_prompt = ""
        self.last_context: ProcessedDiff | None = None
        self.last_response: LLMResponse | None = None

    @abstractmethod
    def _request(self, prompt: str) -> LLMResponse:
        """One round trip to the model. Providers map their transport errors to LLMError."""

    def complete(self, prompt: str) -> LLMResponse:
        """Ask the model, re-asking with a correction note while the reply is malformed.

        The last reply is returned even if it never validates.
        """
        text = prompt
        for attempt in range(self.MAX_RETRIES + 1):
            response = self._request(text)
            ok, problem = self._validate(response.content)
            if ok or attempt == self.MAX_RETRIES:
                return response
            text = prompt + RETRY_NOTE.format(error=problem)

    def build_prompt(self, diff: str, deleted_files: list[str], refinement: str | None = None) -> str:
        if not self.supports_deleted_files:
            deleted_files = []
        processed = self.processor.process(diff, deleted_files)
        self.last_context = processed
        return PromptBuilder().build(processed, self.prompt_config, refinement=refinement)

    def generate(self, diff: str, deleted_files: list[str], refinement: str | None = None) -> str:
        prompt = self.build_prompt(diff, deleted_files, refinement)
        self.last_prompt = prompt
        response = self.complete(prompt)
        self.last_response = response
        return clean_commit_message(response.content)

    def _validate(self, content: str) -> tuple[bool, str]:
        return validate_commit_message(content, conventional=self.prompt_config.style != "simple")
