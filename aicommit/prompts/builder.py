"""Prompt Builder - turn processed staged changes into one generation request."""

from dataclasses import dataclass

from aicommit import COMMIT_TYPES
from aicommit.git import ProcessedDiff


@dataclass
class PromptConfig:
    """Settings that shape every prompt for one generator."""
    forced_type: str | None = None
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72


def bullet_budget(file_count: int, detailed: bool = False) -> str:
    """How many body bullets to ask for, scaled to the size of the change."""
    if file_count >= 15:
        low, high = 5, 6
    elif file_count >= 8:
        low, high = 4, 5
    elif file_count >= 4:
        low, high = 3, 4
    else:
        low, high = 1, 2
    if detailed:
        low, high = low + 1, high + 2
    return f"{low}-{high}"


ROLE = """You write git commit messages for the staged changes of a repository.
The message you return is passed to `git commit -m` without further editing.

Read the changes and decide what the commit is FOR before writing anything:
- a new capability is feat, a corrected behaviour is fix
- moving code around without changing behaviour is refactor
- tooling, dependencies and housekeeping are chore
- when several unrelated things changed, describe the most significant one first

Subject line:
- imperative mood, lowercase after the prefix, no trailing period
- name the concrete change: prefer "add", "remove", "replace", "extract" over "update" or "change"
- do not paraphrase the diff line by line

Scope (when a type prefix is used):
- one short word naming the module, feature or component: auth, api, cli, config
- never a file path, and 'misc' only when the changes really are unrelated"""


class PromptBuilder:
    """Assembles the prompt from independent sections; empty sections are dropped."""

    def build(self, diff: ProcessedDiff, config: PromptConfig | None = None,
              refinement: str | None = None) -> str:
        config = config or PromptConfig()
        sections = [
            ROLE,
            self._format_section(config, diff.total_files),
            self._changes_section(diff),
            self._focus_section(refinement),
            self._output_rules(config),
        ]
        return "\n\n".join(s for s in sections if s)

    def _format_section(self, config: PromptConfig, file_count: int) -> str:
        limit = f"max {config.max_subject_length} chars"
        if config.style == "simple":
            lines = [
                f"First line: a plain subject ({limit}), without type prefixes.",
            ]
        else:
            lines = [f"First line: type(scope): subject ({limit})."]
            if config.forced_type:
                lines.append(f"Use type '{config.forced_type}' for this commit.")
            else:
                lines.append("Pick the type from:")
                lines.extend(f"  {name}: {desc}" for name, desc in COMMIT_TYPES.items())

        # detailed style keeps a body even when bodies are switched off
        if config.include_body or config.style == "detailed":
            count = bullet_budget(file_count, detailed=config.style == "detailed")
            lines.extend([
                "",
                "Then a blank line and a body of dash bullets, wrapped at 72 characters.",
                f"Write {count} bullets for these {file_count} file(s).",
                "Each bullet names the function, component or file it is about and says why it changed.",
            ])
        else:
            lines.append("Do NOT include a body. The subject line is the whole message.")

        return "<format>\n" + "\n".join(lines) + "\n</format>"

    def _changes_section(self, diff: ProcessedDiff) -> str:
        parts = ["<changes>", f"FILES CHANGED: {diff.total_files}", "", diff.summary]

        if diff.detailed_diff:
            parts += ["", "DIFF:", diff.detailed_diff]

        if diff.deleted_files:
            parts += ["", "DELETED FILES (no diff shown, mention the removal):"]
            parts += diff.deleted_files

        if diff.truncated:
            parts += ["", "Note: the diff was truncated due to size; rely on the file list for the overall scope."]

        parts.append("</changes>")
        return "\n".join(parts)

    def _focus_section(self, refinement: str | None) -> str:
        if not refinement:
            return ""
        return (
            "<context>\n"
            f"Write the message with additional focus on:\n\"{refinement}\"\n"
            "Only use this where the changes above support it.\n"
            "</context>"
        )

    def _output_rules(self, config: PromptConfig) -> str:
        first = "the subject" if config.style == "simple" else "the type(scope): subject line"
        return (
            "<instructions>\n"
            "Return exactly ONE commit message and nothing else.\n"
            f"Begin with {first}. No preamble, no closing remarks, no markdown fences, no emojis.\n"
            "</instructions>"
        )
