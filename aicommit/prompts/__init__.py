"""Prompt Construction Package"""

from aicommit.prompts.builder import PromptBuilder, PromptConfig

__all__ = [
    "PromptBuilder",
    "PromptConfig",
]
