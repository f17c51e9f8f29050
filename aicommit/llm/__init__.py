"""Message generators backed by language models, and provider selection."""

from aicommit.config import Config
from aicommit.llm.base import (
    LLMClient,
    LLMResponse,
    LLMError,
    MessageGenerator,
    NoMessageGeneratedError,
    SYSTEM_PROMPT,
    clean_commit_message,
    validate_commit_message,
)
from aicommit.llm.claude import ClaudeClient
from aicommit.llm.ollama import OllamaClient
from aicommit.prompts import PromptConfig

PROVIDERS = {
    "claude": ClaudeClient,
    "ollama": OllamaClient,
}

AUTO_DETECT_ORDER = ["ollama", "claude"]


def _client_kwargs(provider: str, config: Config, forced_type: str | None) -> dict:
    kwargs = {
        "model": config.model,
        "supports_deleted_files": config.track_deleted_files,
        "prompt_config": PromptConfig(
            forced_type=forced_type,
            style=config.style,
            include_body=config.include_body,
            max_subject_length=config.max_subject_length,
        ),
    }
    if provider == "claude":
        kwargs["api_key"] = config.resolved_api_key()
    else:
        kwargs["host"] = config.host
        kwargs["timeout"] = config.timeout
    return kwargs


NO_PROVIDER_HELP = (
    "No LLM provider available.\n\n"
    "Run a local model with Ollama:\n"
    "  ollama serve && ollama pull {model}\n\n"
    "Or use Claude:\n"
    "  aicommit --set-key 'your-key-here'   (or export ANTHROPIC_API_KEY)"
)


def get_client(config: Config | None = None, provider: str | None = None,
               forced_type: str | None = None) -> LLMClient:
    """Construct the configured generator.

    ``auto`` tries each provider in AUTO_DETECT_ORDER and keeps the first
    one that initializes; a provider that is unreachable or lacks a key
    fails at construction.
    """
    config = config or Config()
    provider = provider or config.provider

    if provider == "auto":
        for name in AUTO_DETECT_ORDER:
            try:
                return PROVIDERS[name](**_client_kwargs(name, config, forced_type))
            except LLMError:
                continue
        raise LLMError(NO_PROVIDER_HELP.format(model=OllamaClient.DEFAULT_MODEL))

    if provider not in PROVIDERS:
        choices = ", ".join(sorted(PROVIDERS))
        raise LLMError(f"Unknown provider: {provider}. Choose one of {choices} or auto.")
    return PROVIDERS[provider](**_client_kwargs(provider, config, forced_type))


__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMError",
    "MessageGenerator",
    "NoMessageGeneratedError",
    "ClaudeClient",
    "OllamaClient",
    "get_client",
    "PROVIDERS",
    "SYSTEM_PROMPT",
    "clean_commit_message",
    "validate_commit_message",
]
