"""Claude (Anthropic) message generator."""

import os

from aicommit.llm.base import LLMClient, LLMError, LLMResponse, SYSTEM_PROMPT

NO_KEY_HELP = (
    "No API key found. Store one or set the environment variable:\n"
    "  aicommit --set-key 'your-key-here'\n"
    "  export ANTHROPIC_API_KEY='your-key-here'"
)


class ClaudeClient(LLMClient):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 1000
    TEMPERATURE = 0.4

    def __init__(self, api_key: str | None = None, model: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise LLMError(NO_KEY_HELP)
        self.model = model or self.DEFAULT_MODEL

        # The SDK is only needed once Claude is actually selected
        try:
            import anthropic
        except ImportError:
            raise LLMError("Anthropic SDK not installed. Run:\n  pip install anthropic")
        self._client = anthropic.Anthropic(api_key=self.api_key)

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def _request(self, prompt: str) -> LLMResponse:
        import anthropic

        try:
            reply = self._client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AuthenticationError:
            raise LLMError("Invalid API key. Check the stored key or ANTHROPIC_API_KEY.")
        except anthropic.APIError as e:
            raise LLMError(f"Claude API error: {e.message}")

        text = next((block.text for block in reply.content if block.type == "text"), "")
        return LLMResponse(
            content=text.strip(),
            model=self.model,
            tokens_used=reply.usage.input_tokens + reply.usage.output_tokens,
        )
