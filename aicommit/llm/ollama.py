"""Ollama message generator for local models (talks to ``ollama serve`` over HTTP)."""

import http.client
import json
import os
import socket
import urllib.error
import urllib.request

from aicommit.llm.base import LLMClient, LLMError, LLMResponse, SYSTEM_PROMPT

NOT_RUNNING = "Ollama not running. Start with: ollama serve"


class OllamaClient(LLMClient):

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_TIMEOUT = 300  # CPU inference can be slow
    PROBE_TIMEOUT = 5
    KEEP_ALIVE = "10m"

    def __init__(self, model: str | None = None, host: str | None = None,
                 timeout: int | None = None, **kwargs):
        super().__init__(**kwargs)
        self.model = model or self.DEFAULT_MODEL
        self.host = (host or os.environ.get("OLLAMA_HOST") or self.DEFAULT_HOST).rstrip('/')
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._verify_connection()

    @property
    def name(self) -> str:
        return f"Ollama ({self.model})"

    # -- HTTP --------------------------------------------------------------

    def _get(self, path: str) -> dict:
        with urllib.request.urlopen(f"{self.host}{path}", timeout=self.PROBE_TIMEOUT) as resp:
            return json.loads(resp.read().decode('utf-8') or '{}')

    def _post(self, path: str, payload: dict) -> dict:
        req = urllib.request.Request(
            f"{self.host}{path}",
            data=json.dumps(payload).encode('utf-8'),
            headers={"Content-Type": "application/json"},
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return json.loads(resp.read().decode('utf-8'))

    def _verify_connection(self) -> None:
        try:
            self._get("/api/tags")
        except (urllib.error.URLError, OSError, ValueError):
            raise LLMError(NOT_RUNNING)

    # -- model lifecycle ---------------------------------------------------

    def is_model_loaded(self) -> bool:
        try:
            running = self._get("/api/ps").get("models", [])
        except (urllib.error.URLError, OSError, ValueError):
            return False
        names = [m.get("name", "") for m in running]
        return any(self.model in n or n in self.model for n in names if n)

    def warmup(self) -> bool:
        """Load the model into memory with a one-token request."""
        if self.is_model_loaded():
            return True
        try:
            self._post("/api/generate", {
                "model": self.model,
                "prompt": "hi",
                "stream": False,
                "options": {"num_predict": 1},
                "keep_alive": self.KEEP_ALIVE,
            })
        except (urllib.error.URLError, OSError, ValueError):
            return False
        return True

    # -- generation --------------------------------------------------------

    def _request(self, prompt: str) -> LLMResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "stream": False,
            "keep_alive": self.KEEP_ALIVE,
            "options": {"temperature": 0.4, "num_predict": 1000},
        }
        try:
            result = self._post("/api/generate", payload)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise LLMError(f"Ollama has no model named '{self.model}'. Fetch it with: ollama pull {self.model}")
            raise LLMError(f"Ollama answered HTTP {e.code}: {e.reason}")
        except urllib.error.URLError as e:
            if isinstance(e.reason, socket.timeout):
                raise LLMError(self._timeout_help())
            if "Connection refused" in str(e):
                raise LLMError(NOT_RUNNING)
            raise LLMError(f"Could not reach Ollama at {self.host}: {e.reason}")
        except socket.timeout:
            raise LLMError(self._timeout_help())
        except json.JSONDecodeError:
            raise LLMError("Ollama returned something other than JSON. Try another model or stage fewer changes.")
        except http.client.HTTPException as e:
            raise LLMError(f"Ollama closed the response early ({e}); the model may be out of memory.")
        except OSError as e:
            raise LLMError(f"Lost the connection to Ollama ({e}). Is `ollama serve` still up?")

        return LLMResponse(
            content=result.get("response", "").strip(),
            model=self.model,
            tokens_used=result.get("eval_count", 0),
        )

    def _timeout_help(self) -> str:
        return (f"Request timed out after {self.timeout}s. Try:\n"
                "  - Pre-load the model: aicommit --warmup\n"
                "  - Raise \"timeout\" in .aicommitrc")
