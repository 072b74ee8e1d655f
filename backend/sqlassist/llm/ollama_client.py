from __future__ import annotations

from typing import Any

import requests

from sqlassist.llm.client import LLMBackend, LLMError


class OllamaBackend(LLMBackend):
    """
    Calls a local Ollama server; structured output is requested by passing
    the JSON schema as ``format``.
    """

    def __init__(self, base_url: str, model: str, timeout: int = 60, ping_timeout: int = 2) -> None:
        super().__init__("ollama", model, timeout=timeout, ping_timeout=ping_timeout)
        self.base_url = base_url.rstrip("/")

    def _chat(self, messages: list[dict], schema_name: str, json_schema: dict[str, Any]) -> str:
        try:
            r = requests.post(
                f"{self.base_url}/api/chat",
                json={
                    "model": self.model,
                    "messages": messages,
                    "format": json_schema,
                    "stream": False,
                    "options": {"temperature": 0},
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except requests.RequestException as exc:
            raise LLMError(f"Ollama request failed: {exc}") from exc
        except ValueError as exc:
            raise LLMError("Ollama response was not valid JSON.") from exc

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise LLMError("Ollama response is missing message content.")
        return message.get("content", "")

    def _ping(self) -> None:
        r = requests.get(f"{self.base_url}/api/tags", timeout=self.ping_timeout)
        r.raise_for_status()
