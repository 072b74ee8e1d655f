"""OpenAI-compatible chat completions backend."""
from __future__ import annotations

from typing import Any

import requests

from sqlassist.llm.client import LLMBackend, LLMError


class OpenAIBackend(LLMBackend):
    """Works against api.openai.com and any server exposing the same API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout: int = 60,
        ping_timeout: int = 2,
    ) -> None:
        super().__init__("openai", model, timeout=timeout, ping_timeout=ping_timeout)
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _chat(self, messages: list[dict], schema_name: str, json_schema: dict[str, Any]) -> str:
        try:
            r = requests.post(
                f"{self.base_url}/chat/completions",
                headers=self._headers,
                json={
                    "model": self.model,
                    "temperature": 0,
                    "messages": messages,
                    "response_format": {
                        "type": "json_schema",
                        "json_schema": {"name": schema_name, "schema": json_schema},
                    },
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as exc:
            raise LLMError(f"OpenAI request failed: {exc}") from exc
        except ValueError as exc:
            raise LLMError("OpenAI response was not valid JSON.") from exc

        return self._extract_message_content(payload)

    def _ping(self) -> None:
        r = requests.get(f"{self.base_url}/models", headers=self._headers, timeout=self.ping_timeout)
        r.raise_for_status()

    @staticmethod
    def _extract_message_content(payload: Any) -> str:
        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise LLMError("OpenAI response is missing choices.")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise LLMError("OpenAI response is missing message content.")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise LLMError("OpenAI message content is empty.")
        return content
