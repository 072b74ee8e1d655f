"""
Provider-independent backend interface for structured generation.

A backend turns ``(instructions, output schema, few-shot examples, input)``
into a pydantic model instance.  Concrete providers only implement the raw
HTTP calls (``_chat`` and ``_ping``); message assembly and output parsing live
here.
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Sequence, Tuple, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from sqlassist.llm.prompt_builder import build_messages

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# (input text, expected output)
Example = Tuple[str, BaseModel]

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)


class LLMError(RuntimeError):
    """Raised when a generation call fails or returns invalid output."""


@dataclass(frozen=True)
class TaskResult(Generic[T]):
    result: T


def parse_structured(raw: str, schema: Type[T]) -> T:
    """Validate a raw model reply against ``schema``."""
    text = (raw or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1).strip()
    if not text:
        raise LLMError("LLM returned an empty response.")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LLMError("LLM response content was not valid JSON.") from exc

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise LLMError(f"LLM response violated output contract: {exc}") from exc


class LLMBackend(ABC):
    """A configured language-model endpoint capable of structured generation."""

    def __init__(self, name: str, model: str, timeout: int = 60, ping_timeout: int = 2) -> None:
        self.name = name
        self.model = model
        self.timeout = timeout
        self.ping_timeout = ping_timeout

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model={self.model!r})"

    # ── Provider hooks ────────────────────────────────────────────────────────

    @abstractmethod
    def _chat(self, messages: list[dict], schema_name: str, json_schema: dict[str, Any]) -> str:
        """Send one chat request and return the assistant message content."""

    @abstractmethod
    def _ping(self) -> None:
        """Cheap reachability check; raises ``requests.RequestException`` on failure."""

    # ── Public API ────────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self._ping)
        except requests.RequestException as exc:
            logger.warning("Backend %s unreachable: %s", self.name, exc)
            return False
        return True

    async def generate(
        self,
        instructions: str,
        schema: Type[T],
        examples: Sequence[Example],
        input: str,
    ) -> T:
        messages = build_messages(
            instructions,
            [(text, out.model_dump_json()) for text, out in examples],
            input,
        )
        logger.debug("Calling %s with %d message(s)", self.name, len(messages))
        raw = await asyncio.to_thread(
            self._chat, messages, schema.__name__, schema.model_json_schema()
        )
        return parse_structured(raw, schema)

    def task(
        self,
        instructions: str,
        schema: Type[T],
        examples: Sequence[Example] = (),
    ) -> Callable[[str], Awaitable[TaskResult[T]]]:
        """Bind instructions, schema and examples; the returned coroutine takes the input."""

        async def run(input: str) -> TaskResult[T]:
            return TaskResult(await self.generate(instructions, schema, examples, input))

        return run
