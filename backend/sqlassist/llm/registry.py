"""
Backend registry — the process-wide, read-only set of configured backends.

``available()`` answers from configuration alone.  ``select_backend()`` may
check the network and returns ``None`` when nothing is usable.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from sqlassist.core.config import Settings
from sqlassist.llm.client import LLMBackend
from sqlassist.llm.ollama_client import OllamaBackend
from sqlassist.llm.openai_client import OpenAIBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendRegistry:
    backends: Tuple[LLMBackend, ...] = ()
    health_check: bool = True

    def available(self) -> bool:
        return len(self.backends) > 0

    async def select_backend(self) -> Optional[LLMBackend]:
        if not self.backends:
            return None
        if not self.health_check:
            return self.backends[0]

        reachable = await asyncio.gather(*(backend.ping() for backend in self.backends))
        for backend, ok in zip(self.backends, reachable):
            if ok:
                logger.debug("Selected backend %s", backend.name)
                return backend

        logger.warning("No reachable backend among %s", [b.name for b in self.backends])
        return None


# ── Factory ───────────────────────────────────────────────────────────────────

def _create_ollama(settings: Settings) -> Optional[LLMBackend]:
    if not (settings.OLLAMA_BASE_URL and settings.OLLAMA_MODEL):
        return None
    return OllamaBackend(
        base_url=settings.OLLAMA_BASE_URL,
        model=settings.OLLAMA_MODEL,
        timeout=settings.LLM_TIMEOUT,
        ping_timeout=settings.LLM_PING_TIMEOUT,
    )


def _create_openai(settings: Settings) -> Optional[LLMBackend]:
    if not (settings.OPENAI_API_KEY.strip() and settings.OPENAI_MODEL):
        return None
    return OpenAIBackend(
        base_url=settings.OPENAI_BASE_URL,
        api_key=settings.OPENAI_API_KEY.strip(),
        model=settings.OPENAI_MODEL,
        timeout=settings.LLM_TIMEOUT,
        ping_timeout=settings.LLM_PING_TIMEOUT,
    )


PROVIDERS: Dict[str, Callable[[Settings], Optional[LLMBackend]]] = {
    "ollama": _create_ollama,
    "openai": _create_openai,
}


def build_registry(settings: Settings) -> BackendRegistry:
    """
    Build the registry from ``LLM_PROVIDERS``, keeping its order.

    Unknown provider names are a configuration error; known providers that
    lack required settings are skipped.
    """
    backends = []
    for name in settings.LLM_PROVIDERS:
        key = name.strip().lower()
        if not key:
            continue
        if key not in PROVIDERS:
            raise ValueError(
                f"Unknown LLM provider: {name}. Available providers: {list(PROVIDERS)}"
            )
        backend = PROVIDERS[key](settings)
        if backend is None:
            logger.warning("LLM provider %s is not fully configured; skipping", key)
            continue
        backends.append(backend)

    logger.info("Configured LLM backends: %s", [b.name for b in backends] or "none")
    return BackendRegistry(backends=tuple(backends), health_check=settings.LLM_HEALTH_CHECK)
