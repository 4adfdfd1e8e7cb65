from __future__ import annotations

import re
from functools import lru_cache
from contextlib import contextmanager
from threading import BoundedSemaphore

from openai import OpenAI

from ..core.config import get_settings

_llm_semaphore: BoundedSemaphore | None = None

_CODE_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_CODE_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def _get_semaphore() -> BoundedSemaphore:
    """
    Lazy-initialised global semaphore for limiting concurrent LLM calls.
    """
    global _llm_semaphore
    if _llm_semaphore is None:
        settings = get_settings()
        _llm_semaphore = BoundedSemaphore(settings.LLM_MAX_CONCURRENCY)
    return _llm_semaphore


@contextmanager
def limit_llm_concurrency():
    """
    Simple context manager to bound concurrent calls to the LLM provider.

    Usage:

        with limit_llm_concurrency():
            client.chat.completions.create(...)

    Use inside the thread that actually performs the HTTP request.
    """
    sem = _get_semaphore()
    sem.acquire()
    try:
        yield
    finally:
        sem.release()


@lru_cache(maxsize=4)
def get_llm_client(api_key: str, base_url: str, timeout: float) -> OpenAI:
    """
    OpenAI-compatible client for the generative-text provider.

    Gemini exposes an OpenAI-compatible endpoint, so the same SDK serves both.
    Retries are disabled: a failed call goes straight to the caller's fallback.
    Cached so callers sharing a key share one client instance.
    """
    if not api_key:
        raise ValueError("LLM API key is required")

    return OpenAI(
        api_key=api_key.strip(),
        base_url=base_url,
        timeout=timeout,
        max_retries=0,
    )


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _CODE_FENCE_OPEN.sub("", cleaned)
        cleaned = _CODE_FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()
