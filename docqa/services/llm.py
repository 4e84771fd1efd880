"""
Answer LLM: OpenAI (primary) or Hugging Face router (when no OpenAI key is set).

Both take structured chat messages ({"role", "content"}) and return the
completion text. Client-side retries are disabled.
"""

import logging
from typing import Any

import httpx
from openai import APITimeoutError, OpenAI, OpenAIError

from docqa.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    LLM_MAX_TOKENS,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from docqa.core.deadline import Deadline
from docqa.core.errors import ServiceUnavailableError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def _call_openai(messages: list[dict[str, Any]], timeout: float, max_tokens: int) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    client = OpenAI(api_key=OPENAI_API_KEY, timeout=timeout, max_retries=0)
    try:
        response = client.chat.completions.create(
            model=OPENAI_LLM_MODEL,
            messages=messages,
            max_tokens=max_tokens,
        )
    except APITimeoutError as e:
        raise UpstreamTimeoutError("llm", "OpenAI request timed out") from e
    except OpenAIError as e:
        raise UpstreamError("llm", f"OpenAI request failed: {e}") from e
    msg = response.choices[0].message if response.choices else None
    out = ((msg.content if msg else None) or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


def _call_hf(
    messages: list[dict[str, Any]],
    timeout: float,
    max_tokens: int,
    http_client: httpx.Client | None = None,
) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    if not HF_API_KEY:
        raise ServiceUnavailableError("llm", "set OPENAI_API_KEY or HF_API_KEY in .env")
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {
        "model": HF_LLM_MODEL,
        "messages": messages,
        "max_tokens": max_tokens,
    }
    try:
        if http_client is not None:
            response = http_client.post(HF_CHAT_URL, json=payload, headers=headers, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as client:
                response = client.post(HF_CHAT_URL, json=payload, headers=headers)
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError("llm", "HF request timed out") from e
    except httpx.HTTPError as e:
        raise UpstreamError("llm", f"HF request failed: {e}") from e
    if response.status_code != 200:
        raise UpstreamError("llm", f"HF LLM error {response.status_code}: {response.text[:200]}")
    choices = response.json().get("choices") or []
    out = ""
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
    logger.info("[llm:hf] OUT response_len=%d", len(out))
    return out


class LanguageModel:
    """Chat model used for every answer. Provider is fixed by configuration."""

    def __init__(self, max_tokens: int = LLM_MAX_TOKENS, http_client: httpx.Client | None = None) -> None:
        self.max_tokens = max_tokens
        self._http = http_client

    @property
    def provider(self) -> str:
        return "openai" if OPENAI_API_KEY else "hf"

    def generate(self, messages: list[dict[str, Any]], deadline: Deadline) -> str:
        timeout = deadline.timeout_for("llm", LLM_API_TIMEOUT)
        logger.info(
            "[llm] IN  provider=%s messages=%d prompt_chars=%d timeout=%.1f",
            self.provider,
            len(messages),
            sum(len(m.get("content") or "") for m in messages),
            timeout,
        )
        if OPENAI_API_KEY:
            return _call_openai(messages, timeout, self.max_tokens)
        return _call_hf(messages, timeout, self.max_tokens, http_client=self._http)
