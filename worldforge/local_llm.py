"""Content-service calls against a locally hosted Ollama server.

Used when ``LLM_PROVIDER=ollama``. Structured stages (world preview, sector
blueprints) run in JSON mode; local models still like to wrap JSON in
markdown fences, so those are stripped before the text is handed back for
schema validation.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any
from urllib import error, request

from .config import Config

DEFAULT_OLLAMA_BASE_URL = "http://127.0.0.1:11434"

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LocalLLMError(RuntimeError):
    """Raised when a local LLM invocation fails."""


def build_chat_payload(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_model: str,
    json_mode: bool,
) -> dict[str, Any]:
    """Build the non-streaming ``/api/chat`` request body."""
    system_prompt = system_prompt.strip()
    user_prompt = user_prompt.strip()
    if not user_prompt:
        raise LocalLLMError("Cannot call Ollama with an empty user prompt.")

    messages = [{"role": "user", "content": user_prompt}]
    if system_prompt:
        messages.insert(0, {"role": "system", "content": system_prompt})

    payload: dict[str, Any] = {"model": llm_model, "messages": messages, "stream": False}
    if json_mode:
        payload["format"] = "json"
    return payload


def _post_chat(url: str, payload: dict[str, Any], timeout: float) -> dict[str, Any]:
    """Blocking POST; returns the decoded response body."""
    req = request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            body = resp.read().decode("utf-8")
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="ignore") if exc.fp else ""
        raise LocalLLMError(f"Ollama returned HTTP {exc.code} for {url}: {detail or exc.reason}") from exc
    except error.URLError as exc:
        raise LocalLLMError(f"Could not reach Ollama at {url}: {exc.reason}") from exc
    except TimeoutError as exc:
        raise LocalLLMError(f"Ollama did not answer within {timeout:g}s") from exc

    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise LocalLLMError("Ollama returned a non-JSON HTTP body.") from exc


def extract_reply(response: dict[str, Any], *, json_mode: bool) -> str:
    """Pull the assistant text out of a chat response.

    Raises:
        LocalLLMError: The server reported an error, the reply is empty, or
            JSON mode produced text that is not a JSON document
    """
    if response.get("error"):
        raise LocalLLMError(f"Ollama error: {response['error']}")

    content = ((response.get("message") or {}).get("content") or "").strip()
    if not content:
        raise LocalLLMError("Ollama response did not include assistant content.")
    if not json_mode:
        return content

    fenced = _FENCE_PATTERN.match(content)
    if fenced:
        content = fenced.group(1)
    try:
        json.loads(content)
    except json.JSONDecodeError as exc:
        preview = content if len(content) <= 80 else content[:77] + "..."
        raise LocalLLMError(
            f"Ollama was asked for JSON but replied with plain text: {preview!r}"
        ) from exc
    return content


async def call_ollama_chat(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_model: str,
    json_mode: bool = False,
    base_url: str | None = None,
    timeout: float | None = None,
) -> str:
    """Invoke a local Ollama model and return the assistant text.

    ``timeout`` bounds the HTTP request itself (default
    ``Config.LLM_TIMEOUT_SECONDS``), so the worker thread does not outlive
    the caller's own deadline.
    """
    payload = build_chat_payload(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        llm_model=llm_model,
        json_mode=json_mode,
    )
    base = (base_url or Config.OLLAMA_BASE_URL or DEFAULT_OLLAMA_BASE_URL).rstrip("/")
    response = await asyncio.to_thread(
        _post_chat,
        f"{base}/api/chat",
        payload,
        timeout or Config.LLM_TIMEOUT_SECONDS,
    )
    return extract_reply(response, json_mode=json_mode)


__all__ = [
    "LocalLLMError",
    "build_chat_payload",
    "call_ollama_chat",
    "extract_reply",
    "DEFAULT_OLLAMA_BASE_URL",
]
