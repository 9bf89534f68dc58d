"""
Text generation client for a local Ollama server.

POST {OLLAMA_BASE_URL}/api/chat with stream=false; the draft comes back in
`message.content` (older servers answer in `response`).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class OllamaError(RuntimeError):
    pass


def _chat_payload(
    model: str,
    system_prompt: str,
    user_prompt: str,
    *,
    temperature: float | None,
    max_output_tokens: int | None,
) -> dict[str, Any]:
    model = (model or "").strip()
    if not model:
        raise OllamaError("DESCRIPTION_MODEL is empty.")
    if not (user_prompt or "").strip():
        raise OllamaError("Prompt is empty.")

    payload: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "stream": False,
    }
    options: dict[str, Any] = {}
    if temperature is not None:
        options["temperature"] = float(temperature)
    if max_output_tokens is not None:
        options["num_predict"] = int(max_output_tokens)
    if options:
        payload["options"] = options
    return payload


def _reply_text(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError as exc:
        raise OllamaError(f"Ollama returned a non-JSON reply: {resp.text[:200]}") from exc
    if not isinstance(data, dict):
        raise OllamaError("Ollama returned an unexpected reply.")

    message = data.get("message")
    content = message.get("content") if isinstance(message, dict) else data.get("response")
    if not isinstance(content, str) or not content.strip():
        raise OllamaError("Ollama returned an empty reply.")
    return content.strip()


async def chat_text(
    *,
    base_url: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    timeout_s: float = 120.0,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
) -> str:
    """
    One non-streamed completion for a system + user prompt pair, stripped.
    """
    base_url = (base_url or "").strip().rstrip("/")
    if not base_url:
        raise OllamaError("OLLAMA_BASE_URL is empty.")

    payload = _chat_payload(
        model,
        system_prompt,
        user_prompt,
        temperature=temperature,
        max_output_tokens=max_output_tokens,
    )

    try:
        async with httpx.AsyncClient(base_url=base_url, timeout=timeout_s) as client:
            resp = await client.post("/api/chat", json=payload)
    except httpx.HTTPError as exc:
        raise OllamaError(f"Ollama request failed: {exc}") from exc

    if resp.status_code != 200:
        raise OllamaError(f"Ollama request failed: {resp.status_code} {resp.text[:500]}")

    text = _reply_text(resp)
    logger.info("ollama_chat model=%s prompt_chars=%s reply_chars=%s", payload["model"], len(user_prompt), len(text))
    return text
