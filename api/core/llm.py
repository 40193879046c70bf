"""
Hosted LLM HTTP client helpers.

Supported providers (chosen with LLM_PROVIDER):
- anthropic: POST {base}/v1/messages          -> {"content": [{"type": "text", "text": "..."}]}
- openai:    POST {base}/v1/chat/completions  -> {"choices": [{"message": {"content": "..."}}]}

Callers check `is_configured()` first and fall back to rule-based logic when
no API key is present.
"""

from __future__ import annotations

import json
import re
from typing import Any

import httpx

from core import config

ANTHROPIC_VERSION = "2023-06-01"

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


# LLM failures are explicit and separable from other runtime errors.
class LLMError(RuntimeError):
    pass


def provider() -> str:
    value = config.env_str("LLM_PROVIDER", "anthropic").lower()
    return value if value in {"anthropic", "openai"} else "anthropic"


def api_key() -> str:
    if provider() == "openai":
        return config.env_str("OPENAI_API_KEY")
    return config.env_str("ANTHROPIC_API_KEY")


def model_name() -> str:
    if provider() == "openai":
        return config.env_str("OPENAI_MODEL", "gpt-4o-mini")
    return config.env_str("ANTHROPIC_MODEL", "claude-sonnet-4-5")


def base_url() -> str:
    if provider() == "openai":
        return config.env_str("OPENAI_BASE_URL", "https://api.openai.com").rstrip("/")
    return config.env_str("ANTHROPIC_BASE_URL", "https://api.anthropic.com").rstrip("/")


def timeout_s() -> float:
    return config.env_float("LLM_TIMEOUT_S", 90.0)


def is_configured() -> bool:
    return bool(api_key())


async def complete_text(
    *,
    prompt: str,
    system_prompt: str | None = None,
    max_tokens: int = 2048,
    temperature: float | None = None,
) -> str:
    """
    Send one user prompt and return the assistant's text.
    """
    key = api_key()
    if not key:
        raise LLMError(f"No API key configured for provider '{provider()}'.")
    if not (prompt or "").strip():
        raise LLMError("Prompt is empty.")

    if provider() == "openai":
        return await _openai_chat(
            key=key,
            prompt=prompt,
            system_prompt=system_prompt,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    return await _anthropic_messages(
        key=key,
        prompt=prompt,
        system_prompt=system_prompt,
        max_tokens=max_tokens,
        temperature=temperature,
    )


async def complete_json(
    *,
    prompt: str,
    system_prompt: str | None = None,
    max_tokens: int = 2048,
    temperature: float | None = None,
) -> dict[str, Any]:
    text = await complete_text(
        prompt=prompt,
        system_prompt=system_prompt,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return extract_json_object(text)


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Pull the outermost JSON object out of a model reply (which may carry
    markdown fences or prose around it).
    """
    match = _JSON_OBJECT_RE.search(text or "")
    if match is None:
        raise LLMError("Failed to extract JSON from model response.")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise LLMError("Model response contained invalid JSON.") from exc
    if not isinstance(data, dict):
        raise LLMError("Model response JSON is not an object.")
    return data


async def _anthropic_messages(
    *,
    key: str,
    prompt: str,
    system_prompt: str | None,
    max_tokens: int,
    temperature: float | None,
) -> str:
    payload: dict[str, Any] = {
        "model": model_name(),
        "max_tokens": int(max_tokens),
        "messages": [{"role": "user", "content": prompt}],
    }
    if system_prompt:
        payload["system"] = system_prompt
    if temperature is not None:
        payload["temperature"] = float(temperature)

    headers = {
        "x-api-key": key,
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
    }
    try:
        async with httpx.AsyncClient(base_url=base_url(), timeout=timeout_s()) as client:
            resp = await client.post("/v1/messages", json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise LLMError(f"LLM request failed: {exc}") from exc

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise LLMError(f"Anthropic messages request failed: {resp.status_code} {body}")

    data: dict[str, Any] = resp.json()
    parts = data.get("content")
    if isinstance(parts, list):
        texts = [
            str(part.get("text") or "")
            for part in parts
            if isinstance(part, dict) and part.get("type") == "text"
        ]
        text = "".join(texts).strip()
        if text:
            return text

    raise LLMError("Anthropic returned an empty response.")


async def _openai_chat(
    *,
    key: str,
    prompt: str,
    system_prompt: str | None,
    max_tokens: int,
    temperature: float | None,
) -> str:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    payload: dict[str, Any] = {
        "model": model_name(),
        "messages": messages,
        "max_tokens": int(max_tokens),
    }
    if temperature is not None:
        payload["temperature"] = float(temperature)

    headers = {"Authorization": f"Bearer {key}"}
    try:
        async with httpx.AsyncClient(base_url=base_url(), timeout=timeout_s()) as client:
            resp = await client.post("/v1/chat/completions", json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise LLMError(f"LLM request failed: {exc}") from exc

    if resp.status_code != 200:
        body = resp.text[:500]
        raise LLMError(f"OpenAI chat request failed: {resp.status_code} {body}")

    data: dict[str, Any] = resp.json()
    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()

    raise LLMError("OpenAI returned an empty response.")
