"""Fee assistant proxy to the OpenAI chat completions API."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import structlog
from openai import APIConnectionError, APIStatusError, OpenAI

from regfee.backend.src.core.config import Settings, get_settings

LOGGER = structlog.get_logger(__name__)

ASSISTANT_TEMPERATURE = 0.3

_OPENAI_CLIENT: OpenAI | None = None
_OPENAI_API_KEY: str | None = None


class AssistantError(RuntimeError):
    """Raised when the assistant reply cannot be produced."""


def load_system_prompt(path: str | Path) -> str:
    """Read the system prompt from disk; it is not cached between calls."""

    try:
        return Path(path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        LOGGER.error("assistant_prompt_missing", path=str(path), error=str(exc))
        raise AssistantError("System prompt file is missing.") from exc


def _get_openai_client(settings: Settings) -> OpenAI:
    """Return a cached OpenAI client configured with the API key."""
    global _OPENAI_CLIENT, _OPENAI_API_KEY
    api_key = settings.openai_api_key
    if not api_key:
        raise AssistantError("Missing OPENAI_API_KEY environment variable.")
    if _OPENAI_CLIENT is None or api_key != _OPENAI_API_KEY:
        _OPENAI_CLIENT = OpenAI(api_key=api_key)
        _OPENAI_API_KEY = api_key
    return _OPENAI_CLIENT


def request_completion(
    client: OpenAI,
    *,
    model: str,
    system_prompt: str,
    message: str,
) -> str:
    """Send the prompt pair upstream and return the trimmed reply text."""

    try:
        response = client.chat.completions.create(
            model=model,
            temperature=ASSISTANT_TEMPERATURE,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
        )
    except APIStatusError as exc:
        body = exc.response.text if exc.response is not None else ""
        raise AssistantError(
            f"LLM API error ({exc.status_code}): {body or 'Unknown error'}"
        ) from exc
    except APIConnectionError as exc:
        raise AssistantError(f"LLM API request failed: {exc}") from exc

    content = response.choices[0].message.content if response.choices else None
    content = (content or "").strip()
    if not content:
        raise AssistantError("LLM returned an empty response.")
    return content


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _parse_finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"Number out of range: {text}")
    return number


def decode_reply(content: str) -> Any:
    """Return the reply as JSON when it parses, otherwise the raw text.

    ``NaN`` and ``Infinity`` are not JSON, so such replies stay text.
    """

    try:
        return json.loads(
            content,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except ValueError:
        return content


def ask_assistant(
    message: str,
    *,
    settings: Settings | None = None,
    client: OpenAI | None = None,
) -> Any:
    """Forward ``message`` with the system prompt and decode the reply."""

    settings = settings or get_settings()
    system_prompt = load_system_prompt(settings.system_prompt_path)
    client = client or _get_openai_client(settings)

    content = request_completion(
        client,
        model=settings.openai_model,
        system_prompt=system_prompt,
        message=message,
    )
    reply = decode_reply(content)
    LOGGER.info(
        "assistant_replied",
        model=settings.openai_model,
        structured=not isinstance(reply, str),
    )
    return reply


__all__ = ["ASSISTANT_TEMPERATURE", "AssistantError", "ask_assistant", "decode_reply"]
