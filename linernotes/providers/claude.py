# pyright: reportAny=false

import json
import logging
from typing import Any

from linernotes.providers.http import ProviderError, request


ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
CLAUDE_MODEL = "claude-haiku-4-5-20251001"

log = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    """Removes one leading ```json / ``` fence and one trailing ``` fence."""

    text = text.strip()
    if text.startswith("```json"):
        text = text[len("```json"):]
    elif text.startswith("```"):
        text = text[len("```"):]
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()


def ask_json(api_key: str, prompt: str, max_tokens: int, ctx: str) -> dict[str, Any]:
    """Sends a single-turn prompt and parses the reply as a JSON object."""

    response = request(
        "POST",
        ANTHROPIC_MESSAGES_URL,
        headers={"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
        json={
            "model": CLAUDE_MODEL,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        },
    )

    try:
        body = response.json()
        text = body["content"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"[claude:{ctx}] unexpected response shape: {e}") from e

    clean = strip_code_fences(text)
    try:
        extracted = json.loads(clean)
    except ValueError as e:
        log.debug(f"[claude:{ctx}] raw reply: {clean}")
        raise ProviderError(f"[claude:{ctx}] reply is not JSON: {e}") from e

    if not isinstance(extracted, dict):
        raise ProviderError(f"[claude:{ctx}] reply is not a JSON object")
    return extracted
