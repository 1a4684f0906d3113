"""
Input normalization.

Turns a raw request body into a GenerationRequest or raises an
InvalidRequestError before anything reaches the backend.

Accepted body fields:
  input: free text, or a list of {role, content}
  messageList: list of {role, content} (takes precedence when non-empty)
  apikey: required
  systemInstruction: optional, falls back to the default persona
  temperature: optional, 0..2, default 1
  streaming: optional, default true
"""
from __future__ import annotations

from numbers import Real
from typing import Any, Optional

from chatproxy.config import (
    ASSISTANT_ROLE,
    DEFAULT_SYSTEM_INSTRUCTION,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    MODEL_ROLE,
)
from chatproxy.errors import (
    InvalidMessageShapeError,
    InvalidTemperatureError,
    MissingCredentialError,
    MissingInputError,
)
from chatproxy.models.base import ChatMessage, Contents, GenerationRequest


def to_canonical_role(role: str) -> str:
    return MODEL_ROLE if role == ASSISTANT_ROLE else role


def to_backend_contents(messages: list[ChatMessage]) -> list[dict]:
    """Convert chat messages to Gemini content blocks."""
    return [
        {"role": to_canonical_role(m.role), "parts": [{"text": m.content}]}
        for m in messages
    ]


def parse_messages(items: list[Any]) -> list[ChatMessage]:
    """Validate every element; a single bad one rejects the whole list."""
    messages: list[ChatMessage] = []
    for i, item in enumerate(items):
        role = item.get("role") if isinstance(item, dict) else None
        content = item.get("content") if isinstance(item, dict) else None
        if not isinstance(role, str) or not role or not isinstance(content, str) or not content:
            raise InvalidMessageShapeError(
                f"Invalid message at index {i}: role and content are required"
            )
        messages.append(ChatMessage(role=role, content=content))
    return messages


def _select_input(payload: dict) -> Contents:
    message_list = payload.get("messageList")
    raw = message_list if isinstance(message_list, list) and message_list else payload.get("input")

    # Any falsy value (None, "", [], 0, false) means no input was given
    if not raw:
        raise MissingInputError()
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return to_backend_contents(parse_messages(raw))
    raise InvalidMessageShapeError("input must be a string or a list of messages")


def _parse_api_key(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MissingCredentialError()
    return value


def _parse_temperature(value: Any) -> float:
    if value is None:
        return DEFAULT_TEMPERATURE
    # bool is a Real subclass; true/false is not a temperature
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidTemperatureError()
    if not MIN_TEMPERATURE <= value <= MAX_TEMPERATURE:
        raise InvalidTemperatureError()
    return float(value)


def normalize_request(
    payload: Any,
    default_system_instruction: Optional[str] = None,
) -> GenerationRequest:
    if not isinstance(payload, dict):
        raise MissingInputError()

    contents = _select_input(payload)
    api_key = _parse_api_key(payload.get("apikey"))
    temperature = _parse_temperature(payload.get("temperature"))

    system_instruction = payload.get("systemInstruction")
    if not isinstance(system_instruction, str) or not system_instruction:
        system_instruction = default_system_instruction or DEFAULT_SYSTEM_INSTRUCTION

    streaming = payload.get("streaming")

    return GenerationRequest(
        contents=contents,
        system_instruction=system_instruction,
        temperature=temperature,
        api_key=api_key,
        streaming=True if streaming is None else bool(streaming),
    )
