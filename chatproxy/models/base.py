"""
Abstract backend interface and the request models passed to it.
All adapters must implement `generate_once` and `generate_stream`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Annotated, AsyncIterator, Union

from pydantic import BaseModel as PydanticModel, ConfigDict, Field

from chatproxy.config import DEFAULT_SYSTEM_INSTRUCTION, DEFAULT_TEMPERATURE

# Either free text or Gemini content blocks: {"role": ..., "parts": [{"text": ...}]}
Contents = Union[str, list[dict]]

NonEmptyContents = Union[
    Annotated[str, Field(min_length=1)],
    Annotated[list[dict], Field(min_length=1)],
]


class ChatMessage(PydanticModel):
    model_config = ConfigDict(frozen=True)

    role: str  # free-form; "assistant" is rewritten to "model" for Gemini
    content: str = Field(min_length=1)


class GenerationRequest(PydanticModel):
    """A validated request, ready for the backend."""

    model_config = ConfigDict(frozen=True)

    contents: NonEmptyContents
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0, le=2)
    api_key: str = Field(min_length=1, repr=False)
    streaming: bool = True


class BaseModelAdapter(ABC):
    """Unified interface for the generative backend."""

    model_name: str

    @abstractmethod
    async def generate_once(
        self,
        contents: Contents,
        system_instruction: str,
        temperature: float,
    ) -> str:
        """Single round trip. Raises BackendError on any failure."""

    @abstractmethod
    def generate_stream(
        self,
        contents: Contents,
        system_instruction: str,
        temperature: float,
    ) -> AsyncIterator[str]:
        """
        Yield text fragments in emission order.
        A backend failure mid-stream raises BackendError from the iterator.
        """
