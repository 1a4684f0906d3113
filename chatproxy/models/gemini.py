"""
Google Gemini adapter.
Uses the official google-genai SDK (async client) for one-shot and streamed generation.
"""
from __future__ import annotations

import logging
from contextlib import aclosing
from typing import AsyncIterator

from google import genai
from google.genai import types

from chatproxy.config import GEMINI_MODEL
from chatproxy.errors import BackendError
from chatproxy.models.base import BaseModelAdapter, Contents

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseModelAdapter):
    def __init__(self, api_key: str, model_name: str = GEMINI_MODEL):
        self.model_name = model_name
        self._api_key = api_key

    def _client(self) -> genai.Client:
        return genai.Client(api_key=self._api_key)

    def _config(self, system_instruction: str, temperature: float) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
        )

    async def generate_once(
        self,
        contents: Contents,
        system_instruction: str,
        temperature: float,
    ) -> str:
        try:
            async with self._client().aio as client:
                response = await client.models.generate_content(
                    model=self.model_name,
                    contents=contents,
                    config=self._config(system_instruction, temperature),
                )
        except Exception as e:
            logger.warning("Gemini request failed (model=%s): %s", self.model_name, e)
            raise BackendError(str(e), model=self.model_name) from e
        return response.text or ""

    async def generate_stream(
        self,
        contents: Contents,
        system_instruction: str,
        temperature: float,
    ) -> AsyncIterator[str]:
        try:
            # Exiting these blocks closes the upstream response and the client
            async with self._client().aio as client:
                stream = await client.models.generate_content_stream(
                    model=self.model_name,
                    contents=contents,
                    config=self._config(system_instruction, temperature),
                )
                async with aclosing(stream):
                    async for chunk in stream:
                        yield chunk.text or ""
        except Exception as e:
            logger.warning("Gemini stream failed (model=%s): %s", self.model_name, e)
            raise BackendError(str(e), model=self.model_name) from e
