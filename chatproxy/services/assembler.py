"""
Response assembly: drives one request through the pipeline.

  payload → normalize_request → adapter
    streaming=False → generate_once → {success, response}
    streaming=True  → generate_stream → transcode_stream → live packets

Every failure comes back as a GenerationOutcome; nothing escapes this
boundary. Errors raised while the packet stream is being consumed are the
HTTP layer's concern.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from chatproxy.config import AppSettings, get_settings
from chatproxy.errors import BackendError, ErrorKind, InvalidRequestError
from chatproxy.models.registry import AdapterFactory, get_adapter
from chatproxy.services.normalizer import normalize_request
from chatproxy.services.transcoder import ProtocolPacket, transcode_stream

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


@dataclass(frozen=True)
class GenerationOutcome:
    """Either a response text, a live packet stream, or a failure."""

    success: bool
    response: Optional[str] = None
    stream: Optional[AsyncIterator[ProtocolPacket]] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "GenerationOutcome":
        return cls(success=True, response=text)

    @classmethod
    def from_stream(cls, stream: AsyncIterator[ProtocolPacket]) -> "GenerationOutcome":
        return cls(success=True, stream=stream)

    @classmethod
    def failure(cls, kind: ErrorKind, error: str, details: Optional[str] = None) -> "GenerationOutcome":
        return cls(success=False, error_kind=kind, error=error, details=details)

    @property
    def is_stream(self) -> bool:
        return self.stream is not None

    def to_body(self) -> dict:
        """JSON body for the non-streaming cases."""
        if self.success:
            return {"success": True, "response": self.response}
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


async def process_chat_request(
    payload: Any,
    adapter_factory: AdapterFactory = get_adapter,
    settings: Optional[AppSettings] = None,
) -> GenerationOutcome:
    try:
        cfg = settings or get_settings()

        try:
            request = normalize_request(payload, cfg.system_instruction)
        except InvalidRequestError as e:
            logger.info("Rejected request (%s): %s", e.kind.value, e)
            return GenerationOutcome.failure(e.kind, str(e))

        adapter = adapter_factory(request.api_key)

        if not request.streaming:
            try:
                text = await adapter.generate_once(
                    request.contents, request.system_instruction, request.temperature
                )
            except BackendError as e:
                logger.error("Backend call failed: %s", e.detail)
                return GenerationOutcome.failure(ErrorKind.BACKEND_ERROR, GENERIC_ERROR, e.detail)
            return GenerationOutcome.from_text(text)

        fragments = adapter.generate_stream(
            request.contents, request.system_instruction, request.temperature
        )
        return GenerationOutcome.from_stream(transcode_stream(fragments))

    except Exception as e:
        logger.exception("Error processing chat request")
        return GenerationOutcome.failure(ErrorKind.INTERNAL_ERROR, GENERIC_ERROR, str(e))
