"""
Chat API router.
POST    /chat  — generate (JSON, or a live packet stream when streaming=true)
OPTIONS /chat  — preflight, always 200
other methods  — 405
"""
from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from chatproxy.models.registry import AdapterFactory, get_adapter
from chatproxy.services.assembler import process_chat_request
from chatproxy.services.transcoder import ProtocolPacket

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_adapter_factory() -> AdapterFactory:
    return get_adapter


async def _packet_lines(packets: AsyncIterator[ProtocolPacket]) -> AsyncIterator[str]:
    try:
        async for packet in packets:
            yield packet.to_line()
    except Exception:
        # Headers are already sent; the client sees the stream end without a terminal packet
        logger.exception("Packet stream aborted")
        raise
    finally:
        await packets.aclose()


@router.options("")
async def chat_preflight():
    return Response(status_code=200)


@router.api_route("", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def chat_method_not_allowed():
    return JSONResponse({"error": "Only POST method is allowed"}, status_code=405)


@router.post("")
async def chat(request: Request, adapter_factory: AdapterFactory = Depends(get_adapter_factory)):
    try:
        body = await request.json()
    except ValueError as e:
        logger.info("Unparseable request body: %s", e)
        return JSONResponse(
            {"success": False, "error": "Failed to parse request", "details": str(e)},
            status_code=400,
        )

    outcome = await process_chat_request(body, adapter_factory)

    if not outcome.success:
        return JSONResponse(outcome.to_body(), status_code=400)

    if outcome.is_stream:
        return StreamingResponse(
            _packet_lines(outcome.stream),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    return JSONResponse(outcome.to_body())
