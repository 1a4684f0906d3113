"""
Stream transcoder.

Converts the backend's async sequence of text fragments into protocol
packets, one per non-empty fragment, followed by a single terminal packet:

  {"id": "chunk_1", "event": "message", "data": {..., "content": "Hi"}}
  {"id": "chunk_2", "event": "message", "data": {..., "content": " there"}}
  {"id": "chunk_3", "event": "message", "data": {"isLastMessage": true, ..., "content": ""}}

If the source fails, the error propagates and no terminal packet is sent.
"""
from __future__ import annotations

import uuid
from typing import Any, AsyncIterator

from pydantic import BaseModel as PydanticModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chatproxy.config import (
    CONTENT_TYPE,
    CONTEXT_MODE,
    OUTPUT_MODE,
    PACKET_EVENT,
    PACKET_ID_PREFIX,
    RETURN_TYPE,
)


class PacketData(PydanticModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_last_message: bool = False
    is_finished: bool = False
    is_last_packet_in_message: bool = False
    stream_id: str
    context_mode: int = CONTEXT_MODE
    output_mode: int = OUTPUT_MODE
    return_type: int = RETURN_TYPE
    content_type: int = CONTENT_TYPE
    content: str = ""
    ext: dict[str, Any] = Field(default_factory=dict)


class ProtocolPacket(PydanticModel):
    model_config = ConfigDict(frozen=True)

    id: str
    event: str = PACKET_EVENT
    data: PacketData

    @property
    def is_terminal(self) -> bool:
        d = self.data
        return d.is_last_message and d.is_finished and d.is_last_packet_in_message

    def to_line(self) -> str:
        """One self-contained JSON document per line."""
        return self.model_dump_json(by_alias=True) + "\n"


def new_stream_id() -> str:
    return uuid.uuid4().hex


def fragment_packet(seq: int, stream_id: str, content: str) -> ProtocolPacket:
    return ProtocolPacket(
        id=f"{PACKET_ID_PREFIX}{seq}",
        data=PacketData(stream_id=stream_id, content=content),
    )


def terminal_packet(seq: int, stream_id: str) -> ProtocolPacket:
    return ProtocolPacket(
        id=f"{PACKET_ID_PREFIX}{seq}",
        data=PacketData(
            stream_id=stream_id,
            is_last_message=True,
            is_finished=True,
            is_last_packet_in_message=True,
        ),
    )


async def transcode_stream(
    fragments: AsyncIterator[str],
    stream_id: str | None = None,
) -> AsyncIterator[ProtocolPacket]:
    sid = stream_id or new_stream_id()
    seq = 1
    try:
        async for fragment in fragments:
            if not fragment:
                continue
            yield fragment_packet(seq, sid, fragment)
            seq += 1
        yield terminal_packet(seq, sid)
    finally:
        # Consumer gone or source exhausted: release the backend stream
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()
