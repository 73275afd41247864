"""
Pydantic models for events decoded from the upstream Live API.

Each upstream JSON message is decoded into zero or more of these events by the
translator. They are internal to the bridge: the client only ever sees the
downstream events in live_bridge.models.events.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel


class SetupAck(BaseModel):
    kind: Literal["setup_ack"] = "setup_ack"


class UpstreamError(BaseModel):
    kind: Literal["error"] = "error"
    detail: Any


class Transcript(BaseModel):
    kind: Literal["transcript"] = "transcript"
    text: str
    source: Literal["input", "output"]


class InlineMedia(BaseModel):
    mime_type: Optional[str] = None
    data: str


class ContentPart(BaseModel):
    """One part of a model turn: text, inline media or both."""

    kind: Literal["content_part"] = "content_part"
    text: Optional[str] = None
    inline_media: Optional[InlineMedia] = None


class TurnMarker(BaseModel):
    kind: Literal["turn_marker"] = "turn_marker"
    marker: Literal["interrupted", "complete"]


class Closed(BaseModel):
    kind: Literal["closed"] = "closed"
    code: int
    reason: str = ""


class Unparseable(BaseModel):
    kind: Literal["unparseable"] = "unparseable"
    raw: str


ServerEvent = Union[
    SetupAck,
    UpstreamError,
    Transcript,
    ContentPart,
    TurnMarker,
    Closed,
    Unparseable,
]
