"""
Pydantic models for the JSON events sent to the browser client.

Field names follow the client's camelCase convention (outputRate, mimeType),
so the models serialize straight onto the wire with model_dump_json().
"""

from typing import Literal, Union

from pydantic import BaseModel, Field

from live_bridge.config.constants import DEFAULT_OUTPUT_AUDIO_MIME_TYPE


class ReadyEvent(BaseModel):
    """Sent once, when the upstream session acknowledges setup."""

    type: Literal["ready"] = "ready"
    model: str
    outputRate: int = Field(..., description="Sample rate of audio events in Hz")


class TranscriptEvent(BaseModel):
    """Transcription of the user's speech."""

    type: Literal["transcript"] = "transcript"
    text: str


class AiTranscriptEvent(BaseModel):
    """Transcription of the model's spoken output."""

    type: Literal["ai_transcript"] = "ai_transcript"
    text: str


class AiTextEvent(BaseModel):
    type: Literal["ai_text"] = "ai_text"
    text: str


class AudioEvent(BaseModel):
    """Model audio, still base64-encoded exactly as the upstream sent it."""

    type: Literal["audio"] = "audio"
    mimeType: str = DEFAULT_OUTPUT_AUDIO_MIME_TYPE
    data: str


class InterruptedEvent(BaseModel):
    type: Literal["interrupted"] = "interrupted"


class TurnCompleteEvent(BaseModel):
    type: Literal["turn_complete"] = "turn_complete"


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


class ClosedEvent(BaseModel):
    type: Literal["closed"] = "closed"
    message: str


class DebugEvent(BaseModel):
    """Carries a bounded prefix of an upstream payload that could not be parsed."""

    type: Literal["debug"] = "debug"
    raw: str


DownstreamEvent = Union[
    ReadyEvent,
    TranscriptEvent,
    AiTranscriptEvent,
    AiTextEvent,
    AudioEvent,
    InterruptedEvent,
    TurnCompleteEvent,
    ErrorEvent,
    ClosedEvent,
    DebugEvent,
]
