"""
Pydantic models for the control envelopes a browser client sends.

Binary frames always become an AudioEnvelope. Text frames must be JSON objects
matching one of the tagged shapes below; anything else is discarded without
reporting an error back to the client.
"""

import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


class AudioEnvelope(BaseModel):
    """Raw 16 kHz mono PCM16 audio received as a binary frame."""

    type: Literal["audio"] = "audio"
    audio: bytes = Field(..., description="Raw PCM16 audio bytes")


class TextEnvelope(BaseModel):
    """Typed text input from the client."""

    type: Literal["text"]
    text: str = Field(..., description="Text forwarded verbatim to the model")


class StopAudioEnvelope(BaseModel):
    """Signals the end of the client's audio stream for the current turn."""

    type: Literal["stop_audio"]


ClientControl = Annotated[
    Union[TextEnvelope, StopAudioEnvelope], Field(discriminator="type")
]

ControlEnvelope = Union[AudioEnvelope, TextEnvelope, StopAudioEnvelope]

_client_control_adapter = TypeAdapter(ClientControl)


def parse_control_message(payload: str) -> Optional[Union[TextEnvelope, StopAudioEnvelope]]:
    """
    Parse a text frame from the client into a control envelope.

    Args:
        payload: The raw text frame

    Returns:
        The envelope, or None when the frame is not JSON or matches no known shape
    """
    try:
        data = json.loads(payload)
        return _client_control_adapter.validate_python(data)
    except (ValueError, ValidationError):
        return None
