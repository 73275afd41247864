"""
Stateless translation between the client wire format and the upstream Live API.

Downstream to upstream, control envelopes become ``realtimeInput`` messages.
Upstream to downstream, each JSON message is decoded into server events, which are
then mapped one by one onto the client's event vocabulary.

Media payloads are never decoded or re-encoded on the way through: the only base64
encoding performed here is wrapping raw binary frames from the client.
"""

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Union

from live_bridge.config.constants import (
    DEBUG_PAYLOAD_LIMIT,
    DEFAULT_OUTPUT_AUDIO_MIME_TYPE,
    INPUT_AUDIO_MIME_TYPE,
    LOGGER_NAME,
)
from live_bridge.models.control import (
    AudioEnvelope,
    ControlEnvelope,
    StopAudioEnvelope,
    TextEnvelope,
)
from live_bridge.models.events import (
    AiTextEvent,
    AiTranscriptEvent,
    AudioEvent,
    ClosedEvent,
    DebugEvent,
    DownstreamEvent,
    ErrorEvent,
    InterruptedEvent,
    ReadyEvent,
    TranscriptEvent,
    TurnCompleteEvent,
)
from live_bridge.models.server_events import (
    Closed,
    ContentPart,
    InlineMedia,
    ServerEvent,
    SetupAck,
    Transcript,
    TurnMarker,
    Unparseable,
    UpstreamError,
)

logger = logging.getLogger(LOGGER_NAME)


# Downstream -> upstream

def encode_audio(chunk: bytes) -> Dict[str, Any]:
    """Wrap a raw PCM16 chunk as a real-time audio input message."""
    return {
        "realtimeInput": {
            "audio": {
                "mimeType": INPUT_AUDIO_MIME_TYPE,
                "data": base64.b64encode(chunk).decode("ascii"),
            }
        }
    }


def encode_control(envelope: ControlEnvelope) -> Dict[str, Any]:
    """
    Convert a client control envelope into the upstream message to send.

    Args:
        envelope: An audio, text or stop_audio envelope

    Returns:
        The upstream JSON message as a dict
    """
    if isinstance(envelope, AudioEnvelope):
        return encode_audio(envelope.audio)
    if isinstance(envelope, TextEnvelope):
        return {"realtimeInput": {"text": envelope.text}}
    if isinstance(envelope, StopAudioEnvelope):
        return {"realtimeInput": {"audioStreamEnd": True}}
    raise TypeError(f"Unsupported control envelope: {type(envelope).__name__}")


# Upstream -> downstream

def _camel_case(key: str) -> str:
    if "_" not in key:
        return key
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def normalize_keys(value: Any) -> Any:
    """
    Rewrite every object key to camelCase, recursively.

    The Live API accepts and emits both snake_case and camelCase field names. Values
    are left untouched, so base64 payloads pass through unchanged.
    """
    if isinstance(value, dict):
        return {_camel_case(k): normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_keys(item) for item in value]
    return value


def _unparseable(text: str) -> List[ServerEvent]:
    return [Unparseable(raw=text[:DEBUG_PAYLOAD_LIMIT])]


def _transcript_text(content: Dict[str, Any], key: str, malformed: List[str]) -> Optional[str]:
    transcription = content.get(key)
    if transcription is None:
        return None
    if not isinstance(transcription, dict):
        malformed.append(key)
        return None
    text = transcription.get("text")
    if text is not None and not isinstance(text, str):
        malformed.append(f"{key}.text")
        return None
    return text


def _decode_part(part: Any, malformed: List[str]) -> List[ServerEvent]:
    if not isinstance(part, dict):
        malformed.append("modelTurn.parts[]")
        return []

    events: List[ServerEvent] = []
    text = part.get("text")
    if isinstance(text, str):
        if text:
            events.append(ContentPart(text=text))
    elif text is not None:
        malformed.append("parts[].text")

    inline = part.get("inlineData")
    if inline is None:
        return events
    if not isinstance(inline, dict):
        malformed.append("parts[].inlineData")
        return events
    data = inline.get("data")
    mime_type = inline.get("mimeType")
    if data is not None and not isinstance(data, str):
        malformed.append("inlineData.data")
    elif mime_type is not None and not isinstance(mime_type, str):
        malformed.append("inlineData.mimeType")
    elif data:
        events.append(
            ContentPart(inline_media=InlineMedia(mime_type=mime_type, data=data))
        )
    return events


def _decode_content(content: Dict[str, Any], text: str) -> List[ServerEvent]:
    events: List[ServerEvent] = []
    malformed: List[str] = []

    input_text = _transcript_text(content, "inputTranscription", malformed)
    if input_text:
        events.append(Transcript(text=input_text, source="input"))

    output_text = _transcript_text(content, "outputTranscription", malformed)
    if output_text:
        events.append(Transcript(text=output_text, source="output"))

    model_turn = content.get("modelTurn")
    if isinstance(model_turn, dict):
        parts = model_turn.get("parts")
        if isinstance(parts, list):
            for part in parts:
                events.extend(_decode_part(part, malformed))
        elif parts is not None:
            malformed.append("modelTurn.parts")
    elif model_turn is not None:
        malformed.append("modelTurn")

    if content.get("interrupted") is True:
        events.append(TurnMarker(marker="interrupted"))
    if content.get("turnComplete") is True:
        events.append(TurnMarker(marker="complete"))

    if malformed:
        logger.debug(f"Upstream message has unexpected field shapes: {malformed}")
        events.extend(_unparseable(text))
    return events


def decode_server_message(raw: Union[str, bytes]) -> List[ServerEvent]:
    """
    Decode one upstream message into server events.

    Fields whose shape does not match the protocol are skipped and reported with a
    single trailing Unparseable event; they never raise.

    Args:
        raw: The frame as received; the Live API sends JSON in both text and binary frames

    Returns:
        Zero or more server events, in the order they should reach the client
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
    try:
        message = json.loads(text)
    except ValueError:
        return _unparseable(text)
    if not isinstance(message, dict):
        return _unparseable(text)

    # Error details are relayed as sent, without key normalization
    if message.get("error") is not None:
        return [UpstreamError(detail=message["error"])]

    message = normalize_keys(message)

    if "setupComplete" in message:
        return [SetupAck()]

    content = message.get("serverContent")
    if isinstance(content, dict):
        return _decode_content(content, text)
    if content is not None:
        logger.debug(f"Upstream serverContent is not an object: {type(content).__name__}")
        return _unparseable(text)

    logger.debug(f"Ignoring upstream message with fields: {sorted(message.keys())}")
    return []


def closed_event(code: int, reason: str = "") -> Closed:
    return Closed(code=code, reason=reason)


def _stringify(detail: Any) -> str:
    if isinstance(detail, str):
        return detail
    return json.dumps(detail)


def to_downstream(
    event: ServerEvent, model: str = "", output_rate: int = 0
) -> Optional[DownstreamEvent]:
    """
    Map a server event onto the client's event vocabulary.

    Args:
        event: The decoded server event
        model: Resolved model identifier, used by the ready event
        output_rate: Output sample rate hint, used by the ready event

    Returns:
        The downstream event, or None for an empty content part
    """
    if isinstance(event, SetupAck):
        return ReadyEvent(model=model, outputRate=output_rate)
    if isinstance(event, UpstreamError):
        return ErrorEvent(message=_stringify(event.detail))
    if isinstance(event, Transcript):
        if event.source == "input":
            return TranscriptEvent(text=event.text)
        return AiTranscriptEvent(text=event.text)
    if isinstance(event, ContentPart):
        if event.inline_media is not None:
            return AudioEvent(
                mimeType=event.inline_media.mime_type or DEFAULT_OUTPUT_AUDIO_MIME_TYPE,
                data=event.inline_media.data,
            )
        if event.text is not None:
            return AiTextEvent(text=event.text)
        return None
    if isinstance(event, TurnMarker):
        if event.marker == "interrupted":
            return InterruptedEvent()
        return TurnCompleteEvent()
    if isinstance(event, Closed):
        message = f"Upstream closed (code {event.code})"
        if event.reason:
            message += f": {event.reason}"
        return ClosedEvent(message=message)
    if isinstance(event, Unparseable):
        return DebugEvent(raw=event.raw)
    raise TypeError(f"Unsupported server event: {type(event).__name__}")
