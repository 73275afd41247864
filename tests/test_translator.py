"""
Unit tests for the message translator.

These tests cover both directions: client control envelopes to upstream
realtimeInput messages, and upstream messages to client events.
"""

import base64
import json

import pytest

from live_bridge.bridge import translator
from live_bridge.config.constants import (
    DEFAULT_OUTPUT_AUDIO_MIME_TYPE,
    INPUT_AUDIO_MIME_TYPE,
)
from live_bridge.models.control import AudioEnvelope, StopAudioEnvelope, TextEnvelope
from live_bridge.models.events import (
    AiTextEvent,
    AiTranscriptEvent,
    AudioEvent,
    ClosedEvent,
    DebugEvent,
    ErrorEvent,
    InterruptedEvent,
    ReadyEvent,
    TranscriptEvent,
    TurnCompleteEvent,
)
from live_bridge.models.server_events import (
    ContentPart,
    SetupAck,
    Transcript,
    TurnMarker,
    Unparseable,
    UpstreamError,
)


def translate(raw):
    """Decode an upstream message and map every event to its client form."""
    events = translator.decode_server_message(raw)
    return [translator.to_downstream(e, model="models/test", output_rate=24000) for e in events]


class TestEncodeControl:
    """Tests for client -> upstream translation."""

    def test_audio_envelope(self):
        chunk = bytes(range(256)) * 4
        message = translator.encode_control(AudioEnvelope(audio=chunk))

        audio = message["realtimeInput"]["audio"]
        assert audio["mimeType"] == INPUT_AUDIO_MIME_TYPE
        assert base64.b64decode(audio["data"]) == chunk

    def test_encode_audio_empty_chunk(self):
        message = translator.encode_audio(b"")
        assert message["realtimeInput"]["audio"]["data"] == ""

    def test_text_envelope(self):
        message = translator.encode_control(TextEnvelope(type="text", text="  hi there "))
        assert message == {"realtimeInput": {"text": "  hi there "}}

    def test_stop_audio_envelope(self):
        message = translator.encode_control(StopAudioEnvelope(type="stop_audio"))
        assert message == {"realtimeInput": {"audioStreamEnd": True}}

    def test_unknown_envelope(self):
        with pytest.raises(TypeError):
            translator.encode_control(object())


class TestNormalizeKeys:
    def test_snake_case_keys_become_camel_case(self):
        value = {"server_content": {"model_turn": {"parts": [{"inline_data": {"mime_type": "x"}}]}}}
        assert translator.normalize_keys(value) == {
            "serverContent": {"modelTurn": {"parts": [{"inlineData": {"mimeType": "x"}}]}}
        }

    def test_values_are_untouched(self):
        value = {"data": "snake_case_value", "turnComplete": True}
        assert translator.normalize_keys(value) == value


class TestDecodeServerMessage:
    """Tests for upstream -> server event decoding."""

    def test_setup_complete(self):
        assert translator.decode_server_message('{"setupComplete": {}}') == [SetupAck()]

    def test_setup_complete_snake_case(self):
        assert translator.decode_server_message('{"setup_complete": {}}') == [SetupAck()]

    def test_binary_frame(self):
        assert translator.decode_server_message(b'{"setupComplete": {}}') == [SetupAck()]

    def test_error_takes_precedence(self):
        raw = json.dumps({"error": {"code": 400, "message": "bad"}, "setupComplete": {}})
        assert translator.decode_server_message(raw) == [
            UpstreamError(detail={"code": 400, "message": "bad"})
        ]

    def test_unparseable_is_truncated(self):
        raw = "x" * 1200
        events = translator.decode_server_message(raw)
        assert events == [Unparseable(raw="x" * 500)]

    def test_non_object_json_is_unparseable(self):
        assert translator.decode_server_message("[1, 2]") == [Unparseable(raw="[1, 2]")]

    def test_unrelated_message_yields_nothing(self):
        assert translator.decode_server_message('{"usageMetadata": {"totalTokenCount": 5}}') == []

    def test_event_order_within_one_message(self):
        raw = json.dumps({
            "serverContent": {
                "inputTranscription": {"text": "hi"},
                "outputTranscription": {"text": "hello"},
                "modelTurn": {"parts": [{"text": "hello"}]},
                "interrupted": True,
                "turnComplete": True,
            }
        })
        events = translator.decode_server_message(raw)
        assert events == [
            Transcript(text="hi", source="input"),
            Transcript(text="hello", source="output"),
            ContentPart(text="hello"),
            TurnMarker(marker="interrupted"),
            TurnMarker(marker="complete"),
        ]

    def test_empty_parts_are_skipped(self):
        raw = json.dumps({
            "serverContent": {
                "modelTurn": {"parts": [{"text": ""}, {"inlineData": {"mimeType": "audio/pcm"}}]},
                "inputTranscription": {},
            }
        })
        assert translator.decode_server_message(raw) == []

    def test_error_detail_is_not_normalized(self):
        raw = '{"error": {"error_code": 7, "retry_after_ms": 10}}'
        assert translator.decode_server_message(raw) == [
            UpstreamError(detail={"error_code": 7, "retry_after_ms": 10})
        ]


class TestMisshapedServerContent:
    """Fields with an unexpected shape are reported once and never raise."""

    @pytest.mark.parametrize(
        "content",
        [
            {"inputTranscription": "hi"},
            {"outputTranscription": {"text": 5}},
            {"modelTurn": "hello"},
            {"modelTurn": {"parts": {"text": "hello"}}},
            {"modelTurn": {"parts": ["hello"]}},
            {"modelTurn": {"parts": [{"text": ["hello"]}]}},
            {"modelTurn": {"parts": [{"inlineData": "QUJD"}]}},
            {"modelTurn": {"parts": [{"inlineData": {"data": 123}}]}},
            {"modelTurn": {"parts": [{"inlineData": {"data": "QUJD", "mimeType": 24000}}]}},
        ],
    )
    def test_becomes_unparseable(self, content):
        raw = json.dumps({"serverContent": content})
        assert translator.decode_server_message(raw) == [Unparseable(raw=raw)]

    def test_non_object_server_content(self):
        raw = '{"serverContent": "hello"}'
        assert translator.decode_server_message(raw) == [Unparseable(raw=raw)]

    def test_well_formed_fields_still_decoded(self):
        raw = json.dumps({
            "serverContent": {
                "inputTranscription": "hi",
                "modelTurn": {"parts": [{"text": "hello"}, 7]},
                "turnComplete": True,
            }
        })
        assert translator.decode_server_message(raw) == [
            ContentPart(text="hello"),
            TurnMarker(marker="complete"),
            Unparseable(raw=raw),
        ]


class TestToDownstream:
    """Tests for the client event mapping, end to end from raw upstream messages."""

    def test_ready(self):
        assert translate('{"setupComplete": {}}') == [
            ReadyEvent(model="models/test", outputRate=24000)
        ]

    def test_model_text(self):
        events = translate('{"serverContent":{"modelTurn":{"parts":[{"text":"hello"}]}}}')
        assert [json.loads(e.model_dump_json()) for e in events] == [
            {"type": "ai_text", "text": "hello"}
        ]

    def test_inline_audio_default_mime_type(self):
        events = translate('{"serverContent":{"modelTurn":{"parts":[{"inlineData":{"data":"QUJD"}}]}}}')
        assert [json.loads(e.model_dump_json()) for e in events] == [
            {"type": "audio", "mimeType": DEFAULT_OUTPUT_AUDIO_MIME_TYPE, "data": "QUJD"}
        ]
        assert base64.b64decode(events[0].data) == b"ABC"

    def test_inline_audio_keeps_mime_type(self):
        raw = json.dumps({
            "server_content": {
                "model_turn": {"parts": [{"inline_data": {"mime_type": "audio/pcm;rate=16000", "data": "AAEC"}}]}
            }
        })
        assert translate(raw) == [AudioEvent(mimeType="audio/pcm;rate=16000", data="AAEC")]

    def test_text_and_audio_in_one_part(self):
        raw = json.dumps({
            "serverContent": {"modelTurn": {"parts": [{"text": "hi", "inlineData": {"data": "QUJD"}}]}}
        })
        assert translate(raw) == [AiTextEvent(text="hi"), AudioEvent(data="QUJD")]

    def test_transcripts(self):
        raw = json.dumps({
            "serverContent": {
                "inputTranscription": {"text": "what time is it"},
                "outputTranscription": {"text": "it is noon"},
            }
        })
        assert translate(raw) == [
            TranscriptEvent(text="what time is it"),
            AiTranscriptEvent(text="it is noon"),
        ]

    def test_turn_markers(self):
        assert translate('{"serverContent":{"interrupted":true}}') == [InterruptedEvent()]
        assert translate('{"serverContent":{"turn_complete":true}}') == [TurnCompleteEvent()]

    def test_error_object_is_json_encoded(self):
        events = translate('{"error":{"message":"quota exceeded"}}')
        assert events == [ErrorEvent(message='{"message": "quota exceeded"}')]

    def test_error_string_is_verbatim(self):
        assert translate('{"error":"boom"}') == [ErrorEvent(message="boom")]

    def test_debug(self):
        assert translate("not json") == [DebugEvent(raw="not json")]

    def test_closed(self):
        event = translator.to_downstream(translator.closed_event(1011, "internal error"))
        assert event == ClosedEvent(message="Upstream closed (code 1011): internal error")

    def test_closed_without_reason(self):
        event = translator.to_downstream(translator.closed_event(1000))
        assert event == ClosedEvent(message="Upstream closed (code 1000)")

    def test_empty_content_part(self):
        assert translator.to_downstream(ContentPart()) is None
