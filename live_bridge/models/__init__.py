"""
Models module for the message shapes exchanged by the live bridge.

Key components:
- control: Control envelopes received from the browser client (audio, text, stop_audio).
- events: Downstream JSON events sent to the browser client.
- server_events: Events decoded from the upstream Live API.
- setup: The frozen setup configuration sent as the first upstream message.
- session_registry: Registry of active bridge sessions.

Usage examples:
```python
from live_bridge.models.control import parse_control_message
from live_bridge.models.events import AiTextEvent

envelope = parse_control_message('{"type": "text", "text": "hello"}')
await websocket.send_text(AiTextEvent(text="hi").model_dump_json())
```
"""

from live_bridge.models.control import (
    AudioEnvelope,
    ControlEnvelope,
    StopAudioEnvelope,
    TextEnvelope,
    parse_control_message,
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
from live_bridge.models.session_registry import SessionRegistry
from live_bridge.models.setup import GenerationParameters, SetupConfiguration
