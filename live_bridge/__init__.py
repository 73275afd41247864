"""
Live Bridge - browser to streaming conversational AI relay

This application relays a real-time, bidirectional audio/text conversation between a
browser client and an upstream Live API (a session-oriented ``BidiGenerateContent``
WebSocket protocol).

The browser speaks a deliberately simple wire format: binary frames of raw 16 kHz PCM16
audio and small JSON control objects. The upstream service expects an explicit setup
handshake, typed envelopes and base64-encoded inline media. The bridge translates between
the two and gates client traffic until the upstream session is ready.

Architecture Overview:
- FastAPI server exposing the client WebSocket endpoint and health/discovery routes
- One BridgeSession per client connection, pairing it 1:1 with an upstream connection
- A stateless translator for both directions
- Read-only configuration shared by reference across sessions

Key Components:
- bridge: Session state machine, message translator and upstream transport
- config: Settings, constants and logging setup
- models: Pydantic models for control envelopes, server events and the setup payload
- services: Credential resolution and model discovery
- websocket_manager: Accepts client connections and runs their sessions

Getting Started:
1. Set up environment variables (or a .env file):
   - GEMINI_API_KEY or GEMINI_ACCESS_TOKEN: upstream credential
   - LIVE_MODEL: model identifier (discovered when unset)
   - PORT / HOST: where to serve (default 0.0.0.0:8000)
   - LOG_LEVEL: logging level (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the browser client at ws://your-server:8000/ws and wait for the
   ``ready`` event before streaming audio.
"""
