"""
Bridge module relaying a browser client to the upstream Live API.

Key components:
- BridgeSession: Per-connection state machine. Sends the setup handshake, drops client
  traffic until the upstream acknowledges it, relays both directions once READY, and
  closes both legs together on any terminal event.
- translator: Stateless mapping between client control envelopes / events and the
  upstream's JSON envelopes.
- LiveUpstreamClient: Raw WebSocket transport to the upstream endpoint.

Usage examples:
```python
from live_bridge.bridge import BridgeSession
from live_bridge.services.credentials import CredentialProvider
from live_bridge.services.model_catalog import ModelCatalog

async def serve(websocket, settings):
    await websocket.accept()
    session = BridgeSession(
        websocket,
        settings,
        CredentialProvider(settings),
        ModelCatalog(settings),
    )
    await session.run()
```
"""

from live_bridge.bridge.session import BridgeSession, SessionState
from live_bridge.bridge.upstream import LiveUpstreamClient

__all__ = ["BridgeSession", "SessionState", "LiveUpstreamClient"]
