"""
WebSocket connection manager for browser clients.

Each accepted client connection gets exactly one BridgeSession, which owns the client
socket and its upstream connection until either side closes. The manager only accepts
connections, runs their sessions and keeps the registry of live sessions current.
"""

import logging
from typing import Optional

from fastapi import WebSocket

from live_bridge.bridge.session import BridgeSession, UpstreamFactory
from live_bridge.bridge.upstream import LiveUpstreamClient
from live_bridge.config.constants import LOGGER_NAME
from live_bridge.config.settings import Settings
from live_bridge.models.session_registry import SessionRegistry
from live_bridge.services.credentials import CredentialProvider
from live_bridge.services.model_catalog import ModelCatalog

logger = logging.getLogger(LOGGER_NAME)


class WebSocketManager:
    """Accepts client WebSocket connections and runs one bridge session per connection.

    Settings, the credential provider and the model catalog are shared by reference
    across sessions; none of them is mutated by a session.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: Optional[CredentialProvider] = None,
        catalog: Optional[ModelCatalog] = None,
        upstream_factory: UpstreamFactory = LiveUpstreamClient,
    ):
        self.settings = settings
        self.credentials = credentials or CredentialProvider(settings)
        self.catalog = catalog or ModelCatalog(settings)
        self.upstream_factory = upstream_factory
        self.session_registry = SessionRegistry()

    def create_session(self, websocket: WebSocket) -> BridgeSession:
        return BridgeSession(
            websocket,
            self.settings,
            self.credentials,
            self.catalog,
            upstream_factory=self.upstream_factory,
        )

    async def handle_websocket(self, websocket: WebSocket):
        """Handle a client WebSocket connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        This method:
        1. Accepts the WebSocket connection
        2. Creates and registers a bridge session for it
        3. Runs the session until either side closes
        4. Removes the session from the registry

        The session closes the client socket itself; the manager never writes to it.
        """
        await websocket.accept()

        session = self.create_session(websocket)
        self.session_registry.add_session(session.session_id, session)
        logger.info(
            f"Client connected, session {session.session_id} "
            f"({len(self.session_registry)} active)"
        )

        try:
            await session.run()
        except Exception as e:
            logger.error(f"Error in session {session.session_id}: {e}", exc_info=True)
            await session.close("unexpected error")
        finally:
            self.session_registry.remove_session(session.session_id)
            logger.info(f"Session {session.session_id} removed from registry")
