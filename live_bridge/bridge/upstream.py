"""
WebSocket client for the upstream Live API.

This module owns the raw transport of one bridge session: opening the connection with
the session's credential, sending JSON messages and yielding received frames until the
connection closes. It knows nothing about the message vocabulary; see translator.
"""

import asyncio
import json
import logging
import time
from typing import Any, AsyncIterator, Dict, Optional, Tuple, Union

import websockets
from websockets.exceptions import ConnectionClosed

from live_bridge.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds
SEND_TIMEOUT = 5.0  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_MAX_QUEUE = 32  # Small queue to prevent buffering
WS_PING_INTERVAL = 20
WS_PING_TIMEOUT = 20

# Close code reported when the connection dropped without a close frame
ABNORMAL_CLOSURE = 1006


def close_details(exc: ConnectionClosed) -> Tuple[int, str]:
    """
    Extract the close code and reason from a ConnectionClosed exception.

    Prefers the frame received from the peer, then the one we sent.
    """
    frame = exc.rcvd or exc.sent
    if frame is None:
        return ABNORMAL_CLOSURE, ""
    return frame.code, frame.reason


class LiveUpstreamClient:
    """
    Raw duplex WebSocket connection to the upstream Live API.

    One client serves one bridge session. It does not reconnect: a dropped
    connection ends the session, and the client must open a new one.
    """

    def __init__(self, url: str, headers: Optional[Dict[str, str]] = None):
        """
        Args:
            url: Fully resolved endpoint URL, including any API key parameter
            headers: Extra handshake headers, e.g. a bearer Authorization header
        """
        self.url = url
        self.headers = headers or {}
        self.ws = None
        self._is_closing = False
        self._is_closed = False

    async def connect(self) -> None:
        """
        Open the WebSocket connection.

        Raises:
            asyncio.TimeoutError: If the handshake does not finish in CONNECTION_TIMEOUT seconds
            Exception: Any handshake or network error from websockets
        """
        logger.info("Connecting to upstream Live API")
        connection_start = time.time()
        # Compression disabled: payloads are mostly base64 audio
        self.ws = await asyncio.wait_for(
            websockets.connect(
                self.url,
                max_size=WS_MAX_SIZE,
                max_queue=WS_MAX_QUEUE,
                ping_interval=WS_PING_INTERVAL,
                ping_timeout=WS_PING_TIMEOUT,
                compression=None,
                additional_headers=self.headers,
            ),
            timeout=CONNECTION_TIMEOUT,
        )
        connection_time = time.time() - connection_start
        logger.debug(f"Upstream connection established in {connection_time:.2f} seconds")

        if self._is_closing:
            # close() was called while the handshake was in flight
            logger.debug("Upstream closed during connect, closing new connection")
            await self.close()

    async def send_json(self, message: Dict[str, Any]) -> None:
        """
        Serialize and send one JSON message.

        Raises:
            RuntimeError: If the client is not connected
            ConnectionClosed: If the connection closed while sending
        """
        if self.ws is None:
            raise RuntimeError("Upstream connection is not open")
        await asyncio.wait_for(self.ws.send(json.dumps(message)), timeout=SEND_TIMEOUT)

    async def messages(self) -> AsyncIterator[Union[str, bytes]]:
        """
        Yield frames from the upstream until the connection closes.

        Raises:
            ConnectionClosed: When the connection closes, normally or not; the
                exception carries the close code and reason
        """
        if self.ws is None:
            raise RuntimeError("Upstream connection is not open")
        while True:
            yield await self.ws.recv()

    async def close(self) -> None:
        """
        Close the WebSocket connection. Safe to call more than once.

        Called before the connection exists, it only marks the client as closing, and
        a connection that completes afterwards is closed as soon as it opens.
        """
        self._is_closing = True
        if self.ws is None or self._is_closed:
            return
        self._is_closed = True
        logger.debug("Closing upstream connection")
        await self.ws.close()
