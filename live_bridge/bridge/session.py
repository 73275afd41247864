"""
Bridge session pairing one client WebSocket with one upstream Live API connection.

The session drives the setup handshake, drops client traffic until the upstream
acknowledges setup, then relays both directions through the translator. Any
transport-level close or error on either leg closes the other leg.
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from fastapi import WebSocket
from websockets.exceptions import ConnectionClosed

from live_bridge.bridge import translator
from live_bridge.bridge.upstream import LiveUpstreamClient, close_details
from live_bridge.config.constants import LOGGER_NAME
from live_bridge.config.settings import ConfigurationError, Settings
from live_bridge.models.control import AudioEnvelope, parse_control_message
from live_bridge.models.events import DownstreamEvent, ErrorEvent
from live_bridge.models.server_events import SetupAck
from live_bridge.models.setup import SetupConfiguration
from live_bridge.services.credentials import CredentialProvider
from live_bridge.services.model_catalog import ModelCatalog

logger = logging.getLogger(LOGGER_NAME)

UpstreamFactory = Callable[[str, Dict[str, str]], LiveUpstreamClient]


class SessionState(str, Enum):
    CONNECTING = "connecting"
    AWAITING_SETUP_ACK = "awaiting_setup_ack"
    READY = "ready"
    SETUP_TIMEOUT = "setup_timeout"
    CLOSED = "closed"


TERMINAL_STATES = (SessionState.CLOSED, SessionState.SETUP_TIMEOUT)


class BridgeSession:
    """
    State machine for one client connection and its upstream connection.

    States:
    - CONNECTING: resolving configuration and opening the upstream connection
    - AWAITING_SETUP_ACK: setup sent, waiting for the upstream to acknowledge it
    - READY: both directions are relayed
    - SETUP_TIMEOUT / CLOSED: terminal; both connections are closed

    Client messages received before READY are dropped, not queued. The session is
    single-use: nothing leaves a terminal state.
    """

    def __init__(
        self,
        downstream: WebSocket,
        settings: Settings,
        credentials: CredentialProvider,
        catalog: ModelCatalog,
        upstream_factory: UpstreamFactory = LiveUpstreamClient,
    ):
        self.session_id = str(uuid.uuid4())
        self.downstream = downstream
        self.upstream: Optional[LiveUpstreamClient] = None
        self.settings = settings
        self.credentials = credentials
        self.catalog = catalog
        self._upstream_factory = upstream_factory

        self.state = SessionState.CONNECTING
        self.model: Optional[str] = None
        self.output_rate = settings.output_sample_rate

        self._closed = asyncio.Event()
        self._tasks: List[asyncio.Task] = []
        self._timeout_task: Optional[asyncio.Task] = None

    @property
    def is_ready(self) -> bool:
        return self.state == SessionState.READY

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"Session {self.session_id}: {self.state.value} -> {state.value}")
        self.state = state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """
        Run the session until it closes.

        Starts reading from the client immediately (so a client disconnect during the
        handshake is noticed), opens the upstream connection, and returns once the
        session has reached a terminal state.
        """
        logger.info(f"Session {self.session_id} started")
        self._tasks.append(asyncio.create_task(self._pump_downstream()))
        self._tasks.append(asyncio.create_task(self._open_upstream()))
        try:
            await self._closed.wait()
        finally:
            if not self.is_terminal:
                await self.close("session cancelled")
            for task in self._tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            logger.info(f"Session {self.session_id} finished in state: {self.state.value}")

    async def _open_upstream(self) -> None:
        try:
            credential = await self.credentials.resolve()
            self.model = await self.catalog.resolve_model(credential)
            url, headers = credential.apply(self.settings.endpoint)
        except ConfigurationError as e:
            logger.error(f"Session {self.session_id} configuration error: {e}")
            await self._fail(str(e))
            return
        except Exception as e:
            logger.error(
                f"Session {self.session_id} could not resolve configuration: {e}", exc_info=True
            )
            await self._fail(f"Configuration failed: {e}")
            return

        if self.is_terminal:
            return

        self.upstream = self._upstream_factory(url, headers)
        try:
            await self.upstream.connect()
        except Exception as e:
            logger.error(f"Session {self.session_id} could not connect upstream: {e}")
            await self._fail(f"Upstream connection failed: {e}")
            return

        if self.is_terminal:
            # The client left while the upstream was connecting
            await self._close_upstream()
            return

        self._set_state(SessionState.AWAITING_SETUP_ACK)
        try:
            setup = SetupConfiguration.from_settings(self.settings, self.model)
            self.model = setup.model
            await self.upstream.send_json(setup.to_envelope())
        except Exception as e:
            logger.error(f"Session {self.session_id} failed to send setup: {e}")
            await self._fail(f"Failed to send setup: {e}")
            return
        logger.info(f"Session {self.session_id} sent setup for model {self.model}")

        self._timeout_task = asyncio.create_task(self._watch_setup_timeout())
        self._tasks.append(self._timeout_task)
        self._tasks.append(asyncio.create_task(self._pump_upstream()))

    async def _watch_setup_timeout(self) -> None:
        await asyncio.sleep(self.settings.setup_timeout)
        if self.state != SessionState.AWAITING_SETUP_ACK:
            return
        logger.warning(
            f"Session {self.session_id} setup not acknowledged after "
            f"{self.settings.setup_timeout}s"
        )
        await self._send_event(
            ErrorEvent(
                message=f"Upstream setup not acknowledged within {self.settings.setup_timeout}s"
            )
        )
        await self.close("setup timeout", state=SessionState.SETUP_TIMEOUT)

    async def _fail(self, message: str) -> None:
        """Report a fatal error to the client, then close the session."""
        await self._send_event(ErrorEvent(message=message))
        await self.close(message)

    async def close(self, reason: str = "", state: SessionState = SessionState.CLOSED) -> None:
        """
        Close the session and both of its connections.

        Idempotent: only the first call has any effect. Failures while closing
        either connection are logged and swallowed.

        Args:
            reason: Why the session is closing, for the log
            state: Terminal state to enter (CLOSED or SETUP_TIMEOUT)
        """
        if self.is_terminal:
            return
        self._set_state(state)
        logger.info(f"Session {self.session_id} closing: {reason or 'no reason given'}")

        if self._timeout_task and self._timeout_task is not asyncio.current_task():
            self._timeout_task.cancel()

        await self._close_upstream()
        try:
            await self.downstream.close()
        except Exception as e:
            logger.debug(f"Session {self.session_id} ignoring downstream close error: {e}")

        self._closed.set()

    async def _close_upstream(self) -> None:
        if self.upstream is None:
            return
        try:
            await self.upstream.close()
        except Exception as e:
            logger.debug(f"Session {self.session_id} ignoring upstream close error: {e}")

    # ------------------------------------------------------------------
    # Client -> upstream
    # ------------------------------------------------------------------

    async def _pump_downstream(self) -> None:
        try:
            while not self.is_terminal:
                message = await self.downstream.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(
                        f"Session {self.session_id} client disconnected "
                        f"(code {message.get('code')})"
                    )
                    await self.close("client disconnected")
                    return
                if message.get("bytes") is not None:
                    await self.on_downstream_message(message["bytes"], True)
                elif message.get("text") is not None:
                    await self.on_downstream_message(message["text"], False)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Session {self.session_id} client connection error: {e}")
            await self.close("client connection error")

    async def on_downstream_message(self, payload: Union[bytes, str], is_binary: bool) -> None:
        """
        Handle one frame from the client.

        Binary frames are audio. Text frames are parsed as control envelopes;
        unrecognized or malformed ones are dropped without telling the client.
        Nothing is forwarded before the session is READY.

        Args:
            payload: Frame payload
            is_binary: Whether the frame was binary
        """
        if not self.is_ready:
            logger.debug(f"Session {self.session_id} dropping client frame in state {self.state.value}")
            return

        if is_binary:
            envelope = AudioEnvelope(audio=payload)
        else:
            envelope = parse_control_message(payload)
            if envelope is None:
                logger.debug(f"Session {self.session_id} ignoring unrecognized control message")
                return

        try:
            await self.upstream.send_json(translator.encode_control(envelope))
        except Exception as e:
            logger.warning(f"Session {self.session_id} upstream send failed: {e}")
            await self.close("upstream send failed")

    # ------------------------------------------------------------------
    # Upstream -> client
    # ------------------------------------------------------------------

    async def _pump_upstream(self) -> None:
        try:
            async for raw in self.upstream.messages():
                await self.on_upstream_message(raw)
                if self.is_terminal:
                    return
        except asyncio.CancelledError:
            raise
        except ConnectionClosed as e:
            code, reason = close_details(e)
            logger.info(f"Session {self.session_id} upstream closed with code {code}: {reason}")
            await self._send_event(translator.to_downstream(translator.closed_event(code, reason)))
            await self.close(f"upstream closed ({code})")
        except Exception as e:
            logger.error(f"Session {self.session_id} upstream connection error: {e}", exc_info=True)
            await self._fail(f"Upstream connection error: {e}")

    async def on_upstream_message(self, raw: Union[str, bytes]) -> None:
        """
        Handle one frame from the upstream.

        A single frame may yield several client events; each is sent independently
        and in order. The setup acknowledgment moves the session to READY.

        Args:
            raw: Frame payload as received
        """
        for event in translator.decode_server_message(raw):
            if isinstance(event, SetupAck):
                await self._on_setup_ack()
                continue
            downstream_event = translator.to_downstream(event)
            if downstream_event is not None:
                await self._send_event(downstream_event)

    async def _on_setup_ack(self) -> None:
        if self.state != SessionState.AWAITING_SETUP_ACK:
            logger.debug(f"Session {self.session_id} ignoring setup ack in state {self.state.value}")
            return
        self._set_state(SessionState.READY)
        if self._timeout_task:
            self._timeout_task.cancel()
        logger.info(f"Session {self.session_id} ready (model {self.model})")
        await self._send_event(
            translator.to_downstream(SetupAck(), model=self.model, output_rate=self.output_rate)
        )

    async def _send_event(self, event: DownstreamEvent) -> None:
        if self.is_terminal:
            return
        try:
            await self.downstream.send_text(event.model_dump_json())
        except Exception as e:
            logger.warning(f"Session {self.session_id} failed to send to client: {e}")
            await self.close("client send failed")
