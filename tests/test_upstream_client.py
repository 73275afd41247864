"""
Unit tests for the upstream Live API WebSocket client.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from websockets.exceptions import ConnectionClosed, ConnectionClosedError
from websockets.frames import Close

from live_bridge.bridge.upstream import (
    ABNORMAL_CLOSURE,
    LiveUpstreamClient,
    close_details,
)


@pytest.fixture
def upstream_client():
    return LiveUpstreamClient(
        "wss://example.test/ws?key=abc", {"Authorization": "Bearer token"}
    )


@pytest.mark.asyncio
async def test_connect_passes_url_and_headers(upstream_client):
    mock_ws = AsyncMock()

    with patch("websockets.connect", new=AsyncMock(return_value=mock_ws)) as mock_connect:
        await upstream_client.connect()

    assert upstream_client.ws is mock_ws
    args, kwargs = mock_connect.call_args
    assert args[0] == "wss://example.test/ws?key=abc"
    assert kwargs["additional_headers"] == {"Authorization": "Bearer token"}
    assert kwargs["compression"] is None


@pytest.mark.asyncio
async def test_connect_failure_propagates(upstream_client):
    with patch("websockets.connect", new=AsyncMock(side_effect=OSError("refused"))):
        with pytest.raises(OSError):
            await upstream_client.connect()


@pytest.mark.asyncio
async def test_send_json(upstream_client):
    upstream_client.ws = AsyncMock()

    await upstream_client.send_json({"realtimeInput": {"text": "hi"}})

    upstream_client.ws.send.assert_called_once_with(
        json.dumps({"realtimeInput": {"text": "hi"}})
    )


@pytest.mark.asyncio
async def test_send_json_not_connected(upstream_client):
    with pytest.raises(RuntimeError):
        await upstream_client.send_json({})


@pytest.mark.asyncio
async def test_messages_until_closed(upstream_client):
    upstream_client.ws = AsyncMock()
    upstream_client.ws.recv.side_effect = [
        '{"setupComplete": {}}',
        b'{"serverContent": {}}',
        ConnectionClosedError(Close(1011, "internal error"), None),
    ]

    received = []
    with pytest.raises(ConnectionClosed) as exc_info:
        async for message in upstream_client.messages():
            received.append(message)

    assert received == ['{"setupComplete": {}}', b'{"serverContent": {}}']
    assert close_details(exc_info.value) == (1011, "internal error")


@pytest.mark.asyncio
async def test_close_is_idempotent(upstream_client):
    upstream_client.ws = AsyncMock()

    await upstream_client.close()
    await upstream_client.close()

    upstream_client.ws.close.assert_called_once()


@pytest.mark.asyncio
async def test_close_before_connect(upstream_client):
    await upstream_client.close()
    assert upstream_client.ws is None


@pytest.mark.asyncio
async def test_close_during_connect_closes_new_connection(upstream_client):
    """A connection that completes after close() is closed, not leaked"""
    mock_ws = AsyncMock()
    await upstream_client.close()

    with patch("websockets.connect", new=AsyncMock(return_value=mock_ws)):
        await upstream_client.connect()
    await upstream_client.close()

    mock_ws.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_before_connect_then_close_after(upstream_client):
    await upstream_client.close()
    upstream_client.ws = AsyncMock()

    await upstream_client.close()

    upstream_client.ws.close.assert_awaited_once()


def test_close_details_prefers_received_frame():
    exc = ConnectionClosed(Close(1001, "going away"), Close(1000, "bye"), True)
    assert close_details(exc) == (1001, "going away")


def test_close_details_uses_sent_frame():
    exc = ConnectionClosed(None, Close(1000, "bye"))
    assert close_details(exc) == (1000, "bye")


def test_close_details_without_frames():
    assert close_details(ConnectionClosed(None, None)) == (ABNORMAL_CLOSURE, "")
