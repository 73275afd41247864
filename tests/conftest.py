import asyncio
import logging

import pytest

from live_bridge.config.settings import Settings


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeDownstream:
    """A client WebSocket stand-in that records sent messages and closes."""

    def __init__(self):
        self.sent_messages = []
        self.close_calls = 0
        self.incoming = asyncio.Queue()

    async def receive(self):
        return await self.incoming.get()

    async def send_text(self, text):
        self.sent_messages.append(text)

    async def close(self, code=1000, reason=None):
        self.close_calls += 1

    def push_bytes(self, data):
        self.incoming.put_nowait({"type": "websocket.receive", "bytes": data})

    def push_text(self, text):
        self.incoming.put_nowait({"type": "websocket.receive", "text": text})

    def push_disconnect(self, code=1000):
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": code})


class FakeUpstream:
    """An upstream connection stand-in driven by a queue of frames or exceptions."""

    def __init__(self, url="wss://example.test/ws", headers=None):
        self.url = url
        self.headers = headers or {}
        self.sent = []
        self.connect_calls = 0
        self.close_calls = 0
        self.incoming = asyncio.Queue()

    async def connect(self):
        self.connect_calls += 1

    async def send_json(self, message):
        self.sent.append(message)

    async def messages(self):
        while True:
            item = await self.incoming.get()
            if isinstance(item, BaseException):
                raise item
            yield item

    async def close(self):
        self.close_calls += 1

    def push(self, item):
        self.incoming.put_nowait(item)


async def wait_for_condition(predicate, timeout=1.0):
    """Poll until predicate() is true, failing the test after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def settings():
    return Settings(api_key="test-api-key", model="gemini-live-test", setup_timeout=5.0)


@pytest.fixture
def downstream():
    return FakeDownstream()


@pytest.fixture
def upstream():
    return FakeUpstream()
