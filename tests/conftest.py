import asyncio
import logging
from collections.abc import Callable

import pytest

from bucketwatch.exceptions import TransportError
from bucketwatch.notification import NotificationPoller


class FakeStream:
    """Scripted response body. Hooks run right before the first chunk and after the last."""

    def __init__(
        self,
        chunks: list[bytes],
        error: Exception | None = None,
        on_start: Callable[[], None] | None = None,
        on_end: Callable[[], None] | None = None,
    ):
        self.chunks = chunks
        self.error = error
        self.on_start = on_start
        self.on_end = on_end
        self.closed = False
        self.yielded = 0

    async def __aiter__(self):
        if self.on_start:
            self.on_start()
        for chunk in self.chunks:
            if self.closed:
                return
            self.yielded += 1
            yield chunk
        if self.error:
            raise self.error
        if self.on_end:
            self.on_end()

    async def aclose(self) -> None:
        self.closed = True


class FakeTransport:
    """Hands out scripted responses, raising TransportError once they run out."""

    def __init__(self, responses: list | None = None, region: str | None = None):
        self.region = region
        self.responses = list(responses or [])
        self.requests = []

    async def make_request(
        self, request, payload=b"", expected_status=(200,), region=None, stream=False
    ):
        self.requests.append({"request": request, "payload": payload, "region": region})
        if not self.responses:
            raise TransportError("no more scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


class Recorder:
    def __init__(self, poller: NotificationPoller):
        self.notifications = []
        self.errors = []
        poller.on("notification", self.notifications.append)
        poller.on("error", self.errors.append)


def run_poller(poller: NotificationPoller) -> None:
    async def main():
        poller.start()
        await poller.join()

    asyncio.run(main())


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def poller(transport):
    return NotificationPoller(transport, "photos")


@pytest.fixture
def recorder(poller):
    return Recorder(poller)


@pytest.fixture(autouse=True)
def clean_app_logger():
    app_logger = logging.getLogger("bucketwatch")
    handlers = list(app_logger.handlers)
    yield
    for handler in app_logger.handlers:
        if handler not in handlers:
            handler.close()
    app_logger.handlers = handlers


@pytest.fixture
def fake_stream():
    return FakeStream


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def run():
    return run_poller
