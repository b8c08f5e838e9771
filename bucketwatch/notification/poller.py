import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum, StrEnum
from typing import Any, final

from bucketwatch.exceptions import NotificationDecodeError
from bucketwatch.helpers import DEFAULT_REGION, uri_escape
from bucketwatch.notification.transformer import (
    NotificationTransformer,
    get_notification_transformer,
)
from bucketwatch.transport import RequestDescriptor, ResponseStream, Transport

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Awaitable[None] | None]


class PollerEvent(StrEnum):
    NOTIFICATION = "notification"
    ERROR = "error"


class PollerState(Enum):
    IDLE = "idle"
    POLLING = "polling"
    PENDING_NEXT = "pending-next"


@final
class NotificationPoller:
    """Listens for bucket notifications by repeatedly issuing long-polling requests.

    Each request stays open while the server flushes batches of records. Every record
    is passed to the `notification` listeners on its own, in the order received.
    When the server ends the response a new request is issued, until `stop()`.

    Faults are passed to the `error` listeners. A transport failure ends the loop
    (call `start()` again to resume), a malformed record does not. Without an error
    listener faults are only logged, so callers that care must register one.

    `start()` has to be called from a running event loop.

    Example:
    ```python
    poller = NotificationPoller(transport, "photos", suffix=".jpg")
    poller.on("notification", lambda record: print(record["s3"]["object"]["key"]))
    poller.on("error", lambda error: print(f"listen failed: {error}"))
    poller.start()
    ```
    """

    def __init__(  # noqa: PLR0913
        self,
        client: Transport,
        bucket_name: str,
        prefix: str | None = None,
        suffix: str | None = None,
        events: Sequence[str] | None = None,
    ):
        self.client = client
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.suffix = suffix
        self.events = tuple(events or ())
        self.ending = False
        self.state = PollerState.IDLE
        self._restart = False
        self._listeners: dict[PollerEvent, list[Listener]] = {event: [] for event in PollerEvent}
        self._task: asyncio.Task | None = None

    def on(self, event: PollerEvent | str, listener: Listener) -> Listener:
        self._listeners[PollerEvent(event)].append(listener)
        return listener

    def off(self, event: PollerEvent | str, listener: Listener) -> None:
        self._listeners[PollerEvent(event)].remove(listener)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        self.ending = False
        if self.running:
            # The live loop may be winding down already and checks this before exiting
            self._restart = True
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"notification-poller-{self.bucket_name}"
        )

    def stop(self) -> None:
        self.ending = True
        self._restart = False

    async def join(self) -> None:
        """Wait for the polling loop to finish, raising whatever a listener raised."""
        if self._task is not None:
            await self._task

    def build_query(self) -> str:
        queries = []
        if self.prefix:
            queries.append(f"prefix={uri_escape(self.prefix)}")
        if self.suffix:
            queries.append(f"suffix={uri_escape(self.suffix)}")
        queries.extend(f"events={uri_escape(event)}" for event in self.events)
        # Sorted so the query is the same regardless of how the filter was given
        return "&".join(sorted(queries))

    async def _run(self) -> None:
        try:
            while True:
                self._restart = False
                if not await self._check_for_changes() and not self._restart:
                    break
                self.state = PollerState.PENDING_NEXT
                await asyncio.sleep(0)
        finally:
            self.state = PollerState.IDLE

    async def _check_for_changes(self) -> bool:
        """Run one listen request. Returns whether another one should follow."""
        if self.ending:
            logger.debug("Stopped listening on bucket '%s'", self.bucket_name)
            return False

        self.state = PollerState.POLLING
        query = self.build_query()
        region = self.client.region or DEFAULT_REGION
        logger.debug(
            "Listening on bucket '%s' (%s) with query %r", self.bucket_name, region, query
        )

        request = RequestDescriptor(method="GET", bucket_name=self.bucket_name, query=query)
        try:
            response = await self.client.make_request(request, b"", (200,), region, stream=True)
        except Exception as e:  # noqa: BLE001
            await self._emit_error(e)
            return False

        try:
            return await self._consume(response)
        finally:
            await response.aclose()

    async def _consume(self, response: ResponseStream) -> bool:
        transformer = get_notification_transformer()
        chunks = aiter(response)
        while True:
            try:
                chunk = await anext(chunks)
            except StopAsyncIteration:
                break
            except Exception as e:  # noqa: BLE001
                await self._emit_error(e)
                return False

            for line in transformer.feed(chunk):
                await self._handle_line(transformer, line)
                if self.ending:
                    logger.debug("Closing listen stream for bucket '%s'", self.bucket_name)
                    return False

        for line in transformer.flush():
            await self._handle_line(transformer, line)

        logger.debug("Listen stream for bucket '%s' ended", self.bucket_name)
        return True

    async def _handle_line(self, transformer: NotificationTransformer, line: bytes) -> None:
        try:
            result = transformer.decode(line)
        except NotificationDecodeError as e:
            await self._emit_error(e)
            return

        # Flushes without events carry "Records": null
        records = result.get("Records") or []
        if not isinstance(records, list):
            await self._emit_error(NotificationDecodeError(line, "Records is not a list"))
            return

        for record in records:
            await self._emit(PollerEvent.NOTIFICATION, record)

    async def _emit_error(self, error: Exception) -> None:
        logger.debug("Error while listening on bucket '%s': %s", self.bucket_name, error)
        await self._emit(PollerEvent.ERROR, error)

    async def _emit(self, event: PollerEvent, payload: Any) -> None:
        for listener in list(self._listeners[event]):
            result = listener(payload)
            if inspect.isawaitable(result):
                await result
