"""
Incremental decoder for the bucket notification listen stream.

The server keeps the response open and flushes newline-terminated JSON documents
as events happen, shaped like ``{"Records": [...]}``. Between flushes it writes
whitespace so idle connections stay alive. Chunk boundaries from the HTTP layer
don't line up with records, so bytes are buffered until a full line is available.
"""

import json
from typing import Any

from bucketwatch.exceptions import NotificationDecodeError


class NotificationTransformer:
    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> list[bytes]:
        """Buffer a chunk and return every complete, non-blank record line."""
        self._buffer.extend(chunk)
        *complete, rest = self._buffer.split(b"\n")
        self._buffer = bytearray(rest)
        return [line for raw in complete if (line := bytes(raw).strip())]

    def flush(self) -> list[bytes]:
        """Return what's left in the buffer once the stream has ended."""
        line = bytes(self._buffer).strip()
        self._buffer.clear()
        return [line] if line else []

    @staticmethod
    def decode(line: bytes) -> dict[str, Any]:
        try:
            result = json.loads(line.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise NotificationDecodeError(line, f"invalid UTF-8: {e.reason}") from e
        except json.JSONDecodeError as e:
            raise NotificationDecodeError(line, str(e)) from e
        if not isinstance(result, dict):
            raise NotificationDecodeError(line, f"expected an object, got {type(result).__name__}")
        return result


def get_notification_transformer() -> NotificationTransformer:
    return NotificationTransformer()
