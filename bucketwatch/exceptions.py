class UnknownTargetError(TypeError):
    """Raised when something other than a TargetConfig is added to a NotificationConfig."""

    def __init__(self, target: object):
        self.target = target
        super().__init__(
            f"Cannot add {type(target).__name__!r} to a notification config. "
            "Use TopicConfig, QueueConfig or CloudFunctionConfig."
        )


class TargetFrozenError(Exception):
    """Raised when a target config is modified after being added to a NotificationConfig."""

    def __init__(self, arn: str):
        self.arn = arn
        super().__init__(
            f"Target '{arn}' is already part of a notification config and can't be changed. "
            "Create a new target instead."
        )


class TransportError(Exception):
    """Raised when a request fails to connect or returns an unexpected status code."""

    def __init__(self, message: str, status_code: int | None = None, body: bytes = b""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class NotificationDecodeError(Exception):
    """Raised when a flushed notification record is not a valid JSON object."""

    def __init__(self, line: bytes | str, reason: str):
        if isinstance(line, bytes):
            line = line.decode("utf-8", "replace")
        self.line = line
        super().__init__(f"Malformed notification record ({reason}): {line[:200]!r}")
