import logging
from collections.abc import Sequence

from bucketwatch.notification.config import NotificationConfig
from bucketwatch.notification.poller import NotificationPoller
from bucketwatch.transport import RequestDescriptor, Transport

logger = logging.getLogger(__name__)


async def set_bucket_notification(
    transport: Transport, bucket_name: str, config: NotificationConfig
) -> None:
    """Replace the notification configuration of a bucket."""
    _validate_bucket_name(bucket_name)
    if not isinstance(config, NotificationConfig):
        raise TypeError("config must be of type NotificationConfig")

    logger.info("Setting %d notification target(s) on bucket '%s'", len(config), bucket_name)
    request = RequestDescriptor(
        method="PUT",
        bucket_name=bucket_name,
        query="notification",
        headers={"Content-Type": "application/xml"},
    )
    response = await transport.make_request(request, config.to_xml(), (200,), transport.region)
    await response.aclose()


async def remove_all_bucket_notification(transport: Transport, bucket_name: str) -> None:
    await set_bucket_notification(transport, bucket_name, NotificationConfig())


def listen_bucket_notification(
    transport: Transport,
    bucket_name: str,
    prefix: str = "",
    suffix: str = "",
    events: Sequence[str] = (),
) -> NotificationPoller:
    """Start listening for notifications on a bucket and return the running poller.

    Register listeners on the returned poller right away, before yielding to the event
    loop, so no record is missed.
    """
    _validate_bucket_name(bucket_name)
    if not isinstance(prefix, str):
        raise TypeError("prefix must be of type string")
    if not isinstance(suffix, str):
        raise TypeError("suffix must be of type string")
    if isinstance(events, str) or not all(isinstance(event, str) for event in events):
        raise TypeError("events must be a sequence of strings")

    poller = NotificationPoller(transport, bucket_name, prefix, suffix, events)
    poller.start()
    return poller


def _validate_bucket_name(bucket_name: str) -> None:
    if not isinstance(bucket_name, str):
        raise TypeError("bucket_name must be of type string")
    if not bucket_name:
        raise ValueError("bucket_name cannot be empty")
