from .api import (
    listen_bucket_notification,
    remove_all_bucket_notification,
    set_bucket_notification,
)
from .config import (
    CloudFunctionConfig,
    EventFilter,
    FilterRule,
    NotificationConfig,
    QueueConfig,
    TargetConfig,
    TargetKind,
    TopicConfig,
    build_arn,
)
from .events import (
    KNOWN_EVENTS,
    OBJECT_CREATED_ALL,
    OBJECT_CREATED_COMPLETE_MULTIPART_UPLOAD,
    OBJECT_CREATED_COPY,
    OBJECT_CREATED_POST,
    OBJECT_CREATED_PUT,
    OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT,
    OBJECT_REMOVED_ALL,
    OBJECT_REMOVED_DELETE,
    OBJECT_REMOVED_DELETE_MARKER_CREATED,
)
from .poller import NotificationPoller, PollerEvent, PollerState
from .transformer import NotificationTransformer, get_notification_transformer

__all__ = [
    "KNOWN_EVENTS",
    "OBJECT_CREATED_ALL",
    "OBJECT_CREATED_COMPLETE_MULTIPART_UPLOAD",
    "OBJECT_CREATED_COPY",
    "OBJECT_CREATED_POST",
    "OBJECT_CREATED_PUT",
    "OBJECT_REDUCED_REDUNDANCY_LOST_OBJECT",
    "OBJECT_REMOVED_ALL",
    "OBJECT_REMOVED_DELETE",
    "OBJECT_REMOVED_DELETE_MARKER_CREATED",
    "CloudFunctionConfig",
    "EventFilter",
    "FilterRule",
    "NotificationConfig",
    "NotificationPoller",
    "NotificationTransformer",
    "PollerEvent",
    "PollerState",
    "QueueConfig",
    "TargetConfig",
    "TargetKind",
    "TopicConfig",
    "build_arn",
    "get_notification_transformer",
    "listen_bucket_notification",
    "remove_all_bucket_notification",
    "set_bucket_notification",
]
