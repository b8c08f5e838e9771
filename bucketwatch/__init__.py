from .config import ClientConfig
from .copy_conditions import CopyConditions
from .helpers import DEFAULT_REGION
from .transport import HttpTransport, RequestDescriptor

__all__ = [
    "DEFAULT_REGION",
    "ClientConfig",
    "CopyConditions",
    "HttpTransport",
    "RequestDescriptor",
]
