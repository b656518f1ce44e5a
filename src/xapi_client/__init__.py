"""
xapi_client

Async client for record stores speaking the xAPI statement/state/profile protocol.

Responsibilities:
- Expose package version metadata and the public client surface.
"""

from xapi_client.client import XAPIClient
from xapi_client.errors import (
    PreconditionFailedError,
    ProtocolError,
    TransportError,
    ValidationError,
    ValidationKind,
    XAPIError,
)
from xapi_client.models import Attachment, ResponseEnvelope, XAPIResponse
from xapi_client.settings import ClientContext

__all__ = [
    "Attachment",
    "ClientContext",
    "PreconditionFailedError",
    "ProtocolError",
    "ResponseEnvelope",
    "TransportError",
    "ValidationError",
    "ValidationKind",
    "XAPIClient",
    "XAPIError",
    "XAPIResponse",
    "__version__",
]

__version__ = "0.1.0"
