"""Transport-facing contract shared by tracker client implementations."""

from tracker_client_interface.request import HttpMethod, RequestOptions
from tracker_client_interface.transport import Transport, TransportError

__all__ = ["HttpMethod", "RequestOptions", "Transport", "TransportError"]
