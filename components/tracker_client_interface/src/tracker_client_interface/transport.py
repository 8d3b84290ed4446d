"""Core transport contract definitions."""

from abc import ABC, abstractmethod
from typing import Any

from tracker_client_interface.request import RequestOptions

__all__ = ["Transport", "TransportError"]


class Transport(ABC):
    """Performs the network I/O for a tracker client."""

    @abstractmethod
    def send(self, options: RequestOptions) -> Any:
        """Send one request."""
        """Args:
            options: The fully merged request options (uri, method, body, auth, ...)

        Notes on usage: The client calls this exactly once per API call and returns whatever it
        gets back, so implementations decide how a response body is decoded. Concurrency,
        connection reuse and timeouts are the transport's business.

        Returns:
            The decoded response body, or None for an empty response

        Raises:
            TransportError: If the request could not be completed

        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the transport."""

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class TransportError(Exception):
    """Base exception raised when a transport cannot complete a request."""
