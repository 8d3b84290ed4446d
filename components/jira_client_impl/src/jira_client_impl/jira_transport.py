"""
Transports
----------
A transport performs the actual HTTP call for JiraClient. Three are provided:

1. RequestsTransport - Default
        Built on a requests.Session. Decodes JSON bodies and raises
        HTTPStatusError for any status >= 400.
2. FunctionTransport
        Wraps a plain callable taking the request options and returning the response.
3. CallbackTransport
        Wraps a legacy callable taking the request options and a completion
        callback, which it calls with (error, response).

Dependencies:
    uv add requests
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

import requests
from requests.auth import HTTPBasicAuth

from tracker_client_interface.request import RequestOptions
from tracker_client_interface.transport import Transport, TransportError

logger = logging.getLogger(__name__)


class HTTPStatusError(TransportError):
    """Raised when Jira answers with a status code of 400 or above."""

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResourceNotFoundError(HTTPStatusError):
    """Raised when a requested Jira resource does not exist."""


def _describe(detail: Any) -> str:
    #Jira error bodies carry a list of messages and a field -> message dict
    if isinstance(detail, dict) and (detail.get("errorMessages") or detail.get("errors")):
        messages = list(detail.get("errorMessages") or [])
        messages += [f"{field}: {message}" for field, message in (detail.get("errors") or {}).items()]
        return ", ".join(str(m) for m in messages)
    return str(detail)

# ---------------------------------------------------------------------------
# Default transport
# ---------------------------------------------------------------------------

class RequestsTransport(Transport):
    """
    Args:
        session: An existing requests.Session to send through. A new one is
                 created (and owned) when omitted.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._owns_session = session is None
        self._session = session or requests.Session()
        if self._owns_session:
            self._session.headers.update({"Accept": "application/json"})

    def send(self, options: RequestOptions) -> Any:
        if options.get("oauth"):
            raise TransportError(
                "OAuth 1.0a request signing is not built in; "
                "construct the client with a transport that signs requests"
            )

        method = options.get("method") or "GET"
        #enum members carry the verb in .value
        method = str(getattr(method, "value", method)).upper()
        uri = options["uri"]
        as_json = options.get("json", True)
        headers = dict(options.get("headers") or {})

        kwargs: dict[str, Any] = {
            "params": options.get("qs") or None,
            "timeout": options.get("timeout"),
            #requests follows redirects for every verb, the request options only do that on demand
            "allow_redirects": method == "GET" or bool(options.get("follow_all_redirects")),
            "verify": self._verify(options),
        }

        auth = options.get("auth")
        if auth:
            if auth.get("bearer"):
                headers["Authorization"] = f"Bearer {auth['bearer']}"
            else:
                kwargs["auth"] = HTTPBasicAuth(auth.get("user", ""), auth.get("pass", ""))

        body = options.get("body")
        if options.get("form_data"):
            kwargs["files"] = options["form_data"]
        elif body is not None:
            if as_json:
                kwargs["json"] = body
            else:
                kwargs["data"] = body

        kwargs["headers"] = headers

        try:
            response = self._session.request(method, uri, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, uri, exc)
            raise TransportError(f"{method} {uri} failed: {exc}") from exc

        self._raise_for_status(response)
        return self._decode(response, options)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _verify(options: RequestOptions) -> bool | str:
        if not options.get("reject_unauthorized", True):
            return False
        return options.get("ca") or True

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if response.status_code < 400:
            return
        try:
            detail = response.json()
        except ValueError:
            detail = response.text

        logger.warning("Jira API error %s for %s", response.status_code, response.url)
        if response.status_code == 404:
            raise ResourceNotFoundError(
                f"Resource not found: {response.url}", response.status_code, detail
            )
        raise HTTPStatusError(
            f"Jira API error {response.status_code}: {_describe(detail)}",
            response.status_code,
            detail,
        )

    @staticmethod
    def _decode(response: requests.Response, options: RequestOptions) -> Any:
        # 204 No Content and friends
        if not response.content:
            return None
        if options.get("json", True):
            try:
                return response.json()
            except ValueError:
                return response.text
        if "encoding" in options:
            encoding = options["encoding"]
            if encoding is None:
                return response.content
            return response.content.decode(encoding)
        return response.text

# ---------------------------------------------------------------------------
# Adapters for caller-supplied functions
# ---------------------------------------------------------------------------

class FunctionTransport(Transport):
    """Sends through a callable of shape ``func(options) -> response``."""

    def __init__(self, func: Callable[[RequestOptions], Any]) -> None:
        self._func = func

    def send(self, options: RequestOptions) -> Any:
        return self._func(options)


class CallbackTransport(Transport):
    """Sends through a callable of shape ``func(options, callback)``.

    The callable must eventually call ``callback(error, response)``, either
    before returning or later from another thread. A non-None error is
    raised; an error that is not an exception is wrapped in TransportError.

    Args:
        func:         The callback-style request function.
        wait_timeout: Seconds to wait for the callback. Falls back to the
                      request's own timeout, and waits forever when neither is set.
    """

    def __init__(self, func: Callable[..., Any], wait_timeout: float | None = None) -> None:
        self._func = func
        self._wait_timeout = wait_timeout

    def send(self, options: RequestOptions) -> Any:
        done = threading.Event()
        outcome: dict[str, Any] = {}

        def callback(error: Any = None, response: Any = None) -> None:
            outcome["error"] = error
            outcome["response"] = response
            done.set()

        self._func(options, callback)

        timeout = self._wait_timeout if self._wait_timeout is not None else options.get("timeout")
        if not done.wait(timeout):
            raise TransportError(f"No response for {options.get('uri')} within {timeout} seconds")

        error = outcome["error"]
        if error is not None:
            if isinstance(error, BaseException):
                raise error
            raise TransportError(str(error))
        return outcome["response"]


def as_transport(transport: Transport | Callable[[RequestOptions], Any] | None = None) -> Transport:
    """Return a Transport for whatever the caller handed to the client.

    None gives a fresh RequestsTransport and a requests.Session is wrapped in
    one. Anything else with a ``send`` method is used as is, and a bare
    callable is wrapped in FunctionTransport.
    """
    if transport is None:
        return RequestsTransport()
    if isinstance(transport, Transport):
        return transport
    #Session.send takes a PreparedRequest, not request options
    if isinstance(transport, requests.Session):
        return RequestsTransport(session=transport)
    if callable(getattr(transport, "send", None)):
        return transport
    if callable(transport):
        return FunctionTransport(transport)
    raise TypeError(f"Expected a Transport or a callable, got {type(transport).__name__}")
