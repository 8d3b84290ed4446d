"""Request contract - the options mapping handed to a transport."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypedDict


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


class RequestOptions(TypedDict, total=False):
    """
    Everything a transport needs to perform one call.

    Built fresh for every call and never stored. Keys a transport does not
    understand should be ignored rather than rejected.

    Keys:
        uri:                  Fully built request URI.
        method:               HTTP verb, see HttpMethod.
        json:                 When True the body is sent as JSON and the response decoded as JSON.
        body:                 Request payload.
        headers:              Extra request headers.
        qs:                   Query parameters added by the transport on top of the URI.
        reject_unauthorized:  Verify TLS certificates.
        follow_all_redirects: Follow redirects for every verb, not only GET.
        encoding:             Text encoding for non-JSON responses; None returns raw bytes.
        form_data:            Multipart form fields (file uploads).
        auth:                 Static credentials, {"user", "pass"} or a bearer token.
        oauth:                OAuth 1.0a credential set, signing is up to the transport.
        timeout:              Seconds to wait for the server.
        ca:                   Path to a CA bundle.
    """

    uri: str
    method: str
    json: bool
    body: Any
    headers: dict[str, str]
    qs: dict[str, Any] | None
    reject_unauthorized: bool
    follow_all_redirects: bool
    encoding: str | None
    form_data: dict[str, Any]
    auth: dict[str, Any]
    oauth: dict[str, Any]
    timeout: float
    ca: str
