"""Request building and dispatch shared by every Jira endpoint."""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import quote, unquote, urlencode

from jira_client_impl.jira_config import ClientConfig, select_credentials
from jira_client_impl.jira_transport import as_transport
from tracker_client_interface.request import RequestOptions
from tracker_client_interface.transport import Transport

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

#family prefixes, formatted with the client config
API_PATH = "/rest/api/{api_version}"
WEBHOOK_PATH = "/rest/webhooks/{webhook_version}"
GREENHOPPER_PATH = "/rest/greenhopper/{greenhopper_version}"
DEV_STATUS_PATH = "/rest/dev-status/latest/issue"
AGILE_PATH = "/rest/agile/1.0"

#characters encodeURI leaves alone
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"
#a path segment may contain ? and #, which would end the path early
_PATH_SAFE = _URI_SAFE.replace("?", "").replace("#", "")


class JiraError(Exception):
    """Raised when the Jira API returns an unexpected response."""


class RequestError(JiraError):
    """Raised when a Jira response carries a non-empty ``errorMessages`` list."""

    def __init__(
        self,
        error_messages: list[Any],
        *,
        errors: Any = None,
        response: Any = None,
    ) -> None:
        super().__init__(", ".join(str(message) for message in error_messages))
        self.error_messages = list(error_messages)
        self.errors = dict(errors) if isinstance(errors, Mapping) else {}
        self.response = response


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_query(query: Mapping[str, Any] | None) -> str:
    """Serialize a query mapping.

    Lists and tuples become repeated keys, None values are left out.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (query or {}).items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        pairs.extend((key, _query_value(item)) for item in values)
    return urlencode(pairs, quote_via=quote)

# ---------------------------------------------------------------------------
# Request core
# ---------------------------------------------------------------------------

class JiraRequestCore:
    """
    Args:
        host:                Jira host name, e.g. 'jira.example.com'
        protocol:            'http' or 'https'
        port:                Only needed for non-standard ports
        username:            Basic auth user. Cloud users pass their account email
        password:            Basic auth password. Cloud users pass an API token
        bearer:              Personal access token, takes priority over username/password
        oauth:               OAuth 1.0a credentials, take priority over everything else
        api_version:         Version segment of /rest/api/{api_version}
        base:                Path the instance is mounted under
        intermediate_path:   Replaces the /rest/... family prefix of every request
        strict_ssl:          Verify TLS certificates
        webhook_version:     Version segment of /rest/webhooks/{webhook_version}
        greenhopper_version: Version segment of /rest/greenhopper/{greenhopper_version}
        timeout:             Seconds, forwarded to the transport
        ca:                  Path to a CA bundle
        transport:           Transport, or a callable taking the request options.
                             Defaults to RequestsTransport
        config:              A ready ClientConfig. When given, the settings above are ignored
    """

    def __init__(
        self,
        host: str = "",
        *,
        protocol: str = "http",
        port: int | str | None = None,
        username: str | None = None,
        password: str | None = None,
        bearer: str | None = None,
        oauth: Mapping[str, Any] | None = None,
        api_version: str = "2",
        base: str = "",
        intermediate_path: str | None = None,
        strict_ssl: bool = True,
        webhook_version: str = "1.0",
        greenhopper_version: str = "1.0",
        timeout: float | None = None,
        ca: str | None = None,
        transport: Transport | Callable[[RequestOptions], Any] | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        if config is None:
            config = ClientConfig(
                host=host,
                protocol=protocol or "http",
                port=port,
                api_version=str(api_version or "2"),
                base=base or "",
                intermediate_path=intermediate_path,
                strict_ssl=strict_ssl,
                webhook_version=webhook_version or "1.0",
                greenhopper_version=greenhopper_version or "1.0",
                timeout=timeout,
                ca=ca,
                credentials=select_credentials(
                    username=username, password=password, bearer=bearer, oauth=oauth
                ),
            )
        self._config = config
        self._base_options = MappingProxyType(config.base_options())
        self._transport = as_transport(transport)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: Transport | Callable[[RequestOptions], Any] | None = None,
    ):
        return cls(config=config, transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_options(self) -> Mapping[str, Any]:
        """Auth, timeout and CA options merged into every request."""
        return self._base_options

    @property
    def transport(self) -> Transport:
        return self._transport

    def close(self) -> None:
        #duck-typed transports may not hold anything to release
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # URI builders
    # ------------------------------------------------------------------

    def _build_uri(
        self,
        family_path: str,
        pathname: str,
        query: Mapping[str, Any] | None = None,
        intermediate_path: str | None = None,
        encode: bool = False,
    ) -> str:
        config = self._config
        #an override set on the client beats one passed for a single call
        prefix = config.intermediate_path or intermediate_path or family_path.format(
            api_version=config.api_version,
            webhook_version=config.webhook_version,
            greenhopper_version=config.greenhopper_version,
        )
        authority = config.host if config.port in (None, "") else f"{config.host}:{config.port}"
        path = unquote(f"{config.base}{prefix}{pathname}")
        query_string = unquote(format_query(query))
        if encode:
            path = quote(path, safe=_PATH_SAFE)
            query_string = quote(query_string, safe=_URI_SAFE)

        uri = f"{config.protocol.rstrip(':')}://{authority}{path}"
        if query_string:
            uri = f"{uri}?{query_string}"
        return uri

    def make_uri(
        self,
        pathname: str,
        query: Mapping[str, Any] | None = None,
        intermediate_path: str | None = None,
        encode: bool = False,
    ) -> str:
        """Return the URI of a core REST API resource, /rest/api/{api_version}{pathname}.

        Args:
            pathname:          Resource path, e.g. '/issue/PROJ-1'
            query:             Query parameters. Lists serialize as repeated keys
            intermediate_path: Replaces /rest/api/{api_version} for this call
            encode:            Percent-encode the result instead of decoding it

        Notes on usage:
            The URI is percent-decoded by default, so reserved characters in
            query values reach the transport verbatim and are encoded there.
        """
        return self._build_uri(API_PATH, pathname, query, intermediate_path, encode)

    def make_webhook_uri(self, pathname: str, intermediate_path: str | None = None) -> str:
        return self._build_uri(WEBHOOK_PATH, pathname, None, intermediate_path)

    def make_sprint_query_uri(
        self,
        pathname: str,
        query: Mapping[str, Any] | None = None,
        intermediate_path: str | None = None,
    ) -> str:
        return self._build_uri(GREENHOPPER_PATH, pathname, query, intermediate_path)

    def make_dev_status_uri(
        self,
        pathname: str,
        query: Mapping[str, Any] | None = None,
        intermediate_path: str | None = None,
    ) -> str:
        return self._build_uri(DEV_STATUS_PATH, pathname, query, intermediate_path)

    def make_agile_uri(
        self,
        pathname: str,
        query: Mapping[str, Any] | None = None,
        intermediate_path: str | None = None,
    ) -> str:
        return self._build_uri(AGILE_PATH, pathname, query, intermediate_path)

    # ------------------------------------------------------------------
    # Request assembly and dispatch
    # ------------------------------------------------------------------

    def make_request_header(self, uri: str, options: Mapping[str, Any] | None = None) -> RequestOptions:
        """Return the request options for ``uri``: a GET with a JSON body, unless ``options`` say otherwise."""
        options = options or {}
        return {
            "reject_unauthorized": self._config.strict_ssl,
            "method": options.get("method") or "GET",
            "uri": uri,
            "json": True,
            **options,
        }

    def do_request(self, request_options: Mapping[str, Any]) -> Any:
        """
        Args:
            request_options: Options from make_request_header(), or built by hand

        Notes on usage:
            Merges the options over the client's base options (auth, timeout)
            and hands the result to the transport. The response comes back
            untouched unless it carries Jira's error-message list. Transport
            exceptions, including HTTP status errors, are not caught.

        Returns:
            Whatever the transport returned, None included

        Raises:
            RequestError: If the response has a non-empty ``errorMessages`` list
        """
        options: RequestOptions = {**self._base_options, **request_options}
        logger.debug("%s %s", options.get("method", "GET"), options.get("uri"))

        response = self._transport.send(options)

        if isinstance(response, Mapping):
            error_messages = response.get("errorMessages")
            if isinstance(error_messages, list) and error_messages:
                logger.warning("Jira reported errors for %s: %s", options.get("uri"), error_messages)
                raise RequestError(error_messages, errors=response.get("errors"), response=response)
        return response
