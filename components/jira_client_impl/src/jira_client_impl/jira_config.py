"""
Client configuration
--------------------
ClientConfig holds everything the client needs to build request URIs and
base options. It is frozen, so a client's view of its server never changes
after construction.

Credentials are one of three variants, picked once with the priority
OAuth > bearer > basic. Partial credential sets are ignored.

Environment variables read by load_config():
    JIRA_BASE_URL       https://myorg.atlassian.net (or JIRA_HOST + JIRA_PROTOCOL/JIRA_PORT/JIRA_BASE)
    JIRA_USER_EMAIL     me@example.com (or JIRA_USERNAME)
    JIRA_API_TOKEN      <token from https://id.atlassian.com/manage-profile/security/api-tokens> (or JIRA_PASSWORD)
    JIRA_BEARER_TOKEN   personal access token, used instead of the two above
    JIRA_API_VERSION    defaults to 2
    JIRA_STRICT_SSL     "false"/"0"/"no" disables certificate checks
    JIRA_TIMEOUT        seconds
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from getpass import getpass
from typing import Any, Union
from urllib.parse import urlsplit

# ---------------------------------------------------------------------------
# Credential variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str

    def base_options(self) -> dict[str, Any]:
        return {"auth": {"user": self.username, "pass": self.password}}


@dataclass(frozen=True)
class BearerCredentials:
    token: str

    def base_options(self) -> dict[str, Any]:
        return {
            "auth": {
                "user": "",
                "pass": "",
                "send_immediately": True,
                "bearer": self.token,
            },
        }


@dataclass(frozen=True)
class OAuthCredentials:
    """OAuth 1.0a credential set. Jira Cloud only accepts RSA-SHA1 signatures."""

    consumer_key: str
    consumer_secret: str | None
    access_token: str
    access_token_secret: str | None
    signature_method: str = "RSA-SHA1"

    def base_options(self) -> dict[str, Any]:
        return {
            "oauth": {
                "consumer_key": self.consumer_key,
                "consumer_secret": self.consumer_secret,
                "token": self.access_token,
                "token_secret": self.access_token_secret,
                "signature_method": self.signature_method,
            },
        }


Credentials = Union[OAuthCredentials, BearerCredentials, BasicCredentials]


def select_credentials(
    *,
    username: str | None = None,
    password: str | None = None,
    bearer: str | None = None,
    oauth: Mapping[str, Any] | None = None,
) -> Credentials | None:
    """Pick the single credential variant to attach to every request.

    Args:
        username: Basic auth user, only used together with password.
        password: Basic auth password or Atlassian API token.
        bearer:   Personal access token.
        oauth:    Mapping with consumer_key, consumer_secret, access_token,
                  access_token_secret and an optional signature_method.

    Returns:
        OAuthCredentials when oauth carries both a consumer key and an access
        token, else BearerCredentials when a bearer token is given, else
        BasicCredentials when both username and password are given, else None.
    """
    if oauth and oauth.get("consumer_key") and oauth.get("access_token"):
        return OAuthCredentials(
            consumer_key=oauth["consumer_key"],
            consumer_secret=oauth.get("consumer_secret"),
            access_token=oauth["access_token"],
            access_token_secret=oauth.get("access_token_secret"),
            signature_method=oauth.get("signature_method") or "RSA-SHA1",
        )
    if bearer:
        return BearerCredentials(bearer)
    if username and password:
        return BasicCredentials(username, password)
    return None

# ---------------------------------------------------------------------------
# Client configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClientConfig:
    """
    Args:
        host:                Jira host name, e.g. 'jira.example.com'
        protocol:            'http' or 'https'
        port:                Only needed for non-standard ports
        api_version:         Version segment of /rest/api/{api_version}
        base:                Path the instance is mounted under, placed before /rest/...
        intermediate_path:   Replaces the /rest/... family prefix of every request
        strict_ssl:          Verify TLS certificates
        webhook_version:     Version segment of /rest/webhooks/{webhook_version}
        greenhopper_version: Version segment of /rest/greenhopper/{greenhopper_version}
        timeout:             Seconds, handed to the transport unchanged
        ca:                  Path to a CA bundle
        credentials:         Result of select_credentials()
    """

    host: str
    protocol: str = "http"
    port: int | str | None = None
    api_version: str = "2"
    base: str = ""
    intermediate_path: str | None = None
    strict_ssl: bool = True
    webhook_version: str = "1.0"
    greenhopper_version: str = "1.0"
    timeout: float | None = None
    ca: str | None = None
    credentials: Credentials | None = None

    @classmethod
    def from_url(cls, base_url: str, **kwargs: Any) -> ClientConfig:
        """Build a config from a full instance URL such as 'https://myorg.atlassian.net:8443/jira'."""
        parts = urlsplit(base_url.strip())
        if not parts.hostname:
            raise ValueError(f"Not an absolute URL: {base_url!r}")
        kwargs.setdefault("protocol", parts.scheme or "http")
        kwargs.setdefault("port", parts.port)
        kwargs.setdefault("base", parts.path.rstrip("/"))
        return cls(host=parts.hostname, **kwargs)

    def base_options(self) -> dict[str, Any]:
        """Options merged into every request at the lowest priority."""
        options: dict[str, Any] = {}
        if self.ca:
            options["ca"] = self.ca
        if self.credentials is not None:
            options.update(self.credentials.base_options())
        if self.timeout:
            options["timeout"] = self.timeout
        return options

# ---------------------------------------------------------------------------
# Environment loading
# ---------------------------------------------------------------------------

_FALSE_VALUES = {"0", "false", "no", "off"}


def _env(*names: str) -> str:
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""


def load_config(*, interactive: bool = False) -> ClientConfig:
    """Return a ClientConfig built from environment variables.

    If "interactive = True" the user is prompted for the instance URL and
    basic credentials when they are missing from the environment.

    Raises:
        EnvironmentError: When no instance URL or host is configured and interactive is False.
    """
    base_url = _env("JIRA_BASE_URL")
    host = _env("JIRA_HOST")
    username = _env("JIRA_USER_EMAIL", "JIRA_USERNAME")
    password = _env("JIRA_API_TOKEN", "JIRA_PASSWORD")
    bearer = _env("JIRA_BEARER_TOKEN")

    if interactive:
        if not base_url and not host:
            base_url = input("Jira base URL (e.g. https://myorg.atlassian.net): ").strip()
        if not bearer:
            if not username:
                username = input("Jira user email: ").strip()
            if not password:
                password = getpass("Jira API token: ")
    elif not base_url and not host:
        raise EnvironmentError(
            "Missing required environment variables: JIRA_BASE_URL (or JIRA_HOST). "
            "Set them or call get_client(interactive=True)."
        )

    settings: dict[str, Any] = {
        "credentials": select_credentials(username=username, password=password, bearer=bearer),
        "strict_ssl": _env("JIRA_STRICT_SSL").lower() not in _FALSE_VALUES,
    }
    if _env("JIRA_API_VERSION"):
        settings["api_version"] = _env("JIRA_API_VERSION")
    if _env("JIRA_TIMEOUT"):
        settings["timeout"] = float(_env("JIRA_TIMEOUT"))

    if base_url:
        return ClientConfig.from_url(base_url, **settings)
    return ClientConfig(
        host=host,
        protocol=_env("JIRA_PROTOCOL") or "http",
        port=_env("JIRA_PORT") or None,
        base=_env("JIRA_BASE"),
        **settings,
    )
