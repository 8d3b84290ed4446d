"""Jira REST API client."""

from jira_client_impl.jira_config import (
    BasicCredentials,
    BearerCredentials,
    ClientConfig,
    OAuthCredentials,
    load_config,
    select_credentials,
)
from jira_client_impl.jira_impl import JiraClient, get_client
from jira_client_impl.jira_request import JiraError, RequestError
from jira_client_impl.jira_transport import (
    CallbackTransport,
    FunctionTransport,
    HTTPStatusError,
    RequestsTransport,
    ResourceNotFoundError,
)

__all__ = [
    "BasicCredentials",
    "BearerCredentials",
    "CallbackTransport",
    "ClientConfig",
    "FunctionTransport",
    "HTTPStatusError",
    "JiraClient",
    "JiraError",
    "OAuthCredentials",
    "RequestError",
    "RequestsTransport",
    "ResourceNotFoundError",
    "get_client",
    "load_config",
    "select_credentials",
]
