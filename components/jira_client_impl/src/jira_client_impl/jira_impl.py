"""
Authentication
--------------
The client attaches exactly one credential set to every request, picked at
construction with the priority OAuth > bearer > basic:

1. oauth={"consumer_key", "consumer_secret", "access_token", "access_token_secret"}
        Signing is left to the transport; the default transport refuses OAuth.
2. bearer="<personal access token>"
3. username="me@example.com", password="<API token>"

When get_client(interactive = True)
    User is prompted for the base URL and credentials if they are missing from the environment.
When get_client(interactive = False) - Default
    Settings come from JIRA_* environment variables, see jira_config.

Dependencies:
    uv add requests
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jira_client_impl.jira_board import AgileEndpoints
from jira_client_impl.jira_config import load_config
from jira_client_impl.jira_issue import IssueEndpoints
from jira_client_impl.jira_project import ProjectEndpoints
from tracker_client_interface.request import RequestOptions
from tracker_client_interface.transport import Transport


class JiraClient(IssueEndpoints, ProjectEndpoints, AgileEndpoints):
    """
    Wrapper for the Jira REST API.

    Every method builds a URI, assembles the request options and hands them
    to the transport, returning the decoded response.

    Example:
        client = JiraClient("jira.example.com", protocol="https", username="me", password="token")
        issue = client.find_issue("PROJ-42")
    """


# ---------------------------------------------------------------------------
# Get client
# ---------------------------------------------------------------------------

def get_client(
    *,
    interactive: bool = False,
    transport: Transport | Callable[[RequestOptions], Any] | None = None,
) -> JiraClient:
    """Return a configured JiraClient.

    Reads settings from environment variables. If "interactive = True" and
    any required value is missing, the user will be prompted.

    Args:
        interactive: Prompt for missing settings instead of raising.
        transport:   Optional transport, defaults to RequestsTransport.

    Raises:
        EnvironmentError: When JIRA_BASE_URL / JIRA_HOST is missing and interactive is False.
    """
    return JiraClient.from_config(load_config(interactive=interactive), transport=transport)
