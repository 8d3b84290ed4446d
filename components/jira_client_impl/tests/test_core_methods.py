"""Unit tests for the JiraClient request core.

This module covers construction and credential selection, the URI builders,
the request header assembler and the dispatcher. The transport is always a
mock, no HTTP calls are made.
"""

#Run with "python -m pytest components/jira_client_impl/tests -v"

from unittest.mock import MagicMock

import pytest

from jira_client_impl.jira_config import BasicCredentials, BearerCredentials, ClientConfig, OAuthCredentials
from jira_client_impl.jira_impl import JiraClient
from jira_client_impl.jira_request import JiraError, RequestError, format_query
from tracker_client_interface.transport import TransportError

BASE = "http://jira.somehost.com:8080"


def make_client(**overrides):
    settings = {
        "protocol": "http",
        "port": "8080",
        "username": "someusername",
        "password": "somepassword",
        "api_version": "2.0",
        "transport": MagicMock(),
    }
    settings.update(overrides)
    return JiraClient("jira.somehost.com", **settings)


#Fixture for mock tests
@pytest.fixture
def transport():
    """Returns a transport mock that echoes back the options it was sent."""
    mock_transport = MagicMock()
    mock_transport.send.side_effect = lambda options: options
    return mock_transport


@pytest.fixture
def jira_client(transport):
    return make_client(transport=transport)

#--------------------------- tests for construction --------------------------

def test_constructor_keeps_settings():
    client = make_client()

    assert client.config.protocol == "http"
    assert client.config.host == "jira.somehost.com"
    assert client.config.port == "8080"
    assert client.config.api_version == "2.0"
    assert client.base_options["auth"] == {"user": "someusername", "pass": "somepassword"}


def test_constructor_defaults():
    client = JiraClient("jira.somehost.com", transport=MagicMock())

    assert client.config.protocol == "http"
    assert client.config.port is None
    assert client.config.api_version == "2"
    assert client.config.base == ""
    assert client.config.strict_ssl is True
    assert client.config.webhook_version == "1.0"
    assert client.config.greenhopper_version == "1.0"


def test_constructor_without_credentials_sets_no_auth():
    client = make_client(username=None, password=None)

    assert "auth" not in client.base_options
    assert "oauth" not in client.base_options


def test_constructor_needs_both_username_and_password():
    client = make_client(password=None)

    assert "auth" not in client.base_options


def test_constructor_with_oauth_credentials():
    client = make_client(oauth={
        "consumer_key": "consumer",
        "consumer_secret": "consumer_secret",
        "access_token": "token",
        "access_token_secret": "token_secret",
    })

    # Assert: OAuth wins over the username/password also supplied, and the signature method defaults
    assert client.base_options["oauth"] == {
        "consumer_key": "consumer",
        "consumer_secret": "consumer_secret",
        "token": "token",
        "token_secret": "token_secret",
        "signature_method": "RSA-SHA1",
    }
    assert "auth" not in client.base_options
    assert isinstance(client.config.credentials, OAuthCredentials)


def test_incomplete_oauth_falls_back_to_bearer():
    client = make_client(bearer="pat", oauth={"consumer_key": "consumer"})

    assert "oauth" not in client.base_options
    assert client.base_options["auth"] == {
        "user": "",
        "pass": "",
        "send_immediately": True,
        "bearer": "pat",
    }


def test_bearer_wins_over_basic():
    client = make_client(bearer="pat")

    assert isinstance(client.config.credentials, BearerCredentials)
    assert client.base_options["auth"]["bearer"] == "pat"


def test_basic_credentials_variant():
    client = make_client()

    assert client.config.credentials == BasicCredentials("someusername", "somepassword")


def test_constructor_with_timeout():
    client = make_client(timeout=2)

    assert client.base_options["timeout"] == 2


def test_constructor_with_ca():
    client = make_client(ca="/etc/ssl/jira.pem")

    assert client.base_options["ca"] == "/etc/ssl/jira.pem"


def test_base_options_are_read_only():
    client = make_client()

    with pytest.raises(TypeError):
        client.base_options["timeout"] = 10


def test_from_config_uses_given_config():
    config = ClientConfig(host="jira.example.com", protocol="https", api_version="3")

    client = JiraClient.from_config(config, transport=MagicMock())

    assert client.config is config
    assert client.make_uri("/myself") == "https://jira.example.com/rest/api/3/myself"


def test_callable_is_accepted_as_transport():
    client = make_client(transport=lambda options: {"echo": options["uri"]})

    assert client.get_server_info() == {"echo": f"{BASE}/rest/api/2.0/serverInfo"}

#--------------------------- tests for the URI builders --------------------------

def test_make_uri_with_pathname():
    client = make_client()

    assert client.make_uri("/somePathName") == f"{BASE}/rest/api/2.0/somePathName"


def test_make_uri_repeats_keys_for_lists():
    client = make_client()

    url = client.make_uri("/path", query={"fields": ["one", "two"], "expand": "three"})

    # Assert: arrays are sent as repeated keys, not joined with commas
    assert url == f"{BASE}/rest/api/2.0/path?fields=one&fields=two&expand=three"


def test_make_uri_drops_none_and_renders_booleans():
    client = make_client()

    url = client.make_uri("/path", query={"a": None, "b": True, "c": False, "d": 0})

    assert url == f"{BASE}/rest/api/2.0/path?b=true&c=false&d=0"


def test_make_uri_is_decoded():
    client = make_client()

    url = client.make_uri("/group", query={"groupname": "jira users", "expand": "users[0:50]"})

    assert url == f"{BASE}/rest/api/2.0/group?groupname=jira users&expand=users[0:50]"


def test_make_uri_encoded():
    client = make_client()

    url = client.make_uri("/attachment/10/my file.png", intermediate_path="/secure", encode=True)

    assert url == f"{BASE}/secure/attachment/10/my%20file.png"


def test_make_uri_encoded_escapes_query_and_fragment_marks_in_path():
    client = make_client()

    url = client.make_uri("/attachment/10/a#b?.png", intermediate_path="/secure", encode=True)

    assert url == f"{BASE}/secure/attachment/10/a%23b%3F.png"


def test_make_uri_encoded_keeps_query_separator():
    client = make_client()

    url = client.make_uri("/my file", query={"name": "a b"}, encode=True)

    assert url == f"{BASE}/rest/api/2.0/my%20file?name=a%20b"


def test_make_uri_without_port_http():
    client = make_client(port=None)

    assert client.make_uri("/somePathName") == "http://jira.somehost.com/rest/api/2.0/somePathName"


def test_make_uri_without_port_https():
    client = make_client(port=None, protocol="https")

    assert client.make_uri("/somePathName") == "https://jira.somehost.com/rest/api/2.0/somePathName"


def test_make_uri_places_prefix_after_base():
    client = make_client(base="/jira")

    assert client.make_uri("/project") == f"{BASE}/jira/rest/api/2.0/project"


def test_make_uri_with_per_call_intermediate_path():
    client = make_client()

    assert client.make_uri("/thing", intermediate_path="/custom/api") == f"{BASE}/custom/api/thing"


def test_client_intermediate_path_wins_over_per_call():
    client = make_client(intermediate_path="/global")

    assert client.make_uri("/thing", intermediate_path="/call") == f"{BASE}/global/thing"
    assert client.make_agile_uri("/board") == f"{BASE}/global/board"


def test_make_webhook_uri():
    client = make_client()

    assert client.make_webhook_uri("/somePathName") == f"{BASE}/rest/webhooks/1.0/somePathName"


def test_make_webhook_uri_with_version():
    client = make_client(webhook_version="2.0")

    assert client.make_webhook_uri("/webhook") == f"{BASE}/rest/webhooks/2.0/webhook"


def test_make_sprint_query_uri():
    client = make_client(greenhopper_version="2.1")

    url = client.make_sprint_query_uri("/rapid/charts/sprintreport", query={"rapidViewId": 1, "sprintId": 2})

    assert url == f"{BASE}/rest/greenhopper/2.1/rapid/charts/sprintreport?rapidViewId=1&sprintId=2"


def test_make_dev_status_uri():
    client = make_client()

    url = client.make_dev_status_uri("/summary", query={"issueId": "10001"})

    assert url == f"{BASE}/rest/dev-status/latest/issue/summary?issueId=10001"


def test_make_agile_uri():
    client = make_client()

    assert client.make_agile_uri("/board/1") == f"{BASE}/rest/agile/1.0/board/1"


def test_make_uri_is_idempotent():
    client = make_client()
    query = {"fields": ["a", "b"], "startAt": 0}

    assert client.make_uri("/search", query=query) == client.make_uri("/search", query=query)


def test_protocol_with_trailing_colon():
    client = make_client(protocol="https:", port=None)

    assert client.make_uri("/x") == "https://jira.somehost.com/rest/api/2.0/x"


def test_format_query_empty():
    assert format_query(None) == ""
    assert format_query({"a": None, "b": []}) == ""

#--------------------------- tests for make_request_header --------------------------

def test_make_request_header_average_case():
    client = make_client()

    header = client.make_request_header(client.make_uri("/somePathName"))

    assert header == {
        "json": True,
        "method": "GET",
        "reject_unauthorized": True,
        "uri": f"{BASE}/rest/api/2.0/somePathName",
    }


def test_make_request_header_with_different_method():
    client = make_client()

    header = client.make_request_header(client.make_uri("/somePathName"), {"method": "POST"})

    assert header["method"] == "POST"
    assert header["json"] is True


def test_make_request_header_caller_wins():
    client = make_client(strict_ssl=False)

    header = client.make_request_header("http://x", {"json": False, "uri": "http://y", "body": "b"})

    # Assert: the strict_ssl flag feeds the default, caller values override the rest
    assert header == {
        "reject_unauthorized": False,
        "method": "GET",
        "uri": "http://y",
        "json": False,
        "body": "b",
    }

#--------------------------- tests for do_request --------------------------

def test_do_request_returns_transport_response():
    client = make_client()
    client.transport.send.return_value = {"someKey": "someValue"}

    assert client.do_request({}) == {"someKey": "someValue"}


def test_do_request_merges_base_options(jira_client):
    result = jira_client.do_request({"uri": "http://x"})

    assert result["auth"] == {"user": "someusername", "pass": "somepassword"}
    assert result["uri"] == "http://x"


def test_do_request_call_options_win_over_base_options(transport):
    client = make_client(transport=transport, timeout=2)

    result = client.do_request({"timeout": 30})

    assert result["timeout"] == 30


def test_do_request_forwards_timeout(transport):
    client = make_client(transport=transport, timeout=2)

    result = client.do_request({})

    assert result["timeout"] == 2


def test_do_request_raises_on_error_messages():
    client = make_client()
    client.transport.send.return_value = {"errorMessages": ["some error to throw"]}

    with pytest.raises(RequestError) as exc_info:
        client.do_request({})

    assert str(exc_info.value) == "some error to throw"


def test_do_request_joins_error_messages():
    client = make_client()
    response = {"errorMessages": ["a", "b"], "errors": {"summary": "required"}}
    client.transport.send.return_value = response

    with pytest.raises(RequestError) as exc_info:
        client.do_request({})

    assert str(exc_info.value) == "a, b"
    assert exc_info.value.error_messages == ["a", "b"]
    assert exc_info.value.errors == {"summary": "required"}
    assert exc_info.value.response is response
    assert isinstance(exc_info.value, JiraError)


def test_do_request_empty_response_does_not_raise():
    client = make_client()
    client.transport.send.return_value = None

    assert client.do_request({}) is None


def test_do_request_empty_error_list_passes_through():
    client = make_client()
    client.transport.send.return_value = {"errorMessages": [], "key": "PROJ-1"}

    assert client.do_request({}) == {"errorMessages": [], "key": "PROJ-1"}


def test_do_request_list_response_passes_through():
    client = make_client()
    client.transport.send.return_value = [{"id": "1"}]

    assert client.do_request({}) == [{"id": "1"}]


def test_do_request_propagates_transport_errors_unchanged():
    client = make_client()
    error = TransportError("connection refused")
    client.transport.send.side_effect = error

    with pytest.raises(TransportError) as exc_info:
        client.do_request({})

    assert exc_info.value is error


def test_do_request_does_not_retry():
    client = make_client()
    client.transport.send.side_effect = TransportError("boom")

    with pytest.raises(TransportError):
        client.do_request({})

    assert client.transport.send.call_count == 1


def test_close_closes_transport():
    client = make_client()

    with client:
        pass

    client.transport.close.assert_called_once()
