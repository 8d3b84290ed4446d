"""Unit tests for the Transport base class."""

import pytest

from tracker_client_interface import HttpMethod, Transport, TransportError


class EchoTransport(Transport):
    def __init__(self):
        self.closed = False

    def send(self, options):
        return options

    def close(self):
        self.closed = True


def test_transport_is_abstract():
    with pytest.raises(TypeError):
        Transport()


def test_subclass_sends_and_closes_on_exit():
    with EchoTransport() as transport:
        assert transport.send({"uri": "http://x"}) == {"uri": "http://x"}

    assert transport.closed is True


def test_default_close_is_a_no_op():
    class Minimal(Transport):
        def send(self, options):
            return None

    with Minimal() as transport:
        pass

    transport.close()


def test_transport_error_is_an_exception():
    assert issubclass(TransportError, Exception)


def test_http_method_compares_as_string():
    assert HttpMethod.POST == "POST"
    assert HttpMethod("DELETE") is HttpMethod.DELETE


def test_http_method_renders_as_plain_verb():
    assert str(HttpMethod.PUT) == "PUT"
    assert f"{HttpMethod.DELETE}" == "DELETE"
