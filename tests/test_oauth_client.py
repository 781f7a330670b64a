"""Tests for signed resource requests issued after the handshake."""

from __future__ import annotations

import pytest

from conftest import StubTransport, parse_auth_header

from oauthconsumer import AuthError, OAuthConfig
from oauthconsumer.oauth import RequestSigner, SignatureEngine, split_url
from oauthconsumer.oauth_client import AuthenticatedRequest
from oauthconsumer.token import Token
from oauthconsumer.transport import Response

ACCESS_TOKEN = Token("access-key", "access-secret")


@pytest.fixture()
def transport() -> StubTransport:
    return StubTransport(Response(200, b'{"ok": true}'))


@pytest.fixture()
def client(config: OAuthConfig, signer: RequestSigner, transport: StubTransport) -> AuthenticatedRequest:
    return AuthenticatedRequest(config, transport, signer)


def test_get_header_mode_signs_query_parameters(
    config: OAuthConfig, client: AuthenticatedRequest, transport: StubTransport
) -> None:
    url = "https://api.example/res?a=1&b=x%20y"
    response = client.get(url, token=ACCESS_TOKEN)

    assert response.status == 200
    call = transport.last
    assert call.method == "GET"
    assert call.url == url
    header = parse_auth_header(call.headers["Authorization"])
    assert header["oauth_token"] == "access-key"
    signature = header.pop("oauth_signature")
    params = {"a": "1", "b": "x y", **header}
    assert SignatureEngine(config).sign("GET", "https://api.example/res", params, ACCESS_TOKEN) == signature


def test_response_is_returned_unchanged(config: OAuthConfig, signer: RequestSigner) -> None:
    canned = Response(404, b"not found")
    client = AuthenticatedRequest(config, StubTransport(canned), signer)
    assert client.get("https://api.example/res", token=ACCESS_TOKEN) is canned


def test_caller_headers_do_not_override_authorization(client: AuthenticatedRequest, transport: StubTransport) -> None:
    client.get(
        "https://api.example/res",
        headers={"Accept": "application/json", "authorization": "Bearer nope"},
        token=ACCESS_TOKEN,
    )
    headers = transport.last.headers
    assert headers["Accept"] == "application/json"
    assert headers["Authorization"].startswith("OAuth ")
    assert "authorization" not in headers


def test_query_mode_appends_all_parameters(client: AuthenticatedRequest, transport: StubTransport) -> None:
    client.get("https://api.example/res?a=1", params={"c": "3"}, token=ACCESS_TOKEN, header_auth_required=False)

    call = transport.last
    assert "Authorization" not in call.headers
    base_url, params = split_url(call.url)
    assert base_url == "https://api.example/res"
    assert params["a"] == "1"
    assert params["c"] == "3"
    assert params["oauth_token"] == "access-key"
    assert "oauth_signature" in params


def test_get_header_mode_transmits_extra_params_in_query(
    client: AuthenticatedRequest, transport: StubTransport
) -> None:
    client.get("https://api.example/res?a=1", params={"c": "3"}, token=ACCESS_TOKEN)
    assert transport.last.url == "https://api.example/res?a=1&c=3"


def test_post_header_mode_sends_params_as_form_body(client: AuthenticatedRequest, transport: StubTransport) -> None:
    client.post("https://api.example/status", params={"status": "hello world"}, token=ACCESS_TOKEN)

    call = transport.last
    assert call.method == "POST"
    assert call.url == "https://api.example/status"
    assert call.body == "status=hello%20world"
    assert call.headers["Content-Type"] == "application/x-www-form-urlencoded"


def test_put_keeps_caller_body(client: AuthenticatedRequest, transport: StubTransport) -> None:
    client.put("https://api.example/doc", params={"v": "2"}, body=b"<doc/>",
               headers={"Content-Type": "application/xml"}, token=ACCESS_TOKEN)

    call = transport.last
    assert call.method == "PUT"
    assert call.body == b"<doc/>"
    assert call.headers["Content-Type"] == "application/xml"
    # тело занято, поэтому подписанный параметр уходит в query
    assert call.url == "https://api.example/doc?v=2"


def test_header_mode_transmits_signed_oauth_extras(
    config: OAuthConfig, client: AuthenticatedRequest, transport: StubTransport
) -> None:
    token = Token("access-key", "access-secret", {"oauth_verifier": "v1"})
    client.get("https://api.example/r", params={"oauth_callback": "https://cb"}, token=token)

    call = transport.last
    header = parse_auth_header(call.headers["Authorization"])
    base_url, query = split_url(call.url)
    assert base_url == "https://api.example/r"
    assert query == {"oauth_callback": "https://cb", "oauth_verifier": "v1"}
    signature = header.pop("oauth_signature")
    assert SignatureEngine(config).sign("GET", base_url, {**header, **query}, token) == signature


def test_post_keeps_url_query_and_sends_params_in_body(
    client: AuthenticatedRequest, transport: StubTransport
) -> None:
    client.post("https://api.example/status?trim=1", params={"status": "hi"}, token=ACCESS_TOKEN)

    call = transport.last
    assert call.url == "https://api.example/status?trim=1"
    assert call.body == "status=hi"


def test_repeated_url_parameter_is_sent_once_with_signed_value(
    config: OAuthConfig, client: AuthenticatedRequest, transport: StubTransport
) -> None:
    client.get("https://api.example/r?a=1&a=2", token=ACCESS_TOKEN)

    call = transport.last
    assert call.url == "https://api.example/r?a=2"
    header = parse_auth_header(call.headers["Authorization"])
    signature = header.pop("oauth_signature")
    assert SignatureEngine(config).sign("GET", "https://api.example/r", {**header, "a": "2"}, ACCESS_TOKEN) == signature


def test_fragment_is_dropped_before_query(client: AuthenticatedRequest, transport: StubTransport) -> None:
    client.get("https://api.example/r#frag", params={"c": "3"}, token=ACCESS_TOKEN)
    assert transport.last.url == "https://api.example/r?c=3"


@pytest.mark.parametrize("token", [None, Token(None, "secret"), Token("", "secret")])
def test_token_with_key_is_required(client: AuthenticatedRequest, transport: StubTransport, token) -> None:
    with pytest.raises(AuthError):
        client.get("https://api.example/res", token=token)
    assert transport.calls == []
