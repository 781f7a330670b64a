"""Shared fixtures: stub transport, frozen clock and nonce."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from oauthconsumer import OAuthConfig
from oauthconsumer.codec import percent_decode
from oauthconsumer.oauth import RequestSigner
from oauthconsumer.transport import Response

FIXED_TIMESTAMP = 1_318_622_958
FIXED_NONCE = "kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg"


class StubTransport:
    """Transport returning canned responses and recording every call."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[SimpleNamespace] = []

    def send(self, url, method, body=None, headers=None):
        self.calls.append(SimpleNamespace(url=url, method=method, body=body, headers=headers))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def last(self) -> SimpleNamespace:
        return self.calls[-1]


def parse_auth_header(value: str) -> dict[str, str]:
    """Split an ``OAuth k="v",...`` header value back into decoded pairs."""
    assert value.startswith("OAuth ")
    params = {}
    for item in value[len("OAuth "):].split(","):
        name, _, quoted = item.partition("=")
        params[name] = percent_decode(quoted.strip('"'))
    return params


@pytest.fixture()
def config() -> OAuthConfig:
    return OAuthConfig("xvz1evFS4wEEPTGEFPHBog", "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw")


@pytest.fixture()
def signer(config: OAuthConfig) -> RequestSigner:
    return RequestSigner(config, clock=lambda: float(FIXED_TIMESTAMP), nonce_factory=lambda: FIXED_NONCE)


@pytest.fixture()
def ok_token_response() -> Response:
    return Response(200, b"oauth_token=abc&oauth_token_secret=xyz&oauth_callback_confirmed=true")
