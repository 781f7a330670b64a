import logging
from typing import Mapping, Optional, Protocol

import requests

from oauthconsumer import ENCODING, AuthError, TransportError

logger = logging.getLogger(__name__)


class Response:
    def __init__(self, status: int, body: bytes = b'', headers: Mapping[str, str] = None):
        self.status = status
        self.body = body if body is not None else b''
        self.headers = dict(headers) if headers else {}

    @property
    def ok(self) -> bool:
        return self.status == 200

    @property
    def text(self) -> str:
        if isinstance(self.body, str):
            return self.body
        return self.body.decode(ENCODING, errors='replace')

    def raise_for_status(self):
        if not self.ok:
            raise AuthError(f"Server returned status {self.status}", status=self.status)

    def __repr__(self):
        return f"<Response [{self.status}]>"


class Transport(Protocol):
    def send(self, url: str, method: str, body=None, headers: Optional[Mapping[str, str]] = None) -> Response: ...


class RequestsTransport:
    """
    Транспорт поверх requests. Один вызов send - ровно один HTTP-запрос, без повторов
    """

    def __init__(self, session: requests.Session = None, timeout: float = 30):
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def send(self, url: str, method: str, body=None, headers: Optional[Mapping[str, str]] = None) -> Response:
        logger.debug(f"{method} {url.split('?', 1)[0]}")
        try:
            response = self.session.request(method, url, data=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"HTTP request failed: {method} {url.split('?', 1)[0]}: {e.__class__.__name__}")
            raise TransportError(f"HTTP request failed: {e}", cause=e) from e
        if not response.ok:
            logger.debug(f"Server returned {response.status_code}, Reason: {response.reason}")
        return Response(response.status_code, response.content, response.headers)
