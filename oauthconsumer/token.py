import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from oauthconsumer import ENCODING, OAUTH_TOKEN, OAUTH_TOKEN_SECRET, OAUTH_VERIFIER, DecodingError, ParseError
from oauthconsumer.codec import percent_decode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Token:
    """
    Токен OAuth: ключ передаётся серверу, секрет используется только для подписи.
    В attributes лежат остальные поля ответа провайдера (verifier, session handle и пр.)
    """
    key: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.key) and bool(self.secret)

    @property
    def verifier(self) -> Optional[str]:
        return self.attributes.get(OAUTH_VERIFIER)

    def get_attribute(self, name, default=None):
        return self.attributes.get(name, default)

    def with_verifier(self, verifier: str) -> 'Token':
        attributes = dict(self.attributes)
        attributes[OAUTH_VERIFIER] = verifier
        return dataclasses.replace(self, attributes=attributes)


def _read_body(body) -> str:
    if hasattr(body, 'read'):
        body = body.read()
    if body is None:
        return ''
    if isinstance(body, str):
        return body
    try:
        return bytes(body).decode(ENCODING)
    except (UnicodeDecodeError, TypeError) as e:
        raise ParseError("Failed to parse response", cause=e) from e


def parse_token_response(body) -> Token:
    """
    Разбор ответа в формате application/x-www-form-urlencoded.
    Первые вхождения oauth_token и oauth_token_secret становятся ключом и секретом,
    остальные пары - атрибутами токена
    :param body: тело ответа (bytes, str или объект с методом read)
    :return: токен; если ключа или секрета в ответе нет, они остаются пустыми
    """
    text = _read_body(body).strip()
    key = None
    secret = None
    attributes = {}
    for pair in text.split('&'):
        name, sep, value = pair.partition('=')
        if not sep:
            continue
        try:
            name = percent_decode(name)
            value = percent_decode(value)
        except DecodingError as e:
            raise ParseError(f"Failed to parse response: {e.message}", cause=e) from e
        if key is None and name == OAUTH_TOKEN:
            key = value
        elif secret is None and name == OAUTH_TOKEN_SECRET:
            secret = value
        elif name in (OAUTH_TOKEN, OAUTH_TOKEN_SECRET):
            logger.debug(f"Ignore duplicate {name} in token response")
        else:
            attributes[name] = value
    if key is not None and secret is not None:
        logger.debug(f"Parsed token {key[:6]}****")
        return Token(key, secret, attributes)
    logger.debug("Token response has no oauth_token/oauth_token_secret pair")
    return Token(attributes=attributes)
