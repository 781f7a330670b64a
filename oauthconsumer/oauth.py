import base64
import hmac
import logging
import time
import uuid
from hashlib import sha1
from urllib.parse import urlsplit, urlunsplit

from oauthconsumer import (CURRENT_VERSION, ENCODING, HMACSHA1_SIGNATURE, OAUTH_CONSUMER_KEY, OAUTH_NONCE,
                           OAUTH_SIGNATURE, OAUTH_SIGNATURE_METHOD, OAUTH_TIMESTAMP, OAUTH_TOKEN, OAUTH_VERIFIER,
                           OAUTH_VERSION, SUPPORTED_METHODS, OAuthConfig, SignatureError)
from oauthconsumer.codec import build_param_string, parse_param_string, percent_encode

logger = logging.getLogger(__name__)

REQUIRED_HEADER_PARAMS = (OAUTH_CONSUMER_KEY, OAUTH_NONCE, OAUTH_TIMESTAMP, OAUTH_SIGNATURE_METHOD)
OPTIONAL_HEADER_PARAMS = (OAUTH_VERSION, OAUTH_TOKEN, OAUTH_SIGNATURE)

_DEFAULT_PORTS = {'http': 80, 'https': 443}


def normalize_url(url: str) -> str:
    """
    Базовый URI для строки подписи: схема и хост в нижнем регистре,
    без порта по умолчанию, без query и fragment
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    host, sep, port = netloc.rpartition(':')
    if sep and port.isdigit() and _DEFAULT_PORTS.get(scheme) == int(port):
        netloc = host
    return urlunsplit((scheme, netloc, parts.path or '/', '', ''))


def split_url(url: str) -> tuple:
    """
    Отделяет query от URL
    :return: кортеж из URL без query и декодированных параметров query
    """
    base, sep, query = url.partition('?')
    query = query.split('#', 1)[0]
    return base.split('#', 1)[0], parse_param_string(query) if sep else {}


def signature_base_string(http_method: str, url: str, request_params: dict) -> str:
    params = {k: v for k, v in request_params.items() if k != OAUTH_SIGNATURE}
    return '&'.join([percent_encode(http_method.upper()),
                     percent_encode(normalize_url(url)),
                     percent_encode(build_param_string(params))])


def calc_signature(http_method: str, url: str, request_params: dict, consumer_secret: str, token_secret: str) -> str:
    signature_base = signature_base_string(http_method, url, request_params)
    signature_key = '&'.join([percent_encode(consumer_secret), percent_encode(token_secret or '')])
    hashed = hmac.new(signature_key.encode(ENCODING), signature_base.encode(ENCODING), sha1)
    return base64.b64encode(hashed.digest()).decode('ascii')


def build_auth_header(params: dict) -> str:
    """
    Значение заголовка Authorization. Обязательные параметры идут первыми,
    затем версия, токен и подпись, если они есть
    :param params: параметры OAuth с подписью
    :return: строка вида OAuth oauth_consumer_key="...",...
    """
    missing = [name for name in REQUIRED_HEADER_PARAMS if params.get(name) is None]
    if missing:
        raise ValueError(f"Missing required OAuth parameters: {', '.join(missing)}")
    names = list(REQUIRED_HEADER_PARAMS) + [name for name in OPTIONAL_HEADER_PARAMS if params.get(name) is not None]
    header = 'OAuth ' + ','.join('{}="{}"'.format(name, percent_encode(params[name])) for name in names)
    logger.debug(f"Authorization header with fields: {', '.join(names)}")
    return header


class SignatureEngine:
    def __init__(self, config: OAuthConfig, logger: logging.Logger = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def sign(self, http_method: str, url: str, request_params: dict, token=None) -> str:
        if self.config.signature_method != HMACSHA1_SIGNATURE:
            raise SignatureError(f"Signature type not implemented: {self.config.signature_method}")
        if not self.config.consumer_secret:
            raise SignatureError("Missing consumer secret")
        method = (http_method or '').upper()
        if method not in SUPPORTED_METHODS:
            raise SignatureError(f"Invalid method type: {http_method}")
        if not url:
            raise SignatureError("Invalid url")
        token_secret = token.secret if token is not None else None
        try:
            signature = calc_signature(method, url, request_params, self.config.consumer_secret, token_secret)
        except (TypeError, ValueError) as e:
            raise SignatureError(f"Unable to generate {HMACSHA1_SIGNATURE}", cause=e) from e
        self.logger.debug(f"{HMACSHA1_SIGNATURE} signature computed for {method} {normalize_url(url)}")
        return signature


class SignedRequest:
    """
    Подписанный запрос: URL без query и полный набор параметров вместе с oauth_signature
    """

    def __init__(self, http_method: str, url: str, request_params: dict):
        self.http_method = http_method
        self.url = url
        self.request_params = request_params

    @property
    def signature(self) -> str:
        return self.request_params[OAUTH_SIGNATURE]

    def authorization_header(self) -> str:
        return build_auth_header(self.request_params)

    def query_string(self) -> str:
        return build_param_string(self.request_params)

    def query_url(self) -> str:
        return f"{self.url}?{self.query_string()}"


class RequestSigner:
    def __init__(self, config: OAuthConfig, engine: SignatureEngine = None, clock=time.time,
                 nonce_factory=None, logger: logging.Logger = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.engine = engine or SignatureEngine(config, self.logger)
        self.clock = clock
        self.nonce_factory = nonce_factory or (lambda: uuid.uuid4().hex)

    def oauth_params(self, token=None) -> dict:
        request_params = {
            OAUTH_CONSUMER_KEY: self.config.consumer_key,
            OAUTH_SIGNATURE_METHOD: self.config.signature_method,
            OAUTH_VERSION: CURRENT_VERSION,
            OAUTH_TIMESTAMP: str(int(self.clock())),
            OAUTH_NONCE: self.nonce_factory(),
        }
        if token is not None:
            if token.key:
                request_params[OAUTH_TOKEN] = token.key
            if token.verifier is not None:
                request_params[OAUTH_VERIFIER] = token.verifier
        return request_params

    def prepare(self, http_method: str, url: str, request_params: dict = None, token=None) -> SignedRequest:
        """
        Собирает параметры запроса и подписывает их
        :param http_method: GET, POST или PUT
        :param url: адрес запроса, параметры из его query тоже попадают в подпись
        :param request_params: дополнительные параметры запроса
        :param token: токен, которым подписывается запрос (None для request token)
        :return: подписанный запрос
        """
        base_url, params = split_url(url)
        if request_params:
            params.update(request_params)
        params.pop(OAUTH_SIGNATURE, None)
        params.update(self.oauth_params(token))
        params[OAUTH_SIGNATURE] = self.engine.sign(http_method, base_url, params, token)
        return SignedRequest(http_method.upper(), base_url, params)
