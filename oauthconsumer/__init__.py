import logging
import os
from enum import Enum

logging.getLogger(__name__).addHandler(logging.NullHandler())

CURRENT_VERSION = '1.0'
HMACSHA1_SIGNATURE = 'HMAC-SHA1'
OOB = 'oob'
ENCODING = 'utf-8'

OAUTH_CONSUMER_KEY = 'oauth_consumer_key'
OAUTH_TOKEN = 'oauth_token'
OAUTH_TOKEN_SECRET = 'oauth_token_secret'
OAUTH_SIGNATURE = 'oauth_signature'
OAUTH_SIGNATURE_METHOD = 'oauth_signature_method'
OAUTH_TIMESTAMP = 'oauth_timestamp'
OAUTH_NONCE = 'oauth_nonce'
OAUTH_VERSION = 'oauth_version'
OAUTH_CALLBACK = 'oauth_callback'
OAUTH_VERIFIER = 'oauth_verifier'

SUPPORTED_METHODS = ('GET', 'POST', 'PUT')


class ErrorKind(Enum):
    SIGNATURE = 'signature'
    CONFIGURATION = 'configuration'
    AUTH = 'auth'
    PARSE = 'parse'
    DECODING = 'decoding'
    TRANSPORT = 'transport'


class OAuthError(Exception):
    """
    Общая ошибка протокола. Вид ошибки хранится в kind, поэтому вызывающий код
    может либо перехватывать конкретный подкласс, либо разбирать kind.
    """
    kind = None

    def __init__(self, *args, kind: ErrorKind = None, cause: BaseException = None, status: int = None):
        if args:
            self.message = args[0]
        else:
            self.message = None
        if kind is not None:
            self.kind = kind
        self.cause = cause
        self.status = status
        super().__init__(*args)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self):
        if self.message:
            return "OAuth error: {0}".format(self.message)
        else:
            return "OAuth error: unknown"


class SignatureError(OAuthError):
    kind = ErrorKind.SIGNATURE


class ConfigurationError(OAuthError):
    kind = ErrorKind.CONFIGURATION


class AuthError(OAuthError):
    kind = ErrorKind.AUTH


class ParseError(OAuthError):
    kind = ErrorKind.PARSE


class DecodingError(OAuthError):
    kind = ErrorKind.DECODING


class TransportError(OAuthError):
    kind = ErrorKind.TRANSPORT


class OAuthConfig:
    def __init__(self, consumer_key, consumer_secret,
                 signature_method=HMACSHA1_SIGNATURE,
                 transport_name='GET'):
        if not isinstance(transport_name, str) or not transport_name:
            raise ConfigurationError(f"Transport name must be a non-empty string, got {transport_name!r}")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.signature_method = signature_method
        self.transport_name = transport_name.upper()

    @classmethod
    def from_env(cls, prefix: str = '') -> 'OAuthConfig':
        """
        Собирает конфигурацию приложения из переменных окружения
        :param prefix: префикс имён переменных, например TWITTER_
        :return: конфигурация
        """
        consumer_key = os.getenv(f"{prefix}CONSUMER_KEY")
        consumer_secret = os.getenv(f"{prefix}CONSUMER_SECRET")
        if not consumer_key or not consumer_secret:
            raise ConfigurationError(f"{prefix}CONSUMER_KEY and {prefix}CONSUMER_SECRET must be set")
        return cls(consumer_key,
                   consumer_secret,
                   os.getenv(f"{prefix}SIGNATURE_METHOD", HMACSHA1_SIGNATURE),
                   os.getenv(f"{prefix}TRANSPORT_NAME", 'GET'))

    def __repr__(self):
        return f"OAuthConfig(consumer_key={self.consumer_key!r}, signature_method={self.signature_method!r}, " \
               f"transport_name={self.transport_name!r})"
