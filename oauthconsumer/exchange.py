import logging
from enum import Enum

from oauthconsumer import (OAUTH_CALLBACK, OAUTH_TOKEN, OOB, AuthError, ConfigurationError, OAuthConfig,
                           TransportError)
from oauthconsumer.codec import percent_encode
from oauthconsumer.oauth import RequestSigner
from oauthconsumer.token import Token, parse_token_response


class HandshakeState(Enum):
    INIT = 'init'
    REQUEST_TOKEN_OBTAINED = 'request_token_obtained'
    USER_AUTHORIZED = 'user_authorized'
    ACCESS_TOKEN_OBTAINED = 'access_token_obtained'
    REQUEST_TOKEN_FAILED = 'request_token_failed'
    ACCESS_TOKEN_FAILED = 'access_token_failed'


class TokenExchange:
    """
    Двухшаговый обмен токенами OAuth 1.0a:
    request token -> авторизация пользователем на стороне провайдера -> access token
    """

    def __init__(self, config: OAuthConfig, transport, signer: RequestSigner = None, logger: logging.Logger = None):
        self.config = config
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.signer = signer or RequestSigner(config, logger=self.logger)
        self.state = HandshakeState.INIT

    def request_token(self, request_token_url: str, callback_url: str) -> Token:
        """
        Получение request token
        :param request_token_url: адрес выдачи request token
        :param callback_url: адрес, на который провайдер вернёт пользователя (или oob)
        :return: токен; если в ответе нет ключа или секрета, токен неполный (is_complete == False)
        """
        if not request_token_url or not callback_url:
            self.state = HandshakeState.REQUEST_TOKEN_FAILED
            raise ConfigurationError("Request token URL and callback URL must not be empty")
        request = self.signer.prepare(self.config.transport_name,
                                      request_token_url,
                                      {OAUTH_CALLBACK: callback_url})
        self.logger.debug(f"URL to get Request Token: {request.url}")
        try:
            response = self.transport.send(request.query_url(), request.http_method)
        except TransportError:
            self.state = HandshakeState.REQUEST_TOKEN_FAILED
            raise
        if response.status != 200:
            self.state = HandshakeState.REQUEST_TOKEN_FAILED
            self.logger.error(f"Error while fetching Request Token. Code: {response.status}")
            raise ConfigurationError("Application keys are not correct. The server running the application "
                                     "should be same that was registered to get the keys.",
                                     status=response.status)
        token = parse_token_response(response.body)
        if token.is_complete:
            self.state = HandshakeState.REQUEST_TOKEN_OBTAINED
        else:
            self.state = HandshakeState.REQUEST_TOKEN_FAILED
            self.logger.warning("Request token response has no oauth_token/oauth_token_secret")
        return token

    @staticmethod
    def build_authorize_url(auth_url: str, token: Token, callback_url: str = None) -> str:
        separator = '&' if '?' in auth_url else '?'
        callback = percent_encode(callback_url) if callback_url is not None else OOB
        return f"{auth_url}{separator}{OAUTH_TOKEN}={percent_encode(token.key)}&{OAUTH_CALLBACK}={callback}"

    def access_token(self, access_token_url: str, request_token: Token) -> Token:
        """
        Обмен авторизованного request token на access token.
        oauth_verifier из атрибутов request token передаётся провайдеру
        :param access_token_url: адрес выдачи access token
        :param request_token: request token, подписанный пользователем
        :return: access token
        """
        if not access_token_url:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            raise AuthError("Access Token URL is null")
        if request_token is None:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            raise AuthError("Request Token is null")
        if not request_token.key:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            raise AuthError("Key in Request Token is null or blank")
        self.state = HandshakeState.USER_AUTHORIZED
        request = self.signer.prepare(self.config.transport_name, access_token_url, token=request_token)
        self.logger.debug(f"Access Token URL: {request.url}")
        try:
            response = self.transport.send(request.query_url(), request.http_method)
        except TransportError as e:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            self.logger.error("Error while getting Access Token")
            raise AuthError("Error while getting Access Token", cause=e) from e
        if response.status != 200:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            raise AuthError(f"Unable to retrieve the access token. Status: {response.status}",
                            status=response.status)
        token = parse_token_response(response.body)
        if token.is_complete:
            self.state = HandshakeState.ACCESS_TOKEN_OBTAINED
            self.logger.info(f"Access token {token.key[:6]}**** obtained")
        else:
            self.state = HandshakeState.ACCESS_TOKEN_FAILED
            self.logger.warning("Access token response has no oauth_token/oauth_token_secret")
        return token
