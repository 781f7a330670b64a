import logging

from oauthconsumer import AuthError, OAuthConfig
from oauthconsumer.codec import build_param_string
from oauthconsumer.oauth import OPTIONAL_HEADER_PARAMS, REQUIRED_HEADER_PARAMS, RequestSigner, split_url
from oauthconsumer.token import Token
from oauthconsumer.transport import Response

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
HEADER_PARAMS = frozenset(REQUIRED_HEADER_PARAMS + OPTIONAL_HEADER_PARAMS)


class AuthenticatedRequest:
    def __init__(self, config: OAuthConfig, transport, signer: RequestSigner = None, logger: logging.Logger = None):
        self.config = config
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.signer = signer or RequestSigner(config, logger=self.logger)

    def get(self, url: str, params: dict = None, headers: dict = None, body=None, token: Token = None,
            header_auth_required: bool = True) -> Response:
        return self.send('GET', url, params, headers, body, token, header_auth_required)

    def post(self, url: str, params: dict = None, headers: dict = None, body=None, token: Token = None,
             header_auth_required: bool = True) -> Response:
        return self.send('POST', url, params, headers, body, token, header_auth_required)

    def put(self, url: str, params: dict = None, headers: dict = None, body=None, token: Token = None,
            header_auth_required: bool = True) -> Response:
        return self.send('PUT', url, params, headers, body, token, header_auth_required)

    def send(self,
             http_method: str,
             url: str,
             params: dict = None,
             headers: dict = None,
             body=None,
             token: Token = None,
             header_auth_required: bool = True) -> Response:
        """
        Подписанный запрос к ресурсу провайдера после получения access token
        :param http_method: GET, POST или PUT
        :param url: адрес ресурса, может содержать query
        :param params: дополнительные параметры, которые войдут в подпись
        :param headers: дополнительные заголовки
        :param body: тело запроса
        :param token: access token
        :param header_auth_required: передавать параметры OAuth в заголовке Authorization,
                                     иначе все параметры добавляются в query
        :return: ответ транспорта как есть
        """
        if token is None or not token.key:
            raise AuthError("Token with a key is required for signed requests")
        request = self.signer.prepare(http_method, url, params, token)
        request_headers = {k: v for k, v in (headers or {}).items() if k.lower() != 'authorization'}
        if header_auth_required:
            request_headers['Authorization'] = request.authorization_header()
            # всё, что подписано, но не попало в заголовок, уходит в query или в тело
            unsent_params = {k: v for k, v in request.request_params.items() if k not in HEADER_PARAMS}
            url_params = split_url(url)[1]
            form_params = {k: v for k, v in unsent_params.items() if k not in url_params}
            if form_params and request.http_method != 'GET' and body is None:
                body = build_param_string(form_params)
                if not any(k.lower() == 'content-type' for k in request_headers):
                    request_headers['Content-Type'] = FORM_CONTENT_TYPE
                query_params = {k: v for k, v in unsent_params.items() if k in url_params}
            else:
                query_params = unsent_params
            request_url = request.url
            if query_params:
                request_url = f"{request.url}?{build_param_string(query_params)}"
        else:
            request_url = request.query_url()
        self.logger.debug(f"Signed {request.http_method} request to {request.url}")
        return self.transport.send(request_url, request.http_method, body, request_headers)
