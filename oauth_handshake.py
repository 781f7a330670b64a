import logging
import os
import sys

from oauthconsumer import OOB, ConfigurationError, OAuthConfig, OAuthError
from oauthconsumer.exchange import TokenExchange
from oauthconsumer.transport import RequestsTransport

logger = logging.getLogger(__name__)


def read_verifier(prompt='Verifier: ') -> str:
    """
    Пользователь открывает ссылку авторизации, подтверждает доступ и вводит полученный verifier
    """
    return input(prompt).strip()


def read_timeout(default: float = 30) -> float:
    value = os.getenv("HTTP_TIMEOUT")
    if value is None:
        return default
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f"HTTP_TIMEOUT must be a number of seconds, got {value!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"HTTP_TIMEOUT must be positive, got {value!r}")
    return timeout


def configure_logging():
    handlers = [logging.StreamHandler()]
    log_file = os.getenv("LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        handlers=handlers)


def main() -> int:
    request_token_url = os.getenv("REQUEST_TOKEN_URL")
    authorize_url = os.getenv("AUTHORIZE_URL")
    access_token_url = os.getenv("ACCESS_TOKEN_URL")
    callback_url = os.getenv("CALLBACK_URL", OOB)
    if not request_token_url or not authorize_url or not access_token_url:
        logger.error("REQUEST_TOKEN_URL, AUTHORIZE_URL and ACCESS_TOKEN_URL must be set")
        return 1

    try:
        config = OAuthConfig.from_env()
        transport = RequestsTransport(timeout=read_timeout())
        exchange = TokenExchange(config, transport)

        request_token = exchange.request_token(request_token_url, callback_url)
        if not request_token.is_complete:
            logger.error("Provider did not return a request token")
            return 1
        logger.debug(f"Request token: {request_token.key[:6]}****")

        # в режиме oob провайдер показывает verifier пользователю вместо редиректа
        print(exchange.build_authorize_url(authorize_url,
                                           request_token,
                                           None if callback_url == OOB else callback_url))
        verifier = read_verifier()
        access_token = exchange.access_token(access_token_url, request_token.with_verifier(verifier))
    except OAuthError as e:
        logger.error(f"Handshake failed ({e.kind.value}): {e}")
        return 1

    if not access_token.is_complete:
        logger.error("Provider did not return an access token")
        return 1
    print(f"oauth_token={access_token.key}")
    print(f"oauth_token_secret={access_token.secret}")
    for name, value in access_token.attributes.items():
        print(f"{name}={value}")
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
