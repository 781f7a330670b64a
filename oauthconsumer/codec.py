import re

from oauthconsumer import ENCODING, DecodingError

_UNRESERVED = frozenset('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._~'.encode(ENCODING))
_BAD_ESCAPE = re.compile(r'%(?![0-9A-Fa-f]{2})')
_ESCAPE = re.compile(rb'%([0-9A-Fa-f]{2})')


def percent_encode(value) -> str:
    """
    Кодирование по RFC 3986: незарезервированные символы остаются как есть,
    каждый остальной байт UTF-8 превращается в %XX
    """
    if value is None:
        return ''
    if not isinstance(value, str):
        value = str(value)
    result = []
    for char in value.encode(ENCODING):
        result.append(chr(char) if char in _UNRESERVED else '%{:02X}'.format(char))
    return ''.join(result)


def percent_decode(value: str) -> str:
    if value is None:
        return ''
    match = _BAD_ESCAPE.search(value)
    if match:
        position = match.start()
        raise DecodingError(f"malformed percent escape at position {position}: {value[position:position + 3]!r}")
    # '+' пришёл из form-urlencoded тела, закодированный плюс всегда выглядит как %2B
    raw = value.replace('+', ' ').encode(ENCODING)
    raw = _ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), raw)
    try:
        return raw.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise DecodingError(f"percent-decoded value is not valid {ENCODING}", cause=e) from e


def build_param_string(params: dict) -> str:
    """
    Нормализованная строка параметров: пары name=value, закодированные и
    отсортированные по имени, затем по значению
    :param params: параметры запроса
    :return: строка вида a=1&b=2
    """
    normalized_params = []
    for k, v in params.items():
        normalized_params.append((percent_encode(k), percent_encode(v)))
    normalized_params.sort()
    return '&'.join("{}={}".format(k, v) for k, v in normalized_params)


def parse_param_string(query: str) -> dict:
    params = {}
    if not query:
        return params
    for pair in query.split('&'):
        if not pair:
            continue
        name, sep, value = pair.partition('=')
        params[percent_decode(name)] = percent_decode(value) if sep else ''
    return params
