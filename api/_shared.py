import enum
import functools
import hmac
import json
import logging
import os
import traceback
from dataclasses import dataclass

logger = logging.getLogger("api")
logger.setLevel(logging.INFO)

DEFAULT_TMDB_BASE_URL = 'https://api.themoviedb.org/3'
DEFAULT_LANGUAGE = 'en-US'
DEFAULT_GUEST_ACCESS_CODE = 'DemoVault_73Z!PR'

POST_METHODS = ('POST', 'OPTIONS')
GET_METHODS = ('GET', 'OPTIONS')

REDACTED = '***'


@dataclass(frozen=True)
class Settings:
    """Server-held secrets and upstream options, read once at process start."""

    tmdb_api_key: str | None = None
    tmdb_base_url: str = DEFAULT_TMDB_BASE_URL
    default_language: str = DEFAULT_LANGUAGE
    tmdb_timeout: float | None = None
    guest_access_code: str | None = DEFAULT_GUEST_ACCESS_CODE
    secret_code: str | None = None

    def secrets(self) -> list[str]:
        return [s for s in (self.tmdb_api_key, self.guest_access_code, self.secret_code) if s]


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ

    def get(name, default=None):
        return (env.get(name) or '').strip() or default

    timeout = get('TMDB_TIMEOUT')
    return Settings(
        tmdb_api_key=get('TMDB_API_KEY'),
        tmdb_base_url=get('TMDB_BASE_URL', DEFAULT_TMDB_BASE_URL).rstrip('/'),
        default_language=get('TMDB_DEFAULT_LANGUAGE', DEFAULT_LANGUAGE),
        tmdb_timeout=float(timeout) if timeout else None,
        guest_access_code=get('GUEST_ACCESS_CODE', DEFAULT_GUEST_ACCESS_CODE),
        secret_code=get('SECRET_CODE'),
    )


# Loaded once per process; the serverless handlers and the WSGI app share it.
SETTINGS = load_settings()


def cors_headers(methods=POST_METHODS) -> dict:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(methods),
        "Access-Control-Allow-Headers": "Content-Type",
    }


def json_response(data, status: int = 200, methods=POST_METHODS, extra_headers: dict | None = None):
    body = json.dumps(data, ensure_ascii=False)
    try:
        body = body.encode('utf-8')
    except UnicodeEncodeError:
        # lone surrogates only survive as \u escapes
        body = json.dumps(data).encode('utf-8')
    headers = {
        "Content-Type": "application/json; charset=utf-8",
        **cors_headers(methods),
        "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    }
    if extra_headers:
        headers.update(extra_headers)
    return (body, status, headers)


def empty_response(status: int = 204, methods=POST_METHODS):
    return ('', status, cors_headers(methods))


class ErrorKind(enum.Enum):
    BAD_REQUEST = 400
    METHOD_NOT_ALLOWED = 405
    UPSTREAM = None
    INTERNAL = 500


class ApiError(Exception):
    """A failure that already knows its response body.

    UPSTREAM errors carry the upstream status; every other kind maps to
    a fixed status.
    """

    def __init__(self, kind: ErrorKind, body: dict, status: int | None = None):
        super().__init__(body.get('error', kind.name))
        self.kind = kind
        self.body = body
        self.status = status if status is not None else kind.value
        if self.status is None:
            raise ValueError('upstream errors need an explicit status')


def redact(text: str, secrets) -> str:
    out = str(text)
    # longest first so a secret containing another is hidden whole
    for secret in sorted(secrets, key=len, reverse=True):
        if secret:
            out = out.replace(secret, REDACTED)
    return out


def read_json_body(request) -> dict:
    """Parse the request body as a JSON object.

    An empty body or a JSON value that is not an object reads as ``{}``;
    bytes that are not JSON raise ``ValueError``.
    """
    raw = request.get_data(cache=True)
    if not raw or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ValueError(f'Request body is not valid JSON: {e}') from None
    return data if isinstance(data, dict) else {}


def gate(request, methods=POST_METHODS):
    """Preflight and method check shared by every handler.

    Returns a finished response tuple, or None when the request may proceed.
    """
    if request.method == 'OPTIONS':
        return empty_response(204, methods)
    if request.method not in methods:
        return json_response({'error': 'Method not allowed'}, ErrorKind.METHOD_NOT_ALLOWED.value, methods)
    return None


def guarded(name: str, settings: Settings, methods=POST_METHODS, internal_extra: dict | None = None):
    """Wrap a handler body so every failure ends up as a JSON response."""

    def decorate(fn):
        @functools.wraps(fn)
        def handler(request):
            early = gate(request, methods)
            if early is not None:
                return early
            try:
                return fn(request)
            except ApiError as e:
                return json_response(e.body, e.status, methods)
            except Exception as e:  # noqa: BLE001
                message = redact(e, settings.secrets())
                logger.error("%s error: %s\n%s", name, message,
                             redact(traceback.format_exc(), settings.secrets()))
                body = dict(internal_extra or {})
                body.update({'error': 'Internal server error', 'message': message})
                return json_response(body, 500, methods)

        return handler

    return decorate


def secret_matches(candidate: str, secret: str | None) -> bool:
    if not secret:
        return False
    return hmac.compare_digest(candidate.encode('utf-8', 'surrogatepass'),
                               secret.encode('utf-8', 'surrogatepass'))


def make_code_validator(name: str, secret: str | None, invalid_message: str, settings: Settings):
    """Build a POST handler that checks ``{"code": ...}`` against one secret."""

    if not secret:
        logger.warning("%s: no code configured, every submission will be rejected", name)

    @guarded(name, settings, POST_METHODS, internal_extra={'valid': False})
    def handler(request):
        code = read_json_body(request).get('code')
        if not code or not isinstance(code, str):
            raise ApiError(ErrorKind.BAD_REQUEST, {'valid': False, 'error': 'Invalid code format'})
        is_valid = secret_matches(code, secret)
        return json_response({
            'valid': is_valid,
            'message': 'Valid code' if is_valid else invalid_message,
        }, 200)

    return handler
