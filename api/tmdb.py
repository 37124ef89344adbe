from urllib.parse import urlencode

import requests

from api._shared import (
    SETTINGS,
    ApiError,
    ErrorKind,
    Settings,
    guarded,
    json_response,
    logger,
    read_json_body,
    redact,
)


def _stringify(value) -> str:
    # Query values follow JavaScript String() so the client sees the same upstream query.
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ','.join('' if v is None else _stringify(v) for v in value)
    return str(value)


def build_query(params, api_key: str, default_language: str) -> list[tuple[str, str]]:
    """Upstream query pairs: the API key first, then the caller's params.

    ``None`` values are dropped. A falsy ``language`` counts as absent and
    is replaced by ``default_language``.
    """
    query = [('api_key', api_key)]
    has_language = False
    if isinstance(params, dict):
        for key, value in params.items():
            if value is None:
                continue
            if key == 'language':
                if not value:
                    continue
                has_language = True
            query.append((str(key), _stringify(value)))
    if not has_language:
        query.append(('language', default_language))
    return query


def build_tmdb_url(endpoint, params, settings: Settings) -> str:
    query = urlencode(build_query(params, settings.tmdb_api_key, settings.default_language))
    return f"{settings.tmdb_base_url}/{endpoint}?{query}"


def make_handler(settings: Settings, http_get=None):
    get = http_get or requests.get
    secrets = settings.secrets()

    @guarded('TMDB proxy', settings)
    def handler(request):
        body = read_json_body(request)
        endpoint = body.get('endpoint')
        if not endpoint:
            raise ApiError(ErrorKind.BAD_REQUEST, {'error': "Missing 'endpoint' parameter"})
        if not settings.tmdb_api_key:
            logger.warning("TMDB proxy: TMDB_API_KEY is not set")
            raise ApiError(ErrorKind.INTERNAL, {
                'error': 'Internal server error',
                'message': 'TMDB API key is not configured',
            })

        url = build_tmdb_url(endpoint, body.get('params'), settings)
        kwargs = {} if settings.tmdb_timeout is None else {'timeout': settings.tmdb_timeout}
        resp = get(url, **kwargs)
        logger.info("TMDB %s -> %s", endpoint, resp.status_code)

        if not 200 <= resp.status_code < 300:
            error_text = redact(resp.text, secrets)
            logger.warning("TMDB API error: %s %s", resp.status_code, error_text[:200])
            raise ApiError(ErrorKind.UPSTREAM, {
                'error': 'TMDB API error',
                'status': resp.status_code,
                'message': error_text,
            }, status=resp.status_code)

        return json_response(resp.json(), 200)

    return handler


handler = make_handler(SETTINGS)
