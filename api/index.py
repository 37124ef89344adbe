from flask import Flask, request

from api import ping, tmdb, validate_guest_code, validate_secret_code
from api._shared import SETTINGS, Settings

# Every verb reaches the handler so the handler owns its 204/405 answers.
ALL_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def _bind(handler):
    def view():
        return handler(request)
    return view


def create_app(settings: Settings | None = None, http_get=None) -> Flask:
    """WSGI Flask app exposing ONLY the API routes (no static serving).

    Without arguments the app serves the per-route module handlers, which
    share the process settings; passing ``settings`` or ``http_get`` builds
    fresh handlers around them.
    """
    app = Flask(__name__)

    if settings is None and http_get is None:
        routes = {
            '/api/tmdb': tmdb.handler,
            '/api/validate-guest-code': validate_guest_code.handler,
            '/api/validate-secret-code': validate_secret_code.handler,
            '/api/ping': ping.handler,
        }
    else:
        settings = settings or SETTINGS
        routes = {
            '/api/tmdb': tmdb.make_handler(settings, http_get=http_get),
            '/api/validate-guest-code': validate_guest_code.make_handler(settings),
            '/api/validate-secret-code': validate_secret_code.make_handler(settings),
            '/api/ping': ping.make_handler(settings),
        }
    for path, handler in routes.items():
        endpoint = path.rsplit('/', 1)[-1]
        app.add_url_rule(path, endpoint, _bind(handler), methods=ALL_METHODS,
                         provide_automatic_options=False)
    return app


# Vercel: export a WSGI Flask app named `app`
app = create_app()
