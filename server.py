import logging
import os

from flask import Flask, send_from_directory

from api.index import create_app

STATIC_DIR = os.environ.get("STATIC_DIR", "public")


def build_app(static_dir: str | None = STATIC_DIR) -> Flask:
    """The API app plus, when the folder exists, the static client."""
    app = create_app()
    if static_dir and os.path.isdir(static_dir):
        root = os.path.abspath(static_dir)

        @app.route("/")
        def index():
            return send_from_directory(root, "index.html")

        @app.route("/<path:filename>")
        def static_files(filename: str):
            return send_from_directory(root, filename)

    return app


def main() -> None:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    port = int(os.environ.get("PORT", "8000"))
    build_app().run(host="0.0.0.0", port=port, debug=False)


if __name__ == "__main__":
    main()
