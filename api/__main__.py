"""
Entrypoint for running the API in development: `python -m api`.
"""
import atexit
import logging
import os

from . import create_app

logger = logging.getLogger(__name__)

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()
atexit.register(app.extensions["storage"].dispose)

if __name__ == "__main__":
    # Dev-friendly defaults; in production you'd run via a WSGI server (gunicorn/uwsgi)
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", os.getenv("FLASK_RUN_PORT", "8000")))
    debug = bool(os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes"))
    logger.info("Server running on port %s (env=%s, api=%s)", port, app.config["APP_ENV"], app.config["API_VERSION"])
    app.run(host=host, port=port, debug=debug)
