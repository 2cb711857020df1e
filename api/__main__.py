"""
Entrypoint for running the API in development:  python -m api
In production run create_app() under a WSGI server (gunicorn/uwsgi).
"""
import os
from . import create_app

# APP_ENV selects the configuration class (handled in get_config())
app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("PORT", os.getenv("FLASK_RUN_PORT", "3000")))
    debug = os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes")
    app.logger.info("Portfolio API on http://%s:%s (docs at /apidocs/)", host, port)
    app.run(host=host, port=port, debug=debug)
