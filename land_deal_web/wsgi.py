"""WSGI entry point, e.g. ``gunicorn land_deal_web.wsgi:app``."""
import logging

from land_deal_web.app import create_app

try:
    app = create_app()
except Exception:
    logging.getLogger(__name__).exception("Failed to start the land deal web app")
    raise
