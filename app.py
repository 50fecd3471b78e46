"""Flask application for the feed media relay."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from flask import Flask
from flask_cors import CORS

from api_routes import register_routes
from relay import RelayService, build_service

logger = logging.getLogger("feedrelay")

PROJECT_ROOT = Path(__file__).resolve().parent
TEMPLATE_DIR = PROJECT_ROOT / "templates"


def create_app(service: Optional[RelayService] = None, start_scheduler: bool = False) -> Flask:
    """Build the Flask app around a relay service.

    Args:
        service: Pre-built service; built from the environment when omitted.
        start_scheduler: Start the background interval job (first cycle runs immediately).
    """
    service = service or build_service()

    app = Flask(__name__, template_folder=str(TEMPLATE_DIR))
    CORS(app)
    app.extensions["relay_service"] = service

    register_routes(app, service)

    if start_scheduler:
        service.scheduler.start(run_immediately=True)
        logger.info("Background processing thread initiated.")
    return app
