"""API routes for the feed media relay."""
from __future__ import annotations

import logging

from flask import jsonify, render_template

from app_utils import get_current_timestamp

logger = logging.getLogger("feedrelay")


def register_routes(app, service):
    """Register all routes with the Flask app.
    
    Args:
        app: Flask app instance.
        service: RelayService exposing the cycle trigger and the store read API.
    """

    @app.context_processor
    def inject_globals():
        """Inject global variables into templates."""
        return {"build_time": get_current_timestamp()}

    @app.route("/")
    def index():
        """Dashboard page, newest items first."""
        try:
            items, item_count = service.load_items_newest_first()
            return render_template("index.html", items=items, item_count=item_count)
        except Exception as exc:
            logger.error("Critical error in '/' route handler: %s", exc, exc_info=True)
            return "Error loading data.", 500

    @app.route("/process", methods=["POST"])
    def process():
        """Run one processing cycle on demand."""
        logger.info("Manual processing request received via /process endpoint...")
        result = service.run_cycle()
        payload = result.to_dict()
        if result.in_progress:
            return jsonify(payload), 409
        if result.success:
            return jsonify(payload), 200
        return jsonify(payload), 500

    @app.route("/data")
    def data():
        """Full store contents in insertion order."""
        try:
            items = service.load_items()
            return jsonify([item.model_dump(mode="json") for item in items])
        except Exception as exc:
            logger.error("Failed to load data for /data: %s", exc, exc_info=True)
            return jsonify({"error": "Failed to load data."}), 500

    @app.route("/api/items")
    def api_items():
        """Store contents newest first, with a count."""
        try:
            items, item_count = service.load_items_newest_first()
            return jsonify(
                {
                    "items": [item.model_dump(mode="json") for item in items],
                    "item_count": item_count,
                }
            )
        except Exception as exc:
            logger.error("Failed to load data for /api/items: %s", exc, exc_info=True)
            return jsonify({"error": "Failed to load data."}), 500

    @app.route("/api/status")
    def api_status():
        """Cycle state, per-source health and non-secret config."""
        try:
            return jsonify(service.status())
        except Exception as exc:
            logger.error("Status check failed: %s", exc, exc_info=True)
            return jsonify({"status": "error", "error": "Failed to build status", "timestamp": get_current_timestamp()}), 500
