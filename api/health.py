from datetime import datetime, timezone

from flask import Blueprint, current_app

from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            db:
              type: string
              example: connected
    """
    return {
        "status": "ok",
        "db": "connected" if storage.ping() else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": current_app.config.get("APP_ENV"),
    }, 200
