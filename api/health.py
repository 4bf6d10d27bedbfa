from flask import Blueprint

from services import get_services

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
            version:
              type: string
              example: 1.0.0
            discogs_configured:
              type: boolean
    """
    return {
        "status": "ok",
        "version": "1.0.0",
        "discogs_configured": get_services().discogs.client.configured,
    }, 200
