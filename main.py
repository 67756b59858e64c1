"""
main.py

Flask backend for LinkDrop: upload a file, get a short expiring link.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, redis, celery, PyJWT,
    google-cloud-storage (when STORAGE_BACKEND=gcs)
  - Infrastructure: Redis server

Notes:
  - API endpoints available at /api/ with Swagger docs at /api/docs
  - Short links are served at /s/<short_id>
  - Uses application factory pattern for better testability
"""

import os

from app_factory import create_app

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    app.run(host=host, port=port, debug=debug)
