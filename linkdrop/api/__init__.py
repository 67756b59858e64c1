"""
LinkDrop REST API

Endpoints under /api with OpenAPI/Swagger documentation at /api/docs.
"""

from flask import Blueprint
from flask_restx import Api

from .namespaces import auth_ns, blobs_ns, files_ns, upload_ns


def create_api_blueprint() -> Blueprint:
    """
    Build the /api blueprint with its Flask-RESTX Api.

    A fresh blueprint per application keeps the app factory usable more
    than once per process.
    """
    api_bp = Blueprint("api", __name__, url_prefix="/api")

    # Initialize Flask-RESTX API with Swagger documentation
    api = Api(
        api_bp,
        version="1.0",
        title="LinkDrop API",
        description="Upload files and share them through short, expiring, optionally password-protected links",
        doc="/docs",  # Swagger UI will be available at /api/docs
    )

    api.add_namespace(upload_ns, path="/upload")
    api.add_namespace(files_ns, path="/files")
    api.add_namespace(auth_ns, path="/auth")
    api.add_namespace(blobs_ns, path="/blobs")
    return api_bp
