"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import Model, fields, reqparse
from werkzeug.datastructures import FileStorage


# =============================================================================
# Request Models
# =============================================================================

upload_parser = reqparse.RequestParser()
upload_parser.add_argument(
    "file", type=FileStorage, location="files", required=True, help="File to share"
)
upload_parser.add_argument(
    "password", type=str, location="form", required=False,
    help="Optional password required to download",
)
upload_parser.add_argument(
    "expiresInHours", type=str, location="form", required=False,
    help="Optional lifetime in hours",
)
upload_parser.add_argument(
    "downloadLimit", type=str, location="form", required=False,
    help="Optional maximum number of downloads",
)
upload_parser.add_argument(
    "guestId", type=str, location="form", required=False,
    help="Guest identifier when not logged in",
)

download_request = Model(
    "DownloadRequest",
    {
        "password": fields.String(
            required=False, description="Password for protected files", example="secret1!"
        ),
    },
)

credentials_request = Model(
    "CredentialsRequest",
    {
        "email": fields.String(required=True, example="alice@example.com"),
        "password": fields.String(required=True, description="At least 8 characters"),
    },
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = Model(
    "UploadResponse",
    {
        "success": fields.Boolean(example=True),
        "link": fields.String(description="Short link", example="https://api.example.com/s/Ab3dE6gH"),
        "fileId": fields.String(description="Artifact identifier"),
    },
)

metadata_response = Model(
    "FileMetadata",
    {
        "id": fields.String(description="Artifact identifier"),
        "name": fields.String(description="Original filename"),
        "size": fields.Integer(description="Size in bytes"),
        "hasPassword": fields.Boolean(description="Whether a password is required"),
    },
)

download_response = Model(
    "DownloadGrant",
    {
        "url": fields.String(description="Short-lived retrieval URL"),
        "name": fields.String(description="Original filename"),
    },
)

file_summary = Model(
    "FileSummary",
    {
        "id": fields.String(),
        "name": fields.String(),
        "size": fields.Integer(),
        "hasPassword": fields.Boolean(),
        "createdAt": fields.String(description="ISO 8601 timestamp"),
        "expiresAt": fields.String(allow_null=True),
        "downloadLimit": fields.Integer(allow_null=True),
        "downloadCount": fields.Integer(),
        "expired": fields.Boolean(),
    },
)

file_list_response = Model(
    "FileList",
    {"files": fields.List(fields.Nested(file_summary))},
)

session_response = Model(
    "Session",
    {
        "id": fields.String(description="Account identifier"),
        "email": fields.String(),
        "token": fields.String(description="Session token (also set as a cookie)"),
    },
)

whoami_response = Model(
    "Identity",
    {
        "ownerId": fields.String(example="guest:visitor-1234"),
        "isGuest": fields.Boolean(),
        "accountId": fields.String(allow_null=True),
        "email": fields.String(allow_null=True),
    },
)

error_response = Model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "message": fields.String(description="User-facing error message"),
    },
)

ALL_MODELS = (
    download_request,
    credentials_request,
    upload_response,
    metadata_response,
    download_response,
    file_summary,
    file_list_response,
    session_response,
    whoami_response,
    error_response,
)


def register_models(namespace):
    """Attach the shared models so every Api the namespace joins can document them."""
    for model in ALL_MODELS:
        namespace.add_model(model.name, model)
    return namespace
