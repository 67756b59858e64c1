"""
API Namespaces - Organized endpoint groups
"""

import posixpath

from flask import current_app, make_response, request, send_file
from flask_restx import Namespace, Resource
from werkzeug.exceptions import RequestEntityTooLarge

from linkdrop.api.models import (
    credentials_request,
    download_request,
    download_response,
    error_response,
    file_list_response,
    metadata_response,
    register_models,
    session_response,
    upload_parser,
    upload_response,
    whoami_response,
)
from linkdrop.application import (
    SESSION_COOKIE_NAME,
    ArtifactService,
    AuthService,
    DownloadRequest,
    IdentityResolver,
    UploadRequest,
    UploadService,
)
from linkdrop.domain.blob_storage import IBlobStorage, SignedUrlService
from linkdrop.domain.errors import (
    STATUS_CODES,
    DomainError,
    ErrorCategory,
    categorize_domain_error,
    create_error_response,
)

_SERVER_SIDE = {
    ErrorCategory.STORAGE_ERROR,
    ErrorCategory.PERSISTENCE_ERROR,
    ErrorCategory.SYSTEM_ERROR,
}


def _resolve(service_type):
    return current_app.container.resolve(service_type)


def _current_identity():
    return _resolve(IdentityResolver).resolve_request(request)


def _domain_error_response(error: DomainError, where: str, server_category=None):
    """Map a domain error onto its response, logging server-side failures."""
    category = categorize_domain_error(error)
    if category in _SERVER_SIDE:
        current_app.logger.error(f"{type(error).__name__} in {where}: {error}")
        category = server_category or category
    return create_error_response(category, str(error), status_code=STATUS_CODES[category])


def _unexpected_error_response(error: Exception, where: str, category=ErrorCategory.SYSTEM_ERROR):
    current_app.logger.exception(f"Unexpected error in {where}: {str(error)}")
    return create_error_response(category, f"Unexpected error: {str(error)}", status_code=500)


def _with_session_cookie(payload, status, token):
    response = make_response(payload, status)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(current_app.config["SESSION_TTL_HOURS"] * 3600),
        httponly=True,
        secure=current_app.config["SESSION_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


# =============================================================================
# Upload Namespace - File uploads
# =============================================================================

upload_ns = register_models(Namespace("upload", description="File upload operations"))


@upload_ns.route("")
class Upload(Resource):
    """Upload a file and receive a short link"""

    @upload_ns.doc("upload_file")
    @upload_ns.expect(upload_parser)
    @upload_ns.response(200, "Success", upload_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(413, "File Too Large", error_response)
    @upload_ns.response(500, "Upload Failed", error_response)
    def post(self):
        """
        Upload a file

        Accepts multipart form data. Returns a short link to the file's
        download page. A session or guest id makes the upload show up in
        that caller's file list; anonymous uploads are allowed.
        """
        try:
            identity = _current_identity()
            owner_id = identity.owner_id if identity is not None else None

            uploaded = request.files.get("file")
            upload_request = UploadRequest.build(
                stream=uploaded.stream if uploaded else None,
                filename=uploaded.filename if uploaded else None,
                content_type=uploaded.mimetype if uploaded else None,
                password=request.form.get("password"),
                expires_in_hours=request.form.get("expiresInHours"),
                download_limit=request.form.get("downloadLimit"),
            )

            result = _resolve(UploadService).upload(upload_request, owner_id)
            return result.to_dict(), 200

        except RequestEntityTooLarge as e:
            return create_error_response(ErrorCategory.FILE_TOO_LARGE, str(e), status_code=413)
        except DomainError as e:
            return _domain_error_response(e, "/upload", server_category=ErrorCategory.UPLOAD_FAILED)
        except Exception as e:
            return _unexpected_error_response(e, "/upload", category=ErrorCategory.UPLOAD_FAILED)


# =============================================================================
# Files Namespace - Metadata, downloads and owner operations
# =============================================================================

files_ns = register_models(Namespace("files", description="Shared file operations"))


@files_ns.route("")
class FileList(Resource):
    """Files owned by the caller"""

    @files_ns.doc("list_files")
    @files_ns.response(200, "Success", file_list_response)
    @files_ns.response(401, "No identity", error_response)
    def get(self):
        """
        List the caller's files, newest first

        Identified by session token or guest id.
        """
        try:
            identity = _current_identity()
            if identity is None:
                return create_error_response(
                    ErrorCategory.UNAUTHORIZED, "Listing without identity", status_code=401
                )
            return {"files": _resolve(ArtifactService).list_for_owner(identity)}, 200
        except DomainError as e:
            return _domain_error_response(e, "/files")
        except Exception as e:
            return _unexpected_error_response(e, "/files")


@files_ns.route("/<string:file_id>")
@files_ns.param("file_id", "The file identifier")
class File(Resource):
    """Owner operations on a single file"""

    @files_ns.doc("delete_file")
    @files_ns.response(204, "Deleted")
    @files_ns.response(401, "No identity", error_response)
    @files_ns.response(403, "Not the owner", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    def delete(self, file_id):
        """
        Delete a file and its stored content

        Only the uploader may delete a file.
        """
        try:
            identity = _current_identity()
            if identity is None:
                return create_error_response(
                    ErrorCategory.UNAUTHORIZED, "Delete without identity", status_code=401
                )
            _resolve(ArtifactService).delete_for_owner(identity, file_id)
            return "", 204
        except DomainError as e:
            return _domain_error_response(e, f"DELETE /files/{file_id}")
        except Exception as e:
            return _unexpected_error_response(e, f"DELETE /files/{file_id}")


@files_ns.route("/<string:file_id>/meta")
@files_ns.param("file_id", "The file identifier")
class FileMetadata(Resource):
    """Public file metadata"""

    @files_ns.doc("get_file_metadata")
    @files_ns.response(200, "Success", metadata_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "Link Expired", error_response)
    def get(self, file_id):
        """
        Get file metadata for the download page

        Does not require the password. Expired files reveal nothing.
        """
        try:
            return _resolve(ArtifactService).get_metadata(file_id), 200
        except DomainError as e:
            return _domain_error_response(e, f"/files/{file_id}/meta")
        except Exception as e:
            return _unexpected_error_response(e, f"/files/{file_id}/meta")


@files_ns.route("/<string:file_id>/download")
@files_ns.param("file_id", "The file identifier")
class FileDownload(Resource):
    """Download grants"""

    @files_ns.doc("download_file")
    @files_ns.expect(download_request)
    @files_ns.response(200, "Success", download_response)
    @files_ns.response(401, "Incorrect Password", error_response)
    @files_ns.response(404, "File Not Found", error_response)
    @files_ns.response(410, "Link Expired", error_response)
    def post(self, file_id):
        """
        Request a download

        Counts one download and returns a short-lived URL for the file.
        """
        try:
            download = DownloadRequest.from_json(request.get_json(silent=True))
            grant = _resolve(ArtifactService).request_download(file_id, download)
            return grant.to_dict(), 200
        except DomainError as e:
            return _domain_error_response(e, f"/files/{file_id}/download")
        except Exception as e:
            return _unexpected_error_response(e, f"/files/{file_id}/download")


# =============================================================================
# Auth Namespace - Accounts and sessions
# =============================================================================

auth_ns = register_models(Namespace("auth", description="Account and session operations"))


@auth_ns.route("/register")
class Register(Resource):
    @auth_ns.doc("register")
    @auth_ns.expect(credentials_request)
    @auth_ns.response(201, "Created", session_response)
    @auth_ns.response(400, "Bad Request", error_response)
    @auth_ns.response(409, "Account Exists", error_response)
    def post(self):
        """Create an account and start a session"""
        try:
            data = request.get_json(silent=True) or {}
            result = _resolve(AuthService).register(data.get("email"), data.get("password"))
            return _with_session_cookie(result.to_dict(), 201, result.token)
        except DomainError as e:
            return _domain_error_response(e, "/auth/register")
        except Exception as e:
            return _unexpected_error_response(e, "/auth/register")


@auth_ns.route("/login")
class Login(Resource):
    @auth_ns.doc("login")
    @auth_ns.expect(credentials_request)
    @auth_ns.response(200, "Success", session_response)
    @auth_ns.response(401, "Invalid Credentials", error_response)
    def post(self):
        """Exchange email and password for a session"""
        try:
            data = request.get_json(silent=True) or {}
            result = _resolve(AuthService).login(data.get("email"), data.get("password"))
            return _with_session_cookie(result.to_dict(), 200, result.token)
        except DomainError as e:
            return _domain_error_response(e, "/auth/login")
        except Exception as e:
            return _unexpected_error_response(e, "/auth/login")


@auth_ns.route("/logout")
class Logout(Resource):
    @auth_ns.doc("logout")
    @auth_ns.response(204, "Logged out")
    def post(self):
        """Clear the session cookie"""
        response = make_response("", 204)
        response.delete_cookie(SESSION_COOKIE_NAME, samesite="Lax")
        return response


@auth_ns.route("/whoami")
class WhoAmI(Resource):
    @auth_ns.doc("whoami")
    @auth_ns.response(200, "Success", whoami_response)
    @auth_ns.response(401, "No identity", error_response)
    def get(self):
        """Describe the caller's identity"""
        identity = _current_identity()
        if identity is None:
            return create_error_response(
                ErrorCategory.UNAUTHORIZED, "Anonymous caller", status_code=401
            )
        return {
            "ownerId": identity.owner_id,
            "isGuest": identity.is_guest,
            "accountId": identity.account_id,
            "email": identity.email,
        }, 200


# =============================================================================
# Blobs Namespace - Signed retrieval for the local storage backend
# =============================================================================

blobs_ns = register_models(Namespace("blobs", description="Signed blob retrieval"))


@blobs_ns.route("/<path:storage_key>")
@blobs_ns.param("storage_key", "Blob storage key")
class Blob(Resource):
    @blobs_ns.doc(
        "get_blob",
        params={
            "expires": "Unix expiry of the signed URL",
            "signature": "HMAC signature",
            "name": "Attachment filename",
        },
    )
    @blobs_ns.response(200, "File content")
    @blobs_ns.response(403, "Invalid Signature", error_response)
    @blobs_ns.response(404, "File Not Found", error_response)
    def get(self, storage_key):
        """
        Stream a blob through a signed URL

        Only used with the local storage backend; cloud backends hand out
        their own pre-signed URLs.
        """
        download_name = request.args.get("name")
        valid = _resolve(SignedUrlService).validate(
            storage_key,
            request.args.get("expires"),
            request.args.get("signature"),
            download_name,
        )
        if not valid:
            return create_error_response(
                ErrorCategory.INVALID_SIGNATURE,
                f"Rejected signature for {storage_key}",
                status_code=403,
            )

        path = _resolve(IBlobStorage).path_for(storage_key)
        if path is None:
            return create_error_response(
                ErrorCategory.FILE_NOT_FOUND, f"Blob missing: {storage_key}", status_code=404
            )

        return send_file(
            path,
            as_attachment=True,
            download_name=download_name or posixpath.basename(storage_key),
        )
