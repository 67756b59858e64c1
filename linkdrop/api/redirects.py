"""
Short Link Redirects

GET /s/<short_id> lives outside /api so short links stay short.
"""

from flask import Blueprint, current_app, jsonify, redirect

from linkdrop.domain.errors import (
    DomainError,
    ErrorCategory,
    ShortLinkNotFoundError,
    create_error_response,
)
from linkdrop.domain.link_registry import LinkRegistry

redirects_bp = Blueprint("redirects", __name__)


@redirects_bp.route("/s/<short_id>", methods=["GET"])
def follow_short_link(short_id):
    """Redirect to the download page the short id points at."""
    try:
        target_url = current_app.container.resolve(LinkRegistry).resolve_short_link(short_id)
    except ShortLinkNotFoundError as e:
        body, status = create_error_response(ErrorCategory.SHORT_LINK_NOT_FOUND, str(e))
        return jsonify(body), status
    except DomainError as e:
        current_app.logger.error(f"Short link lookup failed for {short_id[:4]}...: {e}")
        body, status = create_error_response(ErrorCategory.SYSTEM_ERROR, str(e))
        return jsonify(body), status
    return redirect(target_url, code=302)
