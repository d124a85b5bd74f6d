"""
Firebase ID token verification for protected endpoints.

Clients send ``Authorization: Bearer <idToken>``. On success the decoded
identity is attached to the request as ``request.firebase_user``.
"""
import logging
from functools import wraps
from typing import Optional, Tuple

import jwt
from django.http import JsonResponse

from .http import error_response
from .identity_service import IdentityNotConfiguredError, InvalidTokenError, identity_service

logger = logging.getLogger("api")

BEARER_PREFIX = "Bearer "


def _strip_quotes(token: str) -> str:
    # Shells and HTTP tools sometimes keep the quotes around the token
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        return token[1:-1]
    return token


def authenticate(request) -> Tuple[Optional[dict], Optional[JsonResponse]]:
    """
    Verify the bearer token of ``request``.

    Returns:
        (firebase_user, None) on success, (None, error response) otherwise
    """
    header = str(request.headers.get("Authorization", "")).strip()
    if not header:
        return None, error_response("missing_authorization", "Missing Authorization header", 401)

    if not header.startswith(BEARER_PREFIX):
        return None, error_response(
            "missing_bearer_token",
            "Missing Bearer token in Authorization header",
            401,
        )

    id_token = _strip_quotes(header[len(BEARER_PREFIX):].strip())

    # Structural check only; the signature is verified by Firebase below
    try:
        jwt.get_unverified_header(id_token)
    except jwt.InvalidTokenError:
        logger.error(f"[AUTH] Malformed token (header length={len(header)}, token length={len(id_token)})")
        return None, error_response(
            "malformed_token",
            "Malformed ID token. Ensure you pass the full JWT in Authorization: Bearer <token>",
            400,
        )

    try:
        decoded = identity_service.verify_id_token(id_token)
    except IdentityNotConfiguredError as e:
        logger.error(f"[AUTH] {e}")
        return None, error_response("auth_unavailable", str(e), 503)
    except InvalidTokenError as e:
        logger.warning(f"[AUTH] Token rejected: {e}")
        return None, error_response("invalid_token", "Invalid or expired token", 401)

    firebase_user = {"uid": decoded.get("uid"), "email": decoded.get("email")}
    request.firebase_user = firebase_user
    logger.debug(f"[AUTH] Decoded uid={firebase_user['uid']}")
    return firebase_user, None


def require_auth(view):
    """Decorator for views that only authenticated callers may reach."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        _, error = authenticate(request)
        if error:
            return error
        return view(request, *args, **kwargs)

    return wrapper
