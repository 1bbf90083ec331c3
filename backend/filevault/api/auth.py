"""
Authentication Decorator

Verifies the bearer token on owner endpoints and exposes the caller's id
as g.user_id. Token issuance lives in a separate service.
"""

from functools import wraps

import jwt
from flask import current_app, g, request

from ..domain.errors import ErrorCategory, create_error_response


def require_auth(f):
    """
    Decorator requiring a valid `Authorization: Bearer <jwt>` header.

    The token must be signed with JWT_SECRET and carry a `userId` claim.
    Missing, malformed, expired or badly signed tokens get HTTP 401.

    Usage:
        @require_auth
        def get(self):
            owner_id = g.user_id
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _extract_bearer_token(request.headers.get("Authorization", ""))
        if not token:
            return create_error_response(ErrorCategory.UNAUTHORIZED, "Missing bearer token")

        secret = current_app.config.get("JWT_SECRET")
        if not secret:
            current_app.logger.error("JWT_SECRET is not configured; rejecting request")
            return create_error_response(ErrorCategory.UNAUTHORIZED, "Authentication not configured")

        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
            )
        except jwt.InvalidTokenError as e:
            current_app.logger.info(f"Rejected bearer token: {e}")
            return create_error_response(ErrorCategory.UNAUTHORIZED, str(e))

        user_id = claims.get("userId")
        if not user_id:
            return create_error_response(ErrorCategory.UNAUTHORIZED, "Token has no userId claim")

        g.user_id = str(user_id)
        return f(*args, **kwargs)

    return decorated_function


def _extract_bearer_token(header: str) -> str:
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()
