from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from utils.exceptions import Unauthenticated


def bearer_token() -> str | None:
    """Access token from `Authorization: Bearer ...`, else from the access cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"]) or None


def jwt_required():
    """
    Auth gate: verify the access token and expose the caller as g.current_user_id.
    Missing, malformed and expired tokens all fail the same way (401).
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise Unauthenticated("no access token presented")
            issuer = current_app.extensions["token_issuer"]
            # ExpiredOrMalformed is an Unauthenticated; the handler hides which one
            g.current_user_id = issuer.verify(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
