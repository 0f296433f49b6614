"""
Domain errors raised outside the request layer.

Each error carries the HTTP status and a short public message; api/errors.py
turns them into the uniform error envelope. Anything internal (why a token
was refused, what the database said) lives in `reason` and is only logged.
"""


class AuthError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, reason: str | None = None, message: str | None = None):
        super().__init__(reason or self.message)
        self.reason = reason
        if message:
            self.message = message


class Unauthenticated(AuthError):
    """Bad, expired, reused or absent credential. Always surfaced the same way."""
    status = 401
    code = "UNAUTHORIZED"
    message = "Authentication failed"


class ExpiredOrMalformed(Unauthenticated):
    """Access token failed signature, shape, type or expiry checks."""


class NotFound(AuthError):
    status = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class ConflictError(AuthError):
    status = 409
    code = "CONFLICT"
    message = "Conflict"


class StoreFailure(AuthError):
    """Transaction or connectivity failure; the transaction has been rolled back."""
    status = 500
