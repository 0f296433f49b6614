"""
Authentication blueprint:
- POST /auth/signup
- POST /auth/login
- POST /auth/token   (refresh token rotation)
- PUT  /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens (JWT, HS256) and single-use opaque refresh tokens
- Stores only the sha256 fingerprint of each refresh token (RefreshToken model)
- Returns both tokens in the body and as HttpOnly cookies
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort, current_app
from sqlalchemy.exc import IntegrityError

from models import storage
from models.user import User
from models.refresh_token_store import RefreshTokenStore
from models.schemas.user import CredentialsSchema

from utils.decorators import jwt_required
from utils.exceptions import ConflictError
from utils.security import hash_password, verify_password, burn_password_check
from utils.token_rotation import TokenPair, TokenRotationEngine

bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

credentials_schema = CredentialsSchema()

INVALID_CREDENTIALS = "Invalid email or password"


def get_engine() -> TokenRotationEngine:
    return current_app.extensions["token_engine"]


def _token_response(pair: TokenPair, message: str, status: int):
    engine = get_engine()
    cfg = current_app.config
    resp = jsonify(
        {
            "message": message,
            "access_token": pair.access_token,
            "refresh_token": pair.refresh_token,
            "token_type": "bearer",
            "expires_in": engine.issuer.expires_in,
        }
    )
    resp.status_code = status
    cookie_opts = {
        "httponly": True,
        "secure": cfg["COOKIE_SECURE"],
        "samesite": cfg["COOKIE_SAMESITE"],
    }
    resp.set_cookie(cfg["ACCESS_COOKIE_NAME"], pair.access_token,
                    max_age=engine.issuer.expires_in, **cookie_opts)
    resp.set_cookie(cfg["REFRESH_COOKIE_NAME"], pair.refresh_token,
                    max_age=engine.refresh_expires_in, **cookie_opts)
    return resp


@bp.post("/signup")
def signup():
    """
    Create an account and start its first session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created (returns access_token and refresh_token)
      400:
        description: Validation error
      409:
        description: Email already registered
    """
    data = credentials_schema.load(request.get_json(silent=True) or {})
    # hash before opening the transaction; argon2 is deliberately slow
    pw_hash = hash_password(data["password"])

    with storage.atomic() as session:
        if session.query(User.id).filter(User.email == data["email"]).first():
            raise ConflictError("email taken", message="Email already registered")
        user = User(email=data["email"], password_hash=pw_hash)
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            raise ConflictError("email taken (constraint)", message="Email already registered")
        pair = get_engine().issue_pair(RefreshTokenStore(session), user.id)

    logger.info("Created user %s", pair.user_id)
    return _token_response(pair, "User created", 201)


@bp.post("/login")
def login():
    """
    Login: revoke every earlier session and return a new token pair
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Validation error or invalid credentials
    """
    data = credentials_schema.load(request.get_json(silent=True) or {})

    session = storage.get_session()
    row = (
        session.query(User.id, User.password_hash)
        .filter(User.email == data["email"])
        .first()
    )
    # release the read transaction before the slow password check
    storage.rollback()
    if row is None:
        burn_password_check(data["password"])
        abort(400, description=INVALID_CREDENTIALS)
    user_id, password_hash = row
    if not verify_password(data["password"], password_hash):
        abort(400, description=INVALID_CREDENTIALS)

    pair = get_engine().login_pair(user_id)
    return _token_response(pair, "Logged in", 200)


@bp.post("/token")
def token():
    """
    Rotate a refresh token: the presented one is spent, a new pair is returned.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns new tokens)
      401:
        description: Unknown, expired, reused or missing refresh token
    """
    payload = request.get_json(silent=True) or {}
    raw = payload.get("refresh_token") if isinstance(payload, dict) else None
    if not isinstance(raw, str) or not raw:
        raw = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])

    pair = get_engine().rotate(raw)
    return _token_response(pair, "Token refreshed", 200)


@bp.route("/logout", methods=["PUT", "POST"])
@jwt_required()
def logout():
    """
    logout: revokes every refresh token of the caller
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out (idempotent)
      401:
        description: Unauthorized
    """
    get_engine().revoke_all(g.current_user_id)

    cfg = current_app.config
    resp = jsonify({"message": "Logged out"})
    resp.delete_cookie(cfg["ACCESS_COOKIE_NAME"], secure=cfg["COOKIE_SECURE"],
                       samesite=cfg["COOKIE_SAMESITE"], httponly=True)
    resp.delete_cookie(cfg["REFRESH_COOKIE_NAME"], secure=cfg["COOKIE_SECURE"],
                       samesite=cfg["COOKIE_SAMESITE"], httponly=True)
    return resp
