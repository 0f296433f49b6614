from __future__ import annotations

import logging
from typing import Tuple

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.user import User
from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required
from utils.exceptions import NotFound

MAX_LIMIT = 100

bp = Blueprint("users", __name__)
logger = logging.getLogger(__name__)

user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List all users (id, email, created_at)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(User)

    total = query.count()
    rows = query.order_by(User.created_at.asc(), User.email.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    )


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: Account no longer exists
    """
    user = storage.get(User, g.current_user_id)
    if not user:
        raise NotFound("user gone", message="User does not exist")
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.delete("/users")
@jwt_required()
def delete_me():
    """
    Delete the calling user; their refresh tokens and todos go with them.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: Deleted }
      401: { description: Unauthorized }
      404: { description: Account no longer exists }
    """
    with storage.atomic() as session:
        user = session.get(User, g.current_user_id)
        if not user:
            raise NotFound("user gone", message="User does not exist")
        session.delete(user)

    logger.info("Deleted user %s", g.current_user_id)
    return jsonify({"message": "User and todos deleted"}), 200
