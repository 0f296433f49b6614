from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.todo import Todo
from models.schemas.todo import TodoCreateSchema, TodoUpdateSchema, TodoOutSchema
from utils.decorators import jwt_required

bp = Blueprint("todos", __name__)

create_schema = TodoCreateSchema()
update_schema = TodoUpdateSchema()
out_schema = TodoOutSchema()
out_list_schema = TodoOutSchema(many=True)


def _own_todo_or_403(session, todo_id: int, message: str) -> Todo:
    # someone else's todo and a missing one look the same
    todo = (
        session.query(Todo)
        .filter(Todo.id == todo_id, Todo.user_id == g.current_user_id)
        .first()
    )
    if not todo:
        abort(403, description=message)
    return todo


@bp.get("/todos")
@jwt_required()
def list_todos():
    """
    List the caller's todos (oldest first)
    ---
    tags: [Todos]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    session = storage.get_session()
    rows = (
        session.query(Todo)
        .filter(Todo.user_id == g.current_user_id)
        .order_by(Todo.id.asc())
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows)})


@bp.post("/todos")
@jwt_required()
def create_todo():
    """
    Create a todo
    ---
    tags: [Todos]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, maxLength: 255 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    with storage.atomic() as session:
        todo = Todo(title=data["title"], user_id=g.current_user_id)
        session.add(todo)
        session.flush()
        body = out_schema.dump(todo)
    return jsonify({"data": body}), 201


@bp.put("/todos/<int:todo_id>")
@jwt_required()
def update_todo(todo_id: int):
    """
    Update one of the caller's todos
    ---
    tags: [Todos]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string }
            is_complete: { type: boolean }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      403: { description: Not the caller's todo }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    with storage.atomic() as session:
        todo = _own_todo_or_403(session, todo_id, "Cannot modify another user's todo")
        if "title" in data:
            todo.title = data["title"]
        if "is_complete" in data:
            todo.is_complete = data["is_complete"]
        session.flush()
        body = out_schema.dump(todo)
    return jsonify({"data": body})


@bp.delete("/todos/<int:todo_id>")
@jwt_required()
def delete_todo(todo_id: int):
    """
    Delete one of the caller's todos
    ---
    tags: [Todos]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: todo_id
        type: integer
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not the caller's todo }
    """
    with storage.atomic() as session:
        todo = _own_todo_or_403(session, todo_id, "Cannot delete another user's todo")
        body = out_schema.dump(todo)
        session.delete(todo)
    return jsonify({"message": "Todo deleted", "data": body})
