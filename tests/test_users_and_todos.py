from __future__ import annotations

from models import storage
from models.todo import Todo
from models.user import User

from conftest import API, bearer, signup, token_rows


def _client_for(app, email: str):
    client = app.test_client()
    tokens = signup(client, email).get_json()
    return client, bearer(tokens["access_token"])


def test_todo_crud_for_owner(app) -> None:
    client, auth = _client_for(app, "a@x.com")

    created = client.post(f"{API}/todos", json={"title": "buy milk"}, headers=auth)
    assert created.status_code == 201
    todo = created.get_json()["data"]
    assert todo["title"] == "buy milk"
    assert todo["is_complete"] is False

    client.post(f"{API}/todos", json={"title": "walk dog"}, headers=auth)
    listed = client.get(f"{API}/todos", headers=auth).get_json()["data"]
    assert [t["title"] for t in listed] == ["buy milk", "walk dog"]

    updated = client.put(
        f"{API}/todos/{todo['id']}", json={"title": "buy oat milk", "is_complete": True}, headers=auth
    )
    assert updated.status_code == 200
    assert updated.get_json()["data"]["is_complete"] is True

    deleted = client.delete(f"{API}/todos/{todo['id']}", headers=auth)
    assert deleted.status_code == 200
    assert deleted.get_json()["data"]["title"] == "buy oat milk"
    assert len(client.get(f"{API}/todos", headers=auth).get_json()["data"]) == 1


def test_todo_title_required(app) -> None:
    client, auth = _client_for(app, "a@x.com")
    r = client.post(f"{API}/todos", json={"title": "   "}, headers=auth)
    assert r.status_code == 400


def test_other_users_todos_are_forbidden(app) -> None:
    alice, alice_auth = _client_for(app, "alice@x.com")
    bob, bob_auth = _client_for(app, "bob@x.com")
    todo_id = alice.post(f"{API}/todos", json={"title": "secret"}, headers=alice_auth).get_json()["data"]["id"]

    assert bob.put(f"{API}/todos/{todo_id}", json={"title": "mine"}, headers=bob_auth).status_code == 403
    assert bob.delete(f"{API}/todos/{todo_id}", headers=bob_auth).status_code == 403
    assert bob.delete(f"{API}/todos/99999", headers=bob_auth).status_code == 403
    assert bob.get(f"{API}/todos", headers=bob_auth).get_json()["data"] == []


def test_list_users_hides_password_hash(app) -> None:
    client, auth = _client_for(app, "a@x.com")
    _client_for(app, "b@x.com")
    body = client.get(f"{API}/users", headers=auth).get_json()
    assert body["meta"]["total"] == 2
    assert {u["email"] for u in body["data"]} == {"a@x.com", "b@x.com"}
    assert all(set(u) == {"id", "email", "created_at"} for u in body["data"])


def test_deleting_account_cascades_and_second_delete_is_404(app) -> None:
    client, auth = _client_for(app, "a@x.com")
    client.post(f"{API}/todos", json={"title": "t1"}, headers=auth)

    r = client.delete(f"{API}/users", headers=auth)
    assert r.status_code == 200

    storage.close()
    assert storage.count(User) == 0
    assert storage.count(Todo) == 0
    storage.close()
    assert token_rows() == []

    # the access token outlives the account until it expires
    again = client.delete(f"{API}/users", headers=auth)
    assert again.status_code == 404
    assert client.get(f"{API}/me", headers=auth).status_code == 404


def test_user_model_only_carries_the_password_hash() -> None:
    assert "password_hash" in User.__table__.columns
    assert not hasattr(User, "password")
