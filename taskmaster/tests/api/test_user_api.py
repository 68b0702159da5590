#tests/api/test_user_api.py
from fastapi.testclient import TestClient

from taskmaster.models.user import User as UserModel


def test_list_users_with_search(client: TestClient, alice: UserModel, bob: UserModel, alice_headers):
    response = client.get("/api/users/", headers=alice_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert body["pagination"]["page"] == 1

    response = client.get("/api/users/", params={"search": "bob"}, headers=alice_headers)
    assert [u["id"] for u in response.json()["users"]] == [bob.id]

def test_pagination_limit(client: TestClient, alice: UserModel, bob: UserModel, carol: UserModel, alice_headers):
    response = client.get("/api/users/", params={"page": 2, "limit": 2}, headers=alice_headers)
    body = response.json()
    assert len(body["users"]) == 1
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}

def test_get_user(client: TestClient, bob: UserModel, alice_headers):
    response = client.get(f"/api/users/{bob.id}", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "bob@example.com"
    assert client.get("/api/users/9999", headers=alice_headers).status_code == 404

def test_deactivate_requires_admin(client: TestClient, bob: UserModel, alice_headers):
    response = client.delete(f"/api/users/{bob.id}", headers=alice_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"

def test_admin_deactivates_user(client: TestClient, bob: UserModel, bob_headers, admin_headers, alice_headers):
    response = client.delete(f"/api/users/{bob.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "User deactivated"
    assert response.json()["user"]["is_active"] is False

    # деактивированный пользователь скрыт от обычных пользователей, но не от admin
    assert client.get(f"/api/users/{bob.id}", headers=alice_headers).status_code == 404
    assert client.get(f"/api/users/{bob.id}", headers=admin_headers).status_code == 200
    assert client.get("/api/auth/profile", headers=bob_headers).status_code == 401
