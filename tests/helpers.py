"""Request helpers shared by the API tests."""

from fastapi.testclient import TestClient


def register(client: TestClient, email: str, password: str = "pw", name: str = "Tester") -> dict:
    response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_task(client: TestClient, headers: dict, **fields) -> dict:
    response = client.post("/api/tasks", json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]
