#tests/api/test_attachment_api.py
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from taskmaster.models.user import User as UserModel
from taskmaster.services.file_storage import LocalFileStorage


@pytest.fixture
def task(client: TestClient, bob: UserModel, alice_headers) -> dict:
    response = client.post("/api/tasks/", json={"title": "Attach here", "assignee_id": bob.id}, headers=alice_headers)
    return response.json()["task"]

def _upload(client: TestClient, headers, content: bytes = b"hello", name: str = "notes.txt", mime: str = "text/plain", **form):
    data = {k: str(v) for k, v in form.items()}
    return client.post("/api/attachments/", files={"file": (name, content, mime)}, data=data, headers=headers)

def _stored_files(storage: LocalFileStorage):
    return list(Path(storage.root).glob("*")) if Path(storage.root).exists() else []


def test_upload_and_download(client: TestClient, storage: LocalFileStorage, alice: UserModel, task, alice_headers, bob_headers):
    response = _upload(client, alice_headers, task_id=task["id"])
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "File uploaded"
    attachment = body["attachment"]
    assert attachment["original_name"] == "notes.txt"
    assert attachment["size"] == 5
    assert attachment["mime_type"] == "text/plain"
    assert attachment["uploaded_by_id"] == alice.id
    assert attachment["filename"].endswith(".txt")
    assert "path" not in attachment
    assert len(_stored_files(storage)) == 1

    listing = client.get(f"/api/attachments/tasks/{task['id']}", headers=bob_headers)
    assert [a["id"] for a in listing.json()["attachments"]] == [attachment["id"]]

    download = client.get(f"/api/attachments/{attachment['id']}/download", headers=bob_headers)
    assert download.status_code == 200
    assert download.content == b"hello"
    assert "notes.txt" in download.headers["content-disposition"]

def test_upload_to_comment(client: TestClient, task, bob_headers):
    comment = client.post(f"/api/comments/tasks/{task['id']}", json={"content": "see file"}, headers=bob_headers).json()["comment"]
    response = _upload(client, bob_headers, comment_id=comment["id"])
    assert response.status_code == 201
    assert response.json()["attachment"]["comment_id"] == comment["id"]

def test_disallowed_type(client: TestClient, storage: LocalFileStorage, task, alice_headers):
    response = _upload(client, alice_headers, content=b"MZ", name="tool.exe", mime="application/x-msdownload", task_id=task["id"])
    assert response.status_code == 400
    assert response.json()["detail"] == "File type not allowed"
    assert _stored_files(storage) == []

def test_too_large_file_is_not_kept(client: TestClient, storage: LocalFileStorage, task, alice_headers):
    response = _upload(client, alice_headers, content=b"x" * (storage.max_size + 1), task_id=task["id"])
    assert response.status_code == 400
    assert response.json()["detail"] == "File too large"
    assert _stored_files(storage) == []

def test_failed_binding_removes_stored_file(client: TestClient, storage: LocalFileStorage, task, alice_headers, carol_headers):
    missing = _upload(client, alice_headers, task_id=9999)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Task not found"

    foreign = _upload(client, carol_headers, task_id=task["id"])
    assert foreign.status_code == 403

    no_comment = _upload(client, alice_headers, comment_id=9999)
    assert no_comment.status_code == 404
    assert _stored_files(storage) == []

def test_download_of_missing_file(client: TestClient, storage: LocalFileStorage, task, alice_headers):
    attachment = _upload(client, alice_headers, task_id=task["id"]).json()["attachment"]
    for path in _stored_files(storage):
        path.unlink()
    response = client.get(f"/api/attachments/{attachment['id']}/download", headers=alice_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "File not found"

def test_delete_attachment(client: TestClient, storage: LocalFileStorage, task, alice_headers, bob_headers):
    attachment = _upload(client, alice_headers, task_id=task["id"]).json()["attachment"]

    assert client.delete(f"/api/attachments/{attachment['id']}", headers=bob_headers).status_code == 403
    response = client.delete(f"/api/attachments/{attachment['id']}", headers=alice_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Attachment deleted"
    assert _stored_files(storage) == []
    assert client.get(f"/api/attachments/{attachment['id']}/download", headers=alice_headers).status_code == 404

def test_deleting_task_removes_files(client: TestClient, storage: LocalFileStorage, task, alice_headers):
    _upload(client, alice_headers, task_id=task["id"])
    _upload(client, alice_headers, name="second.txt", task_id=task["id"])
    assert len(_stored_files(storage)) == 2

    assert client.delete(f"/api/tasks/{task['id']}", headers=alice_headers).status_code == 200
    assert _stored_files(storage) == []

def test_comment_attachment_follows_task_visibility(client: TestClient, alice_headers, carol_headers):
    private = client.post("/api/tasks/", json={"title": "Private"}, headers=alice_headers).json()["task"]
    comment = client.post(f"/api/comments/tasks/{private['id']}", json={"content": "attached"}, headers=alice_headers).json()["comment"]
    attachment = _upload(client, alice_headers, content=b"secret-bytes", name="s.txt", comment_id=comment["id"]).json()["attachment"]
    assert attachment["task_id"] is None

    assert client.get(f"/api/tasks/{private['id']}", headers=carol_headers).status_code == 403
    response = client.get(f"/api/attachments/{attachment['id']}/download", headers=carol_headers)
    assert response.status_code == 403
    assert response.content != b"secret-bytes"

    own = client.get(f"/api/attachments/{attachment['id']}/download", headers=alice_headers)
    assert own.status_code == 200
    assert own.content == b"secret-bytes"

def test_comment_attachment_stays_guarded_after_comment_delete(client: TestClient, alice_headers, carol_headers):
    private = client.post("/api/tasks/", json={"title": "Private"}, headers=alice_headers).json()["task"]
    comment = client.post(f"/api/comments/tasks/{private['id']}", json={"content": "attached"}, headers=alice_headers).json()["comment"]
    attachment = _upload(client, alice_headers, comment_id=comment["id"]).json()["attachment"]
    assert client.delete(f"/api/comments/{comment['id']}", headers=alice_headers).status_code == 200

    assert client.get(f"/api/attachments/{attachment['id']}/download", headers=carol_headers).status_code == 403

def test_upload_requires_task_or_comment(client: TestClient, storage: LocalFileStorage, alice_headers):
    response = _upload(client, alice_headers)
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Attachment must belong to a task or a comment"
    assert body["errors"] == [{"field": "task_id", "message": "task_id or comment_id is required"}]
    assert _stored_files(storage) == []
