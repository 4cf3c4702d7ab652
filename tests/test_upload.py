import uuid

from conftest import login


def open_case(client):
    return client.post("/cases", json={}).json()["chat"]["id"]


def test_upload_stores_object_and_metadata(client, make_account, fake_s3):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = open_case(client)

    response = client.post(
        "/upload-chat-file",
        data={"chat_id": chat_id},
        files={"file": ("ECG strip.PNG", b"\x89PNG fake", "image/png")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "File uploaded successfully"
    assert body["file_path"].startswith(f"{chat_id}/")
    assert body["file_path"].endswith(".png")
    assert body["public_url"] == f"https://chat-files.s3.eu-central-1.amazonaws.com/{body['file_path']}"
    stored = fake_s3.objects[body["file_path"]]
    assert stored["bucket"] == "chat-files"
    assert stored["body"] == b"\x89PNG fake"
    assert stored["extra"] == {"ContentType": "image/png"}


def test_upload_needs_file_and_chat(client, make_account, fake_s3):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = open_case(client)

    no_file = client.post("/upload-chat-file", data={"chat_id": chat_id})
    no_chat = client.post("/upload-chat-file", files={"file": ("a.txt", b"x", "text/plain")})
    bad_chat = client.post("/upload-chat-file", data={"chat_id": "42"}, files={"file": ("a.txt", b"x", "text/plain")})

    assert no_file.status_code == 400
    assert no_file.json()["detail"] == "Missing required fields"
    assert no_chat.status_code == 400
    assert bad_chat.status_code == 400
    assert fake_s3.objects == {}


def test_storage_failure_is_reported(client, make_account, fake_s3):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = open_case(client)
    fake_s3.error = RuntimeError("AccessDenied")

    response = client.post(
        "/upload-chat-file",
        data={"chat_id": chat_id},
        files={"file": ("notes.pdf", b"%PDF", "application/pdf")},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to upload file"


def test_metadata_failure_is_reported_after_the_object_is_stored(client, make_account, fake_s3, monkeypatch):
    make_account()
    login(client, "clinician@saver.test")
    chat_id = open_case(client)

    def broken_record(**kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr("saver_backend.api.fast_api.record_chat_file", broken_record)

    response = client.post(
        "/upload-chat-file",
        data={"chat_id": chat_id},
        files={"file": ("labs.pdf", b"%PDF-1.7", "application/pdf")},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to save file metadata"
    [(key, stored)] = fake_s3.objects.items()
    assert key.startswith(f"{chat_id}/")
    assert stored["body"] == b"%PDF-1.7"


def test_upload_into_foreign_or_missing_case(client, other_client, make_account, fake_s3):
    make_account()
    make_account(email="other@saver.test")
    login(client, "clinician@saver.test")
    login(other_client, "other@saver.test")
    chat_id = open_case(client)
    upload = {"file": ("a.txt", b"x", "text/plain")}

    assert other_client.post("/upload-chat-file", data={"chat_id": chat_id}, files=upload).status_code == 403
    assert client.post("/upload-chat-file", data={"chat_id": str(uuid.uuid4())}, files=upload).status_code == 404
    assert fake_s3.objects == {}


def test_upload_requires_session(client, fake_s3):
    response = client.post(
        "/upload-chat-file",
        data={"chat_id": str(uuid.uuid4())},
        files={"file": ("a.txt", b"x", "text/plain")},
    )

    assert response.status_code == 401
