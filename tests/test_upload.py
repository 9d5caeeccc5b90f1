from pathlib import Path

from fastapi.testclient import TestClient

from printbay.main import create_app


def test_unsupported_extension_returns_415_with_empty_file_id(mock_client):
    r = mock_client.post(
        "/api/files-upload",
        files={"file": ("notes.txt", b"hello world", "text/plain")},
    )
    assert r.status_code == 415
    body = r.json()
    assert body["success"] is False
    assert body["fileId"] == ""
    assert body["fileName"] == "notes.txt"
    assert body["fileSize"] == 11
    assert ".stl" in body["error"]


def test_oversized_upload_is_413_even_with_unsupported_extension(make_settings):
    app = create_app(make_settings(MAX_UPLOAD_BYTES=16))
    with TestClient(app) as c:
        r = c.post("/api/files-upload", files={"file": ("big.txt", b"x" * 64, "text/plain")})
    assert r.status_code == 413
    body = r.json()
    assert body["success"] is False
    assert body["fileId"] == ""
    assert "too large" in body["error"]


def test_non_multipart_request_is_400(mock_client):
    r = mock_client.post("/api/files-upload", json={"file": "benchy.stl"})
    assert r.status_code == 400
    assert r.json()["error"] == "Content-Type must be multipart/form-data"


def test_missing_boundary_is_400(mock_client):
    r = mock_client.post(
        "/api/files-upload",
        content=b"--x\r\n",
        headers={"content-type": "multipart/form-data"},
    )
    assert r.status_code == 400
    assert r.json()["fileId"] == ""


def test_missing_file_field_is_400(mock_client):
    r = mock_client.post(
        "/api/files-upload",
        files={"attachment": ("benchy.stl", b"solid x\nendsolid x\n", "model/stl")},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "No file provided"


def test_upload_without_blob_storage_lands_on_disk(mock_client, tmp_path):
    payload = b"solid cube\nendsolid cube\n"
    r = mock_client.post(
        "/api/files-upload",
        files={"file": ("Cube.STL", payload, "model/stl")},
        headers={"x-customer-id": "cust-42"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["fileId"]
    assert body["uploadUrl"] == f"local://cache/{body['fileId']}"
    assert body["fileSize"] == len(payload)

    saved = Path(tmp_path / "uploads" / "cust-42" / body["fileId"] / "Cube.STL")
    assert saved.read_bytes() == payload


def test_anonymous_customer_id_when_header_missing(mock_client, tmp_path):
    r = mock_client.post("/api/files-upload", files={"file": ("part.3mf", b"PK\x03\x04", "model/3mf")})
    assert r.status_code == 200
    dirs = [p.name for p in (tmp_path / "uploads").iterdir()]
    assert len(dirs) == 1 and dirs[0].startswith("anonymous-")
