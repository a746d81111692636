from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from server.http_app import API_PREFIX, create_app


@pytest.fixture
def client(home: Path) -> TestClient:
    settings = Settings(HOME_DIRECTORY=home, HTTP_ALLOWED_ORIGINS="http://localhost:5173")
    return TestClient(create_app(settings))


def test_health(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == "healthy"


def test_browse_and_home(client: TestClient, home: Path):
    (home / "Docs").mkdir()
    (home / "a.txt").write_text("abc")

    r = client.get(f"{API_PREFIX}/browse")
    body = r.json()
    assert r.status_code == 200
    assert body["exists"] is True
    assert [i["name"] for i in body["items"]] == ["Docs", "a.txt"]
    assert body["total_size"] == 3

    r = client.get(f"{API_PREFIX}/home")
    assert r.json()["path"] == str(home.resolve())


def test_browse_missing_directory_is_not_an_http_error(client: TestClient):
    r = client.get(f"{API_PREFIX}/browse", params={"path": "nope"})
    assert r.status_code == 200
    assert r.json()["exists"] is False


def test_search_uses_camel_case_body(client: TestClient, home: Path):
    (home / "reports").mkdir()
    (home / "reports" / "report.txt").write_text("x")
    (home / "reports" / "summary.txt").write_text("x")

    r = client.post(f"{API_PREFIX}/search", json={"query": "report", "searchInFileNames": True})
    assert r.status_code == 200
    assert [h["name"] for h in r.json()] == ["report.txt"]

    r = client.post(f"{API_PREFIX}/search", json={"query": "   "})
    assert r.status_code == 400


def test_upload_then_download(client: TestClient, home: Path):
    r = client.post(
        f"{API_PREFIX}/upload",
        params={"path": "incoming"},
        files={"file": ("data.bin", b"\x00\x01\x02", "application/octet-stream")},
    )
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["file_path"] == "incoming/data.bin"

    r = client.get(f"{API_PREFIX}/download", params={"path": "incoming/data.bin"})
    assert r.status_code == 200
    assert r.content == b"\x00\x01\x02"
    assert 'filename="data.bin"' in r.headers["content-disposition"]


def test_error_kinds_map_to_status_codes(client: TestClient, home: Path):
    (home / "x.txt").write_text("x")
    (home / "y.txt").write_text("y")

    assert client.get(f"{API_PREFIX}/download", params={"path": "missing.txt"}).status_code == 404

    r = client.get(f"{API_PREFIX}/download", params={"path": "../../etc/passwd"})
    assert r.status_code == 403
    assert str(home) not in r.text

    r = client.post(f"{API_PREFIX}/move", json={"sourcePath": "x.txt", "destinationPath": "y.txt"})
    assert r.status_code == 409
    assert r.json()["kind"] == "already_exists"


def test_create_move_delete(client: TestClient, home: Path):
    r = client.post(f"{API_PREFIX}/create-directory", json={"parentPath": "a", "name": "b"})
    assert r.status_code == 200
    assert (home / "a" / "b").is_dir()

    r = client.post(f"{API_PREFIX}/move", json={"sourcePath": "a/b", "destinationPath": "c/b"})
    assert r.status_code == 200
    assert (home / "c" / "b").is_dir()

    r = client.delete(f"{API_PREFIX}/delete", params={"path": "c"})
    assert r.status_code == 200
    assert not (home / "c").exists()

    assert client.delete(f"{API_PREFIX}/delete", params={"path": "c"}).status_code == 404


def test_forbidden_origin(client: TestClient):
    r = client.get("/health", headers={"Origin": "http://evil.example"})
    assert r.status_code == 403
    r = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert r.status_code == 200


def test_mcp_jsonrpc_tools(client: TestClient, home: Path):
    (home / "hello.txt").write_text("hi")

    r = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert "fs_list" in {t["name"] for t in r.json()["result"]["tools"]}

    r = client.post("/mcp", json={
        "jsonrpc": "2.0", "id": 2, "method": "tools/call",
        "params": {"name": "fs_read", "arguments": {"path": "hello.txt"}},
    })
    result = r.json()["result"]
    assert result["isError"] is False
    assert result["content"][0]["text"] == "hi"

    r = client.post("/mcp", json={
        "jsonrpc": "2.0", "id": 3, "method": "tools/call",
        "params": {"name": "fs_delete", "arguments": {"path": "missing"}},
    })
    assert r.json()["result"]["isError"] is True

    r = client.post("/mcp", json={"jsonrpc": "2.0", "id": 4, "method": "nope"})
    assert r.json()["error"]["code"] == -32601
