from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.di import build_container
from app.errors import AlreadyExistsError
from server.registry import build_tool_registry, dispatch_tool_call, list_tools_payload


@pytest.fixture
def registry(home: Path):
    return build_tool_registry(build_container(Settings(HOME_DIRECTORY=home)))


def test_tools_list_payload_has_schemas(registry):
    payload = list_tools_payload(registry)
    names = {t["name"] for t in payload["tools"]}
    assert names == {"fs_home", "fs_list", "fs_search", "fs_read", "fs_write",
                     "fs_mkdir", "fs_move", "fs_delete"}
    for tool in payload["tools"]:
        assert tool["inputSchema"]["type"] == "object"


def test_write_list_search_read(registry, home: Path):
    out = dispatch_tool_call(registry, "fs_write", {"path": "notes/todo.md", "content": "Buy milk"})
    assert out["success"] is True

    listing = dispatch_tool_call(registry, "fs_list", {"path": "notes"})
    assert [i["name"] for i in listing["items"]] == ["todo.md"]
    assert listing["items"][0]["kind"] == "file"

    hits = dispatch_tool_call(registry, "fs_search", {"query": "milk", "search_in_file_contents": True})
    assert [h["path"] for h in hits] == ["notes/todo.md"]

    assert dispatch_tool_call(registry, "fs_read", {"path": "notes/todo.md"}) == "Buy milk"


def test_mkdir_move_delete(registry, home: Path):
    assert dispatch_tool_call(registry, "fs_mkdir", {"path": "a"}) == "OK"
    with pytest.raises(AlreadyExistsError):
        dispatch_tool_call(registry, "fs_mkdir", {"path": "a"})
    assert dispatch_tool_call(registry, "fs_move", {"source": "a", "destination": "b"}) == "OK"
    assert (home / "b").is_dir()
    assert dispatch_tool_call(registry, "fs_delete", {"path": "b"}) == "OK"
    assert not (home / "b").exists()


def test_home_tool(registry, home: Path):
    out = dispatch_tool_call(registry, "fs_home", {})
    assert out["path"] == str(home.resolve())
    assert out["exists"] is True


def test_unknown_tool_and_bad_args(registry):
    with pytest.raises(KeyError):
        dispatch_tool_call(registry, "fs_chmod", {})
    with pytest.raises(ValidationError):
        dispatch_tool_call(registry, "fs_move", {"source": "a"})
