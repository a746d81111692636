# server/registry.py
# No `from __future__ import annotations` here: register_into_fastmcp needs
# the input model annotation evaluated at definition time.
from dataclasses import dataclass
from typing import Any, Callable, Dict, Type

from pydantic import BaseModel

from app.di import Container
from server.tools.files import (
    FileToolHandlers,
    FsDeleteIn,
    FsHomeIn,
    FsListIn,
    FsMkdirIn,
    FsMoveIn,
    FsReadIn,
    FsSearchIn,
    FsWriteIn,
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Any]


def _schema_from_model(model: Type[BaseModel]) -> Dict[str, Any]:
    return model.model_json_schema()


def build_tool_registry(container: Container) -> Dict[str, ToolSpec]:
    """
    Build a registry once at startup.
    Transport layers (stdio/HTTP) read from this registry to expose tools.
    """
    handlers = FileToolHandlers(container.fs_service, container.settings.SEARCH_MAX_RESULTS)

    specs = [
        ToolSpec("fs_home", "Show the home directory all paths are relative to",
                 FsHomeIn, handlers.fs_home),
        ToolSpec("fs_list", "List a directory: sub-directories first, then files, with totals",
                 FsListIn, handlers.fs_list),
        ToolSpec("fs_search", "Search file names and/or text file contents under a directory",
                 FsSearchIn, handlers.fs_search),
        ToolSpec("fs_read", "Read a text file under the home directory",
                 FsReadIn, handlers.fs_read),
        ToolSpec("fs_write", "Write (or overwrite) a text file under the home directory",
                 FsWriteIn, handlers.fs_write),
        ToolSpec("fs_mkdir", "Create a directory (and missing parents)",
                 FsMkdirIn, handlers.fs_mkdir),
        ToolSpec("fs_move", "Move or rename a file or directory; the destination must not exist",
                 FsMoveIn, handlers.fs_move),
        ToolSpec("fs_delete", "Delete a file, or a directory with everything in it",
                 FsDeleteIn, handlers.fs_delete),
    ]
    return {spec.name: spec for spec in specs}


def list_tools_payload(registry: Dict[str, ToolSpec]) -> Dict[str, Any]:
    """
    Produce the `tools/list` payload body as per MCP Tools spec.
    """
    tools = []
    for spec in registry.values():
        tools.append({
            "name": spec.name,
            "description": spec.description,
            "inputSchema": _schema_from_model(spec.input_model),
        })
    return {"tools": tools}


def dispatch_tool_call(registry: Dict[str, ToolSpec], name: str, arguments: Dict[str, Any]) -> Any:
    """
    Validate args with the tool's Pydantic model, then invoke the named handler.
    """
    if name not in registry:
        raise KeyError(f"Tool not found: {name}")
    spec = registry[name]
    args_obj = spec.input_model(**(arguments or {}))
    return spec.handler(args_obj)


def register_into_fastmcp(mcp, registry: Dict[str, ToolSpec]) -> None:
    """
    Register all registry tools into a FastMCP stdio host.
    This keeps stdio and HTTP transports in sync without duplication.
    """
    for spec in registry.values():
        # Create a local closure so each handler binds to its spec
        def make_tool(spec: ToolSpec):
            model = spec.input_model

            def tool_handler(input: model) -> Any:
                return spec.handler(input)
            tool_handler.__name__ = spec.name
            return tool_handler

        mcp.tool(name=spec.name, description=spec.description)(make_tool(spec))
