# server/http_app.py
from __future__ import annotations

import logging
import posixpath
from typing import Any, BinaryIO, Dict, Iterator, Optional
from urllib.parse import quote

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.di import build_container
from app.errors import ErrorKind, FileBrowserError
from app.logging import configure_logging
from app.models import SearchQuery
from server.registry import build_tool_registry, dispatch_tool_call, list_tools_payload

logger = logging.getLogger(__name__)

API_PREFIX = "/api/filebrowser"
PROTOCOL_VERSION = "2025-03-26"

ERROR_STATUS = {
    ErrorKind.ACCESS_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.IO_FAILURE: 500,
}


class _CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchBody(_CamelBody):
    query: str
    path: Optional[str] = None
    include_subdirectories: bool = True
    search_in_file_names: bool = True
    search_in_file_contents: bool = False
    max_results: Optional[int] = None


class CreateDirectoryBody(_CamelBody):
    name: str = Field(..., min_length=1)
    parent_path: Optional[str] = None


class MoveBody(_CamelBody):
    source_path: str = Field(..., min_length=1)
    destination_path: str = Field(..., min_length=1)


def _content_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename*=utf-8''{quoted}"


def _iter_stream(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    with stream:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            yield chunk


def _jsonrpc_error(id_: Any, code: int, message: str, data: Any | None = None) -> JSONResponse:
    body: Dict[str, Any] = {"jsonrpc": "2.0", "id": id_, "error": {"code": code, "message": message}}
    if data is not None:
        body["error"]["data"] = data
    return JSONResponse(body)


def _jsonrpc_result(id_: Any, result: Any) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": id_, "result": result})


def _tool_content(result: Any, is_error: bool = False) -> Dict[str, Any]:
    content_block = (
        {"type": "json", "json": result}
        if isinstance(result, (dict, list))
        else {"type": "text", "text": str(result)}
    )
    return {"content": [content_block], "isError": is_error}


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    REST surface for the browser UI plus the MCP JSON-RPC endpoint.
    Every route is a thin adapter over FileSystemService.
    """
    container = build_container(settings)
    s = container.settings
    fs = container.fs_service
    registry = build_tool_registry(container)
    configure_logging(s.LOG_LEVEL)

    app = FastAPI(title="File Browser API", version="0.1.0")
    app.state.container = container

    allowed = s.allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Security: Origin validation ----------

    def _origin_allowed(req: Request) -> bool:
        origin = req.headers.get("origin")
        if not origin:
            return s.HTTP_ALLOW_NO_ORIGIN
        return "*" in allowed or origin.lower() in allowed

    @app.middleware("http")
    async def origin_validation_mw(request: Request, call_next):
        # Browser requests from unknown origins are rejected (DNS rebinding)
        if not _origin_allowed(request):
            return JSONResponse({"error": "Forbidden origin"}, status_code=403)
        return await call_next(request)

    # ---------- Error translation ----------

    @app.exception_handler(FileBrowserError)
    async def file_browser_error_handler(request: Request, exc: FileBrowserError):
        return JSONResponse(
            {"error": exc.message, "kind": exc.kind.value},
            status_code=ERROR_STATUS.get(exc.kind, 500),
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse({"error": exc.errors(include_url=False)[0]["msg"]}, status_code=400)

    # ---------- REST routes ----------

    @app.get("/health")
    def health() -> str:
        return "healthy"

    @app.get(f"{API_PREFIX}/home")
    def home() -> Dict[str, Any]:
        return fs.home_directory_info().model_dump(mode="json")

    @app.get(f"{API_PREFIX}/browse")
    def browse(path: Optional[str] = None) -> Dict[str, Any]:
        return fs.list_directory(path or "").model_dump(mode="json")

    @app.post(f"{API_PREFIX}/search")
    def search(body: SearchBody) -> list:
        query = SearchQuery(
            query=body.query,
            path=body.path,
            include_subdirectories=body.include_subdirectories,
            search_in_file_names=body.search_in_file_names,
            search_in_file_contents=body.search_in_file_contents,
            max_results=body.max_results or s.SEARCH_MAX_RESULTS,
        )
        return [e.model_dump(mode="json") for e in fs.search(query)]

    @app.get(f"{API_PREFIX}/download")
    def download(path: str):
        stream = fs.open_for_read(path)
        filename = posixpath.basename(path)
        return StreamingResponse(
            _iter_stream(stream, s.COPY_CHUNK_SIZE),
            media_type="application/octet-stream",
            headers={"Content-Disposition": _content_disposition(filename)},
        )

    @app.post(f"{API_PREFIX}/upload")
    def upload(file: UploadFile = File(...), path: Optional[str] = None) -> Dict[str, Any]:
        outcome = fs.upload(file.filename or "", file.file, path or "", size=file.size)
        return outcome.model_dump(mode="json")

    @app.post(f"{API_PREFIX}/create-directory")
    def create_directory(body: CreateDirectoryBody) -> Dict[str, str]:
        parent = body.parent_path or ""
        fs.create_directory(posixpath.join(parent, body.name) if parent else body.name)
        return {"message": "Directory created successfully"}

    @app.post(f"{API_PREFIX}/move")
    def move(body: MoveBody) -> Dict[str, str]:
        fs.move(body.source_path, body.destination_path)
        return {"message": "Item moved successfully"}

    @app.delete(f"{API_PREFIX}/delete")
    def delete(path: str) -> Dict[str, str]:
        fs.delete(path)
        return {"message": "Item deleted successfully"}

    # ---------- MCP JSON-RPC endpoint (Streamable HTTP) ----------

    @app.post(s.MCP_HTTP_PATH)
    async def mcp_endpoint(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            return _jsonrpc_error(None, -32700, "Parse error")
        if not isinstance(payload, dict):
            return _jsonrpc_error(None, -32600, "Invalid Request")

        id_ = payload.get("id")
        method = payload.get("method")
        params = payload.get("params") or {}

        if method == "initialize":
            return _jsonrpc_result(id_, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {"listChanged": True}},
                "serverInfo": {"name": "filebrowser-mcp-http", "version": "0.1.0"},
            })

        if method == "tools/list":
            return _jsonrpc_result(id_, list_tools_payload(registry))

        if method == "tools/call":
            name = params.get("name")
            args = params.get("arguments", {})
            try:
                result = await run_in_threadpool(dispatch_tool_call, registry, name, args)
            except KeyError as ke:
                return _jsonrpc_error(id_, -32601, str(ke))
            except ValidationError as ve:
                return _jsonrpc_error(id_, -32602, "Invalid params", ve.errors(include_url=False, include_context=False))
            except FileBrowserError as fe:
                return _jsonrpc_result(id_, _tool_content(fe.message, is_error=True))
            except Exception as e:
                logger.exception("tool %s failed", name)
                return _jsonrpc_error(id_, -32603, "Internal error", str(e))
            return _jsonrpc_result(id_, _tool_content(result))

        return _jsonrpc_error(id_, -32601, f"Method not found: {method}")

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = Settings()
    uvicorn.run(
        "server.http_app:create_app",
        factory=True,
        host=_settings.HTTP_HOST,
        port=_settings.HTTP_PORT,
        reload=False,
    )
