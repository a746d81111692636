# server/tools/files.py
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.logging import log_tool_call
from app.models import SearchQuery
from app.services.filesystem import FileSystemService

logger = logging.getLogger(__name__)


class FsHomeIn(BaseModel):
    pass


class FsListIn(BaseModel):
    path: str = Field("", description="Directory path relative to the home directory ('' = home)")


class FsSearchIn(BaseModel):
    query: str = Field(..., min_length=1, description="Text to look for (case-insensitive)")
    path: Optional[str] = Field(None, description="Directory to start from, relative to home")
    include_subdirectories: bool = Field(True, description="Walk the whole subtree")
    search_in_file_names: bool = Field(True, description="Match against file names")
    search_in_file_contents: bool = Field(False, description="Match against text file contents")
    max_results: Optional[int] = Field(None, ge=1, le=10_000, description="Cap on returned hits")


class FsReadIn(BaseModel):
    path: str = Field(..., description="Relative path under the home directory")


class FsWriteIn(BaseModel):
    path: str = Field(..., description="Relative path under the home directory")
    content: str = Field(..., description="UTF-8 text content to write")


class FsMkdirIn(BaseModel):
    path: str = Field(..., min_length=1, description="Directory to create, relative to home")


class FsMoveIn(BaseModel):
    source: str = Field(..., min_length=1, description="Existing file or directory")
    destination: str = Field(..., min_length=1, description="New location (must not exist)")


class FsDeleteIn(BaseModel):
    path: str = Field(..., min_length=1, description="File or directory to delete (recursive)")


class FileToolHandlers:
    """
    Very thin tool adapters:
    - inputs are already validated (Pydantic)
    - call the service (business logic + sandbox)
    - return JSON-friendly results
    """

    def __init__(self, fs_service: FileSystemService, default_max_results: int = 100):
        self.fs = fs_service
        self.default_max_results = default_max_results

    def fs_home(self, args: FsHomeIn) -> Dict[str, Any]:
        return self.fs.home_directory_info().model_dump(mode="json")

    def fs_list(self, args: FsListIn) -> Dict[str, Any]:
        log_tool_call(logger, "fs_list", args.model_dump())
        return self.fs.list_directory(args.path).model_dump(mode="json")

    def fs_search(self, args: FsSearchIn) -> List[Dict[str, Any]]:
        log_tool_call(logger, "fs_search", args.model_dump())
        query = SearchQuery(
            query=args.query,
            path=args.path,
            include_subdirectories=args.include_subdirectories,
            search_in_file_names=args.search_in_file_names,
            search_in_file_contents=args.search_in_file_contents,
            max_results=args.max_results or self.default_max_results,
        )
        return [e.model_dump(mode="json") for e in self.fs.search(query)]

    def fs_read(self, args: FsReadIn) -> str:
        log_tool_call(logger, "fs_read", args.model_dump())
        return self.fs.read_text(args.path)

    def fs_write(self, args: FsWriteIn) -> Dict[str, Any]:
        log_tool_call(logger, "fs_write", args.model_dump())
        return self.fs.write_text(args.path, args.content).model_dump(mode="json")

    def fs_mkdir(self, args: FsMkdirIn) -> str:
        log_tool_call(logger, "fs_mkdir", args.model_dump())
        self.fs.create_directory(args.path)
        return "OK"

    def fs_move(self, args: FsMoveIn) -> str:
        log_tool_call(logger, "fs_move", args.model_dump())
        self.fs.move(args.source, args.destination)
        return "OK"

    def fs_delete(self, args: FsDeleteIn) -> str:
        log_tool_call(logger, "fs_delete", args.model_dump())
        self.fs.delete(args.path)
        return "OK"
