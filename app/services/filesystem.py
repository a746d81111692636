# app/services/filesystem.py
import logging
import posixpath
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional

from app.errors import AccessDeniedError, FileBrowserError
from app.models import DirectoryListing, FileSystemEntry, HomeDirectoryInfo, SearchQuery, UploadOutcome
from app.services.listing import DirectoryLister
from app.services.mutations import MutationOperations
from app.services.paths import PathResolver
from app.services.search import DEFAULT_TEXT_EXTENSIONS, SearchEngine

logger = logging.getLogger(__name__)


class FileSystemService:
    """
    Sandbox all file operations inside the home directory.

    This is the single contract the REST and MCP adapters call.
    Listing and search report problems in their result; the mutating
    operations raise `FileBrowserError` subclasses, except `write` /
    `upload` which return an `UploadOutcome`.
    """

    def __init__(self, root: Path, *, case_insensitive: Optional[bool] = None,
                 text_extensions: Iterable[str] = DEFAULT_TEXT_EXTENSIONS,
                 chunk_size: int = 1024 * 1024):
        root = Path(root).expanduser()
        root.mkdir(parents=True, exist_ok=True)
        self.resolver = PathResolver(root, case_insensitive=case_insensitive)
        self.root = self.resolver.root
        self.lister = DirectoryLister(self.resolver)
        self.searcher = SearchEngine(self.resolver, text_extensions=text_extensions)
        self.mutations = MutationOperations(self.resolver, chunk_size=chunk_size)

    # ---------- Reading ----------

    def home_directory(self) -> str:
        return str(self.root)

    def home_directory_info(self) -> HomeDirectoryInfo:
        exists = self.root.is_dir()
        return HomeDirectoryInfo(
            path=str(self.root),
            exists=exists,
            error_message=None if exists else "Home directory does not exist",
        )

    def list_directory(self, relative_path: Optional[str] = "") -> DirectoryListing:
        return self.lister.list(relative_path)

    def search(self, query: SearchQuery) -> List[FileSystemEntry]:
        return self.searcher.search(query)

    def open_for_read(self, relative_path: str) -> BinaryIO:
        return self.mutations.open_for_read(relative_path)

    def file_exists(self, relative_path: str) -> bool:
        try:
            return self.resolver.resolve(relative_path).is_file()
        except AccessDeniedError:
            return False

    def directory_exists(self, relative_path: str) -> bool:
        try:
            return self.resolver.resolve(relative_path).is_dir()
        except AccessDeniedError:
            return False

    def read_text(self, rel_path: str) -> str:
        with self.open_for_read(rel_path) as f:
            return f.read().decode("utf-8", "replace")

    # ---------- Writing ----------

    def write(self, relative_path: str, source: BinaryIO, size: Optional[int] = None) -> UploadOutcome:
        try:
            written = self.mutations.upload(relative_path, source)
        except FileBrowserError as exc:
            logger.warning("Upload to %r failed: %s", relative_path, exc.message)
            return UploadOutcome.failed(exc.message)
        if size is not None and size != written:
            logger.warning("Upload to %r: declared %d bytes, wrote %d", relative_path, size, written)
        return UploadOutcome.ok(self.resolver.to_relative(self.resolver.resolve(relative_path)), written)

    def upload(self, file_name: str, source: BinaryIO, target_directory: Optional[str] = "",
               size: Optional[int] = None) -> UploadOutcome:
        # Client file names may carry a path; only the base name is kept.
        name = posixpath.basename((file_name or "").replace("\\", "/"))
        if not name or name in (".", ".."):
            return UploadOutcome.failed("A file name is required")
        target = posixpath.join(target_directory or "", name)
        return self.write(target, source, size)

    def write_text(self, rel_path: str, content: str) -> UploadOutcome:
        return self.write(rel_path, BytesIO(content.encode("utf-8")))

    def create_directory(self, relative_path: str) -> None:
        self.mutations.create_directory(relative_path)

    def move(self, source_path: str, destination_path: str) -> None:
        self.mutations.move(source_path, destination_path)

    def delete(self, relative_path: str) -> None:
        self.mutations.delete(relative_path)
