# app/services/listing.py
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from app.errors import AccessDeniedError
from app.models import DirectoryListing, FileSystemEntry
from app.services.paths import PathResolver

logger = logging.getLogger(__name__)


def _mtime(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def file_entry(resolver: PathResolver, path: Path, st: Optional[os.stat_result] = None) -> FileSystemEntry:
    st = st or path.stat()
    return FileSystemEntry.file(
        name=path.name,
        path=resolver.to_relative(path),
        size=st.st_size,
        last_modified=_mtime(st),
        extension=path.suffix,
    )


def directory_entry(resolver: PathResolver, path: Path,
                    st: Optional[os.stat_result] = None) -> FileSystemEntry:
    st = st or path.stat()
    return FileSystemEntry.directory(
        name=path.name,
        path=resolver.to_relative(path),
        last_modified=_mtime(st),
    )


def _by_name(entry: FileSystemEntry):
    return entry.name.casefold(), entry.name


class DirectoryLister:
    """
    Typed listing of a directory's immediate children.
    Never raises: a missing, denied or unreadable directory comes back as
    `DirectoryListing(exists=False, error_message=...)`.
    """

    def __init__(self, resolver: PathResolver):
        self.resolver = resolver

    def list(self, relative_path: Optional[str]) -> DirectoryListing:
        requested = relative_path or ""
        try:
            directory = self.resolver.resolve(relative_path)
        except AccessDeniedError as exc:
            logger.warning("list denied for requested path %r", requested)
            return DirectoryListing.missing(requested, exc.message)

        if not directory.is_dir():
            return DirectoryListing.missing(requested, "Directory does not exist")

        try:
            dirs: List[FileSystemEntry] = []
            files: List[FileSystemEntry] = []
            with os.scandir(directory) as it:
                for child in it:
                    child_path = directory / child.name
                    if child.is_symlink() and not self.resolver.target_within_root(child_path):
                        logger.debug("Skipping link leaving the home directory: %s", child.name)
                        continue
                    if child.is_dir():
                        dirs.append(directory_entry(self.resolver, child_path, child.stat()))
                    elif child.is_file():
                        files.append(file_entry(self.resolver, child_path, child.stat()))
        except OSError as exc:
            logger.error("Error listing directory %r: %s", requested, exc)
            return DirectoryListing.missing(requested, exc.strerror or str(exc))

        items = sorted(dirs, key=_by_name) + sorted(files, key=_by_name)

        parent_path = None
        if not self.resolver.is_root(directory) and self.resolver.is_within_root(directory.parent):
            parent_path = self.resolver.to_relative(directory.parent)

        return DirectoryListing.existing(self.resolver.to_relative(directory), items, parent_path)
