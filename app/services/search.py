# app/services/search.py
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from app.errors import AccessDeniedError
from app.models import FileSystemEntry, SearchQuery
from app.services.listing import file_entry
from app.services.paths import PathResolver

logger = logging.getLogger(__name__)

# Only these are opened for content matching; everything else is treated as binary.
DEFAULT_TEXT_EXTENSIONS = (
    ".txt", ".md", ".json", ".xml", ".html", ".css", ".js",
    ".cs", ".py", ".java", ".cpp", ".h", ".log",
)


class SearchEngine:
    """
    Live directory walk matching file names and/or text contents.

    Name hits come first, then content hits that were not already name hits.
    Only files are returned. A denied or missing start path yields no hits.
    """

    def __init__(self, resolver: PathResolver, text_extensions: Iterable[str] = DEFAULT_TEXT_EXTENSIONS,
                 chunk_size: int = 64 * 1024):
        self.resolver = resolver
        self.text_extensions = frozenset(e.lower() for e in text_extensions)
        self.chunk_size = chunk_size

    def is_text_file(self, path: Path) -> bool:
        return path.suffix.lower() in self.text_extensions

    def search(self, query: SearchQuery) -> List[FileSystemEntry]:
        try:
            start = self.resolver.resolve(query.path)
        except AccessDeniedError:
            logger.warning("search denied for start path %r", query.path)
            return []
        if not start.is_dir():
            return []

        limit = query.max_results
        needle = query.query.lower()
        results: List[FileSystemEntry] = []
        seen: Set[Path] = set()

        try:
            if query.search_in_file_names:
                for path in self._iter_files(start, query.include_subdirectories):
                    if len(results) >= limit:
                        break
                    if needle in path.name.lower():
                        self._collect(path, results, seen)

            if query.search_in_file_contents:
                for path in self._iter_files(start, query.include_subdirectories):
                    if len(results) >= limit:
                        break
                    if path in seen or not self.is_text_file(path):
                        continue
                    if self._contents_match(path, needle):
                        self._collect(path, results, seen)
        except OSError as exc:
            logger.error("Error searching files under %r: %s", query.path or "", exc)

        return results[:limit]

    def _collect(self, path: Path, results: List[FileSystemEntry], seen: Set[Path]) -> None:
        try:
            results.append(file_entry(self.resolver, path))
        except OSError as exc:
            logger.warning("Skipping %s: %s", self.resolver.to_relative(path), exc)
            return
        seen.add(path)

    def _iter_files(self, start: Path, recurse: bool) -> Iterator[Path]:
        if not recurse:
            with os.scandir(start) as it:
                names = sorted(e.name for e in it if e.is_file())
            for name in names:
                if self._inside(start / name):
                    yield start / name
            return

        def on_error(exc: OSError) -> None:
            logger.warning("Cannot enter directory during search: %s", exc.strerror or exc)

        for dirpath, dirnames, filenames in os.walk(start, onerror=on_error):
            dirnames.sort()
            base = Path(dirpath)
            for name in sorted(filenames):
                if self._inside(base / name):
                    yield base / name

    def _inside(self, path: Path) -> bool:
        # A file link pointing out of the home directory is never opened or reported
        if path.is_symlink() and not self.resolver.target_within_root(path):
            logger.debug("Skipping link leaving the home directory: %s", path.name)
            return False
        return True

    def _contents_match(self, path: Path, needle: str) -> bool:
        """
        Stream the file in chunks, keeping a tail of len(needle) - 1
        characters so matches across chunk boundaries are not missed.
        """
        overlap = len(needle) - 1
        tail = ""
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        return False
                    window = tail + chunk.lower()
                    if needle in window:
                        return True
                    tail = window[-overlap:] if overlap else ""
        except OSError as exc:
            logger.warning("Could not read file contents: %s (%s)",
                           self.resolver.to_relative(path), exc.strerror or exc)
            return False

