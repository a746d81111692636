# app/services/paths.py
import os
from pathlib import Path
from typing import Optional, Union

from app.errors import AccessDeniedError

PathLike = Union[str, "os.PathLike[str]"]


class PathResolver:
    """
    Confine caller-supplied relative paths to the home directory.

    Every path is joined with the root and canonicalized (`..`, `.`,
    repeated separators, symlinks) before the containment check, so the
    check runs on what the filesystem would actually touch.
    Comparison is case-insensitive when `case_insensitive` is set; by
    default it follows the platform (`os.path.normcase`).
    """

    def __init__(self, root: Path, case_insensitive: Optional[bool] = None):
        self.root = Path(root).resolve()
        if case_insensitive is None:
            case_insensitive = os.path.normcase("A") == "a"
        self.case_insensitive = case_insensitive
        self._root_str = str(self.root)
        self._root_key = self._key(self._root_str)
        self._prefix = self._root_key if self._root_key.endswith(os.sep) else self._root_key + os.sep

    def _key(self, s: str) -> str:
        s = os.path.normcase(s)
        return s.casefold() if self.case_insensitive else s

    def _clean(self, relative_path: Optional[str]) -> str:
        rel = relative_path or ""
        if "\x00" in rel:
            raise AccessDeniedError()
        # Backslash is a separator on Windows only; on POSIX it is a legal name character.
        if os.sep == "\\":
            rel = rel.replace("/", "\\")
        return rel.lstrip("/" + os.sep)

    def resolve(self, relative_path: Optional[str]) -> Path:
        rel = self._clean(relative_path)
        try:
            p = (self.root / rel).resolve()
        except (OSError, RuntimeError, ValueError) as exc:
            raise AccessDeniedError() from exc
        if not self.is_within_root(p):
            raise AccessDeniedError()
        return p

    def resolve_entry(self, relative_path: Optional[str]) -> Path:
        """
        Location of the entry the caller named, without following a
        symlink in the last component, so the link itself can be moved
        or deleted. The parent directory is canonicalized and must lie
        inside the root.
        """
        rel = self._clean(relative_path)
        lexical = Path(os.path.normpath(os.path.join(self._root_str, rel)))
        if not self.is_within_root(lexical):
            raise AccessDeniedError()
        if self.is_root(lexical):
            return self.root
        return self.resolve(self.to_relative(lexical.parent)) / lexical.name

    def target_within_root(self, path: PathLike) -> bool:
        """True when `path`, with every symlink followed, stays inside the root."""
        try:
            return self.is_within_root(Path(path).resolve())
        except (OSError, RuntimeError):
            return False

    def is_within_root(self, path: PathLike) -> bool:
        key = self._key(os.path.abspath(os.fspath(path)))
        return key == self._root_key or key.startswith(self._prefix)

    def is_root(self, path: PathLike) -> bool:
        return self._key(os.path.abspath(os.fspath(path))) == self._root_key

    def to_relative(self, absolute_path: PathLike) -> str:
        raw = os.fspath(absolute_path)
        if not self.is_within_root(raw):
            return raw
        rest = os.path.abspath(raw)[len(self._root_str):]
        return rest.lstrip(os.sep + "/").replace(os.sep, "/")
