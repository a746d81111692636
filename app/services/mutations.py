# app/services/mutations.py
import errno
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO

from app.errors import AccessDeniedError, AlreadyExistsError, IOFailureError, NotFoundError
from app.services.paths import PathResolver

logger = logging.getLogger(__name__)


class MutationOperations:
    """
    Create / upload / move / delete under the home directory, plus opening
    files for download. Every path goes through the resolver first; the
    home directory itself can never be moved or deleted.
    Unexpected OSErrors surface as IOFailureError with the cause chained.
    """

    def __init__(self, resolver: PathResolver, chunk_size: int = 1024 * 1024):
        self.resolver = resolver
        self.chunk_size = chunk_size

    def create_directory(self, relative_path: str) -> Path:
        target = self.resolver.resolve(relative_path)
        if target.exists():
            raise AlreadyExistsError(f"Directory already exists: {relative_path}")
        try:
            target.mkdir(parents=True)
        except FileExistsError as exc:
            raise AlreadyExistsError(f"Directory already exists: {relative_path}") from exc
        except OSError as exc:
            raise IOFailureError(_reason(exc)) from exc
        logger.info("Created directory %s", self.resolver.to_relative(target))
        return target

    def upload(self, relative_path: str, source: BinaryIO) -> int:
        target = self.resolver.resolve(relative_path)
        if self.resolver.is_root(target) or target.is_dir():
            raise IOFailureError(f"Cannot write file over a directory: {relative_path}")
        written = 0
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as out:
                while True:
                    chunk = source.read(self.chunk_size)
                    if not chunk:
                        break
                    out.write(chunk)
                    written += len(chunk)
        except OSError as exc:
            raise IOFailureError(_reason(exc)) from exc
        logger.info("Wrote %d bytes to %s", written, self.resolver.to_relative(target))
        return written

    def open_for_read(self, relative_path: str) -> BinaryIO:
        target = self.resolver.resolve(relative_path)
        if not target.is_file():
            raise NotFoundError(f"File not found: {relative_path}")
        try:
            return open(target, "rb")
        except FileNotFoundError as exc:
            raise NotFoundError(f"File not found: {relative_path}") from exc
        except OSError as exc:
            raise IOFailureError(_reason(exc)) from exc

    def move(self, source_path: str, destination_path: str) -> Path:
        # Both endpoints name entries: a symlink is moved as a link.
        src = self.resolver.resolve_entry(source_path)
        dst = self.resolver.resolve_entry(destination_path)

        if self.resolver.is_root(src):
            raise AccessDeniedError("Access denied: the home directory cannot be moved")
        if not (src.is_symlink() or src.is_file() or src.is_dir()):
            raise NotFoundError(f"Source path does not exist: {source_path}")
        if os.path.lexists(dst):
            raise AlreadyExistsError(f"Destination path already exists: {destination_path}")
        if not src.is_symlink() and src.is_dir() and _is_relative_to(dst, src):
            raise IOFailureError("Cannot move a directory into itself")

        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            _rename(src, dst)
        except OSError as exc:
            raise IOFailureError(_reason(exc)) from exc
        logger.info("Moved %s -> %s", self.resolver.to_relative(src), self.resolver.to_relative(dst))
        return dst

    def delete(self, relative_path: str) -> None:
        target = self.resolver.resolve_entry(relative_path)
        if self.resolver.is_root(target):
            raise AccessDeniedError("Access denied: the home directory cannot be deleted")
        try:
            if target.is_symlink():
                target.unlink()
            elif target.is_dir():
                shutil.rmtree(target)
            elif target.is_file():
                target.unlink()
            else:
                raise NotFoundError(f"Path does not exist: {relative_path}")
        except FileNotFoundError as exc:
            raise NotFoundError(f"Path does not exist: {relative_path}") from exc
        except OSError as exc:
            raise IOFailureError(_reason(exc)) from exc
        logger.info("Deleted %s", self.resolver.to_relative(target))


def _rename(src: Path, dst: Path) -> None:
    try:
        os.rename(src, dst)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        # different filesystem: copy then delete
        shutil.move(str(src), str(dst))


def _is_relative_to(path: Path, other: Path) -> bool:
    try:
        path.relative_to(other)
    except ValueError:
        return False
    return True


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)
