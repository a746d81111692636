# app/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class FileSystemEntry(BaseModel):
    """
    One child of a directory or one search hit.
    `size` and `extension` are only set for files.
    """
    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    name: str
    path: str
    last_modified: Optional[datetime] = None
    size: Optional[int] = None
    extension: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def file(cls, name: str, path: str, size: int, last_modified: Optional[datetime] = None,
             extension: str = "") -> "FileSystemEntry":
        return cls(kind=EntryKind.FILE, name=name, path=path, size=size,
                   last_modified=last_modified, extension=extension)

    @classmethod
    def directory(cls, name: str, path: str,
                  last_modified: Optional[datetime] = None) -> "FileSystemEntry":
        return cls(kind=EntryKind.DIRECTORY, name=name, path=path, last_modified=last_modified)


class DirectoryListing(BaseModel):
    """
    Either an existing directory with its items, or a missing one with
    no items and an error message. Use `existing()` / `missing()`.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    items: List[FileSystemEntry] = Field(default_factory=list)
    file_count: int = 0
    directory_count: int = 0
    total_size: int = 0
    parent_path: Optional[str] = None
    exists: bool = True
    error_message: Optional[str] = None

    @classmethod
    def existing(cls, path: str, items: List[FileSystemEntry],
                 parent_path: Optional[str] = None) -> "DirectoryListing":
        files = [i for i in items if i.kind is EntryKind.FILE]
        return cls(
            path=path,
            items=list(items),
            file_count=len(files),
            directory_count=len(items) - len(files),
            total_size=sum(f.size or 0 for f in files),
            parent_path=parent_path,
            exists=True,
        )

    @classmethod
    def missing(cls, path: str, error_message: str) -> "DirectoryListing":
        if not error_message:
            raise ValueError("error_message is required for a missing directory")
        return cls(path=path, exists=False, error_message=error_message)


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    path: Optional[str] = None
    include_subdirectories: bool = True
    search_in_file_names: bool = True
    search_in_file_contents: bool = False
    max_results: int = Field(100, gt=0)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Search query cannot be empty")
        return v


class UploadOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    file_path: Optional[str] = None
    file_size: Optional[int] = None

    @classmethod
    def ok(cls, file_path: str, file_size: int) -> "UploadOutcome":
        return cls(success=True, message="File uploaded successfully",
                   file_path=file_path, file_size=file_size)

    @classmethod
    def failed(cls, message: str) -> "UploadOutcome":
        return cls(success=False, message=message)


class HomeDirectoryInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    exists: bool
    error_message: Optional[str] = None
