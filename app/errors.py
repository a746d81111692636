# app/errors.py
from enum import Enum


class ErrorKind(str, Enum):
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    IO_FAILURE = "io_failure"


class FileBrowserError(Exception):
    """
    Base for every failure a file browser operation reports.
    Callers branch on `kind` instead of on the exception class.
    """

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccessDeniedError(FileBrowserError):
    kind = ErrorKind.ACCESS_DENIED

    # Never carries the attempted path
    def __init__(self, message: str = "Access denied: path is outside the home directory"):
        super().__init__(message)


class NotFoundError(FileBrowserError):
    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(FileBrowserError):
    kind = ErrorKind.ALREADY_EXISTS


class IOFailureError(FileBrowserError):
    kind = ErrorKind.IO_FAILURE
