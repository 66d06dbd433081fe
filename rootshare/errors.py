from __future__ import annotations

import errno
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from fastapi import HTTPException


class ErrorKind(str, Enum):
    INVALID_PATH = 'invalid_path'
    NOT_FOUND = 'not_found'
    NOT_A_DIRECTORY = 'not_a_directory'
    IS_A_DIRECTORY = 'is_a_directory'
    PERMISSION_DENIED = 'permission_denied'
    CONFLICT = 'conflict'
    INTERNAL_FAILURE = 'internal_failure'

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.INVALID_PATH: 400,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_A_DIRECTORY: 422,
    ErrorKind.IS_A_DIRECTORY: 422,
    ErrorKind.INTERNAL_FAILURE: 500,
}


class FileOpError(Exception):
    kind = ErrorKind.INTERNAL_FAILURE
    default_message = 'Internal file operation failure'

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class InvalidPathError(FileOpError):
    kind = ErrorKind.INVALID_PATH
    default_message = 'Invalid path'


class EntryNotFoundError(FileOpError):
    kind = ErrorKind.NOT_FOUND
    default_message = 'Path not found'


class NotADirectoryFault(FileOpError):
    kind = ErrorKind.NOT_A_DIRECTORY
    default_message = 'Not a directory'


class IsADirectoryFault(FileOpError):
    kind = ErrorKind.IS_A_DIRECTORY
    default_message = 'Is a directory'


class AccessDeniedError(FileOpError):
    kind = ErrorKind.PERMISSION_DENIED
    default_message = 'Permission denied'


class ConflictError(FileOpError):
    kind = ErrorKind.CONFLICT
    default_message = 'Destination already exists'


class InternalFailureError(FileOpError):
    pass


_ERRNO_ERRORS = {
    errno.ENOENT: EntryNotFoundError,
    errno.EACCES: AccessDeniedError,
    errno.EPERM: AccessDeniedError,
    errno.EROFS: AccessDeniedError,
    errno.EEXIST: ConflictError,
    errno.ENOTEMPTY: ConflictError,
    errno.ENOTDIR: NotADirectoryFault,
    errno.EISDIR: IsADirectoryFault,
    errno.EINVAL: InvalidPathError,
    errno.ENAMETOOLONG: InvalidPathError,
    errno.ELOOP: InvalidPathError,
}


def map_error(exc: BaseException) -> FileOpError:
    """Normalize any failure into the file-operation error taxonomy.

    OS errors are classified by errno. Unrecognized errors become an
    internal failure carrying the original message, without the filename
    the OS attached to it.
    """
    if isinstance(exc, FileOpError):
        return exc

    if isinstance(exc, OSError):
        error_cls = _ERRNO_ERRORS.get(exc.errno)
        if error_cls is not None:
            return error_cls()
        return InternalFailureError(exc.strerror or str(exc) or None)

    return InternalFailureError(str(exc) or None)


@contextmanager
def translate_os_errors() -> Iterator[None]:
    try:
        yield
    except FileOpError:
        raise
    except OSError as exc:
        raise map_error(exc) from exc


def to_http_exception(exc: FileOpError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail=exc.message,
        headers={'X-Error-Code': exc.kind.value},
    )
