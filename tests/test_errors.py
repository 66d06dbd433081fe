from __future__ import annotations

import errno

import pytest

from rootshare.errors import (
    ConflictError,
    ErrorKind,
    InternalFailureError,
    InvalidPathError,
    map_error,
    to_http_exception,
    translate_os_errors,
)


@pytest.mark.parametrize(
    ('code', 'kind'),
    [
        (errno.ENOENT, ErrorKind.NOT_FOUND),
        (errno.EACCES, ErrorKind.PERMISSION_DENIED),
        (errno.EPERM, ErrorKind.PERMISSION_DENIED),
        (errno.EEXIST, ErrorKind.CONFLICT),
        (errno.ENOTEMPTY, ErrorKind.CONFLICT),
        (errno.ENOTDIR, ErrorKind.NOT_A_DIRECTORY),
        (errno.EISDIR, ErrorKind.IS_A_DIRECTORY),
        (errno.EINVAL, ErrorKind.INVALID_PATH),
        (errno.ENAMETOOLONG, ErrorKind.INVALID_PATH),
        (errno.ENOSPC, ErrorKind.INTERNAL_FAILURE),
        (errno.EXDEV, ErrorKind.INTERNAL_FAILURE),
    ],
)
def test_map_error_classifies_os_errors(code, kind):
    assert map_error(OSError(code, 'boom')).kind is kind


def test_internal_failure_keeps_os_message_without_filename():
    error = map_error(OSError(errno.ENOSPC, 'No space left on device', '/srv/private/file.bin'))

    assert isinstance(error, InternalFailureError)
    assert error.message == 'No space left on device'
    assert '/srv/private' not in error.message


def test_map_error_passes_file_op_errors_through():
    original = ConflictError('taken')

    assert map_error(original) is original


def test_map_error_wraps_unknown_exceptions():
    error = map_error(ValueError('weird'))

    assert error.kind is ErrorKind.INTERNAL_FAILURE
    assert error.message == 'weird'


def test_translate_os_errors_chains_original():
    with pytest.raises(InvalidPathError) as exc:
        with translate_os_errors():
            raise OSError(errno.ELOOP, 'Too many levels of symbolic links')

    assert isinstance(exc.value.__cause__, OSError)


def test_status_codes_are_distinct_per_kind():
    statuses = {
        ErrorKind.INVALID_PATH: 400,
        ErrorKind.PERMISSION_DENIED: 403,
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.CONFLICT: 409,
        ErrorKind.NOT_A_DIRECTORY: 422,
        ErrorKind.IS_A_DIRECTORY: 422,
        ErrorKind.INTERNAL_FAILURE: 500,
    }
    for kind, status in statuses.items():
        assert kind.status_code == status


def test_to_http_exception_carries_code_header():
    exc = to_http_exception(ConflictError())

    assert exc.status_code == 409
    assert exc.detail == 'Destination already exists'
    assert exc.headers == {'X-Error-Code': 'conflict'}
