from __future__ import annotations

import pytest
from starlette.requests import Request

from rootshare.services.file_ops import FileOps, UploadItem
from rootshare.services.paths import RootConfinement


@pytest.fixture
def ops(tmp_path):
    root = tmp_path / 'root'
    root.mkdir()
    return FileOps(RootConfinement.from_path(str(root)), chunk_size=4)


@pytest.fixture
def make_item():
    def _make(name, *chunks: bytes) -> UploadItem:
        async def _gen():
            for chunk in chunks:
                yield chunk

        return UploadItem(name=name, chunks=_gen())

    return _make


@pytest.fixture
def make_request():
    def _make(path: str, method: str = 'GET', client_ip: str = '127.0.0.1') -> Request:
        scope = {
            'type': 'http',
            'http_version': '1.1',
            'method': method,
            'scheme': 'http',
            'path': path,
            'raw_path': path.encode(),
            'query_string': b'',
            'headers': [],
            'client': (client_ip, 40000),
            'server': ('rootshare.test', 80),
        }
        return Request(scope)

    return _make
