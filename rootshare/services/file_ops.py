from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from secrets import token_hex
from typing import AsyncIterator, Iterable, Optional

import aiofiles
import aiofiles.os

from ..errors import (
    ConflictError,
    EntryNotFoundError,
    ErrorKind,
    FileOpError,
    InvalidPathError,
    IsADirectoryFault,
    NotADirectoryFault,
    map_error,
    translate_os_errors,
)
from .paths import RootConfinement, validate_name, validate_path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    is_directory: bool
    size: int
    updated_at: datetime


@dataclass
class UploadItem:
    name: Optional[str]
    chunks: AsyncIterator[bytes]


@dataclass(frozen=True)
class UploadFailure:
    name: Optional[str]
    kind: ErrorKind
    message: str


@dataclass
class UploadReport:
    stored: list[str] = field(default_factory=list)
    failed: list[UploadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class Download:
    path: Path
    name: str
    size: int
    chunk_size: int = DEFAULT_CHUNK_SIZE

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        async with aiofiles.open(self.path, 'rb') as handle:
            while chunk := await handle.read(self.chunk_size):
                yield chunk


class FileOps:
    """File operations confined to a single shared root.

    Every public method takes virtual paths, resolves them through the
    confinement first, and raises only ``FileOpError`` subclasses.
    Nothing here locks: concurrent operations on overlapping paths rely on
    the atomicity of the underlying rename/unlink calls.
    """

    def __init__(self, confinement: RootConfinement, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.confinement = confinement
        self.chunk_size = chunk_size

    @property
    def root(self) -> Path:
        return self.confinement.root

    def safe_path(self, rel: Optional[str]) -> Path:
        return self.confinement.resolve(rel)

    def list_dir(self, rel: Optional[str]) -> list[DirectoryEntry]:
        target = self.safe_path(rel)
        with translate_os_errors():
            if not target.exists():
                raise EntryNotFoundError('Directory not found')
            if not target.is_dir():
                raise NotADirectoryFault()

            items: list[DirectoryEntry] = []
            for entry in target.iterdir():
                # vanished or dangling entries are left out of the listing
                try:
                    st = entry.stat()
                except OSError:
                    continue
                items.append(
                    DirectoryEntry(
                        name=entry.name,
                        is_directory=stat.S_ISDIR(st.st_mode),
                        size=st.st_size,
                        updated_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    )
                )
        return items

    async def receive(self, rel: Optional[str], items: Iterable[UploadItem]) -> UploadReport:
        """Stream each item into the destination directory.

        Items are stored independently: a failed item is reported and the
        rest continue, and earlier stored items stay in place. A failed
        item never leaves a partial file under its final name.
        """
        directory = self.safe_path(rel)
        with translate_os_errors():
            if await aiofiles.os.path.exists(directory) and not await aiofiles.os.path.isdir(directory):
                raise NotADirectoryFault('Upload destination is not a directory')
            await aiofiles.os.makedirs(directory, exist_ok=True)

        report = UploadReport()
        for item in items:
            try:
                await self._store(directory, item)
            except (FileOpError, OSError) as exc:
                error = map_error(exc)
                logger.warning('Upload of %r failed: %s', item.name, error.message)
                report.failed.append(UploadFailure(item.name, error.kind, error.message))
            else:
                logger.info('Stored upload %r in %s', item.name, directory)
                report.stored.append(item.name)
        return report

    async def _store(self, directory: Path, item: UploadItem) -> Path:
        target = directory / validate_name(item.name)
        partial = directory / f'.upload-{token_hex(8)}.part'
        try:
            async with aiofiles.open(partial, 'xb') as handle:
                async for chunk in item.chunks:
                    await handle.write(chunk)
                await handle.flush()
                await aiofiles.os.wrap(os.fsync)(handle.fileno())
            await aiofiles.os.replace(partial, target)
        except BaseException:
            if await aiofiles.os.path.exists(partial):
                await aiofiles.os.remove(partial)
            raise
        return target

    def download(self, rel: Optional[str]) -> Download:
        target = self.safe_path(rel)
        with translate_os_errors():
            if not target.exists():
                raise EntryNotFoundError('File not found')
            if target.is_dir():
                raise IsADirectoryFault('Downloading a directory is not supported')
            size = target.stat().st_size
        return Download(path=target, name=target.name, size=size, chunk_size=self.chunk_size)

    def mkdir(self, rel: Optional[str], name: str):
        parent = self.safe_path(rel)
        if not name or not name.strip('/'):
            raise InvalidPathError('Directory name is required')
        target = validate_path(name, parent)
        with translate_os_errors():
            target.mkdir(parents=True, exist_ok=True)
        logger.info('Created directory %s', target)

    def delete(self, rel: Optional[str]):
        # a symlink is removed itself, never the tree it points to
        target = self.confinement.resolve_entry(rel)
        if self.confinement.is_root(target):
            raise InvalidPathError('Refusing to delete the shared root')
        with translate_os_errors():
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        logger.info('Deleted %s', target)

    def move(self, source_rel: Optional[str], destination_rel: Optional[str]):
        source = self.confinement.resolve_entry(source_rel)
        destination = self.confinement.resolve_entry(destination_rel)
        if self.confinement.is_root(source):
            raise InvalidPathError('Refusing to move the shared root')

        with translate_os_errors():
            if not os.path.lexists(source):
                raise EntryNotFoundError('Source not found')
            if os.path.lexists(destination):
                raise ConflictError()
            if source in destination.parents:
                raise InvalidPathError('Cannot move a directory into itself')
            if not destination.parent.is_dir():
                raise EntryNotFoundError('Destination directory not found')
            # the existence check above and this rename are not atomic
            shutil.move(str(source), str(destination))
        logger.info('Moved %s to %s', source, destination)
