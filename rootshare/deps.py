from __future__ import annotations

from functools import lru_cache

from .config import settings
from .services.file_ops import FileOps
from .services.paths import RootConfinement


@lru_cache(maxsize=1)
def get_file_ops() -> FileOps:
    return FileOps(RootConfinement.from_path(settings.root_path), chunk_size=settings.upload_chunk_size)
