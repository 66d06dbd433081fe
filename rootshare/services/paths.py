from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import InvalidPathError

logger = logging.getLogger(__name__)


def validate_path(requested_path: Optional[str], root: Path) -> Path:
    """Join a virtual path onto ``root`` and prove it stays inside.

    ``root`` must already be canonical. The joined path is canonicalized
    (``.``/``..`` segments and symlinks resolved) before the containment
    check, so neither traversal segments nor links can leave the root.
    """
    if not requested_path:
        return root
    if '\x00' in requested_path:
        raise InvalidPathError('Path contains a NUL byte')

    try:
        candidate = (root / requested_path.lstrip('/')).resolve(strict=False)
    except (RuntimeError, OSError) as exc:
        # older interpreters raise RuntimeError on symlink loops
        raise InvalidPathError('Path contains a symlink loop') from exc
    if root != candidate and root not in candidate.parents:
        logger.warning('Rejected path outside root: %r', requested_path)
        raise InvalidPathError('Path escapes the shared root')
    return candidate


def validate_name(name: Optional[str]) -> str:
    if not name or name in {'.', '..'}:
        raise InvalidPathError('Invalid file name')
    if '/' in name or '\\' in name or '\x00' in name:
        raise InvalidPathError('File name must not contain path separators')
    return name


@dataclass(frozen=True)
class RootConfinement:
    root: Path

    @classmethod
    def from_path(cls, raw: str) -> 'RootConfinement':
        return cls(Path(raw).expanduser().resolve(strict=False))

    def resolve(self, virtual_path: Optional[str]) -> Path:
        return validate_path(virtual_path, self.root)

    def resolve_entry(self, virtual_path: Optional[str]) -> Path:
        """Locate the directory entry named by ``virtual_path`` itself.

        The parent is canonicalized and confined like any other path, but
        the last component is kept as given, so a symlink there refers to
        the link and not to its target.
        """
        trimmed = (virtual_path or '').rstrip('/')
        parent, _, name = trimmed.rpartition('/')
        if name in {'', '.', '..'}:
            return self.resolve(virtual_path)
        if '\x00' in name:
            raise InvalidPathError('Path contains a NUL byte')
        return self.resolve(parent) / name

    def is_root(self, path: Path) -> bool:
        return path == self.root
