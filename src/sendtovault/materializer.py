"""Write incoming notes into the vault as markdown files.

Every note lands at ``<inbox>/<sanitized title>.md``.  When a file already
sits at that exact path it is overwritten in place; otherwise a new file is
created.  Identity is inferred from the derived path alone, so an unrelated
file that happens to have the same name is overwritten too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

from loguru import logger

from sendtovault.config import DEFAULT_INBOX_FOLDER
from sendtovault.errors import NoteWriteError
from sendtovault.note import NoteRecord

# Characters that are illegal in file names on at least one major platform
_ILLEGAL_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_PLACEHOLDER = "_"
_FALLBACK_TITLE = "Untitled"


def sanitize_title(title: str) -> str:
    """Replace file-name-illegal characters in *title* with ``_``."""
    cleaned = _ILLEGAL_RE.sub(_PLACEHOLDER, title).strip()
    return cleaned or _FALLBACK_TITLE


# ---------------------------------------------------------------------------
# File-system capability
# ---------------------------------------------------------------------------


@runtime_checkable
class VaultFS(Protocol):
    """Vault-relative file operations; paths use ``/`` separators."""

    def exists(self, path: str) -> bool: ...
    def create_folder(self, path: str) -> None: ...
    def create(self, path: str, content: str) -> None: ...
    def modify(self, path: str, content: str) -> None: ...


class LocalVaultFS:
    """:class:`VaultFS` over a directory on disk."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def _abs(self, path: str) -> Path:
        return self.root.joinpath(*PurePosixPath(path).parts)

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def create_folder(self, path: str) -> None:
        self._abs(path).mkdir(parents=True, exist_ok=True)

    def create(self, path: str, content: str) -> None:
        data = content.encode("utf-8")
        target = self._abs(path)
        # "x" refuses to clobber a file that appeared since exists() was checked
        with open(target, "xb") as fh:
            try:
                fh.write(data)
            except OSError:
                fh.close()
                target.unlink(missing_ok=True)
                raise

    def modify(self, path: str, content: str) -> None:
        data = content.encode("utf-8")
        target = self._abs(path)
        if not target.is_file():
            raise FileNotFoundError(f"no file to modify at {target}")
        target.write_bytes(data)


# ---------------------------------------------------------------------------
# Materializer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MaterializeResult:
    path: str
    #: False when an existing file was overwritten
    created: bool


class NoteMaterializer:
    def __init__(self, fs: VaultFS, *, folder: str = DEFAULT_INBOX_FOLDER) -> None:
        self.fs = fs
        self.folder = folder.strip("/")

    def target_path(self, note: NoteRecord) -> str:
        return f"{self.folder}/{sanitize_title(note.title)}.md"

    def materialize(self, note: NoteRecord) -> MaterializeResult:
        """Write *note* to its derived path, overwriting any file already there.

        Raises :class:`NoteWriteError` when the vault refuses the write.
        """
        path = self.target_path(note)
        try:
            if not self.fs.exists(self.folder):
                self.fs.create_folder(self.folder)
            if self.fs.exists(path):
                self.fs.modify(path, note.markdown)
                created = False
            else:
                self.fs.create(path, note.markdown)
                created = True
        except (OSError, UnicodeError) as exc:
            raise NoteWriteError(note.title, path, exc) from exc

        logger.debug("{} {} for note {}", "Created" if created else "Overwrote", path, note.id)
        return MaterializeResult(path=path, created=created)
