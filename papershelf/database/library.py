"""Library store: a JSON file holding every imported entry."""

import json
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from papershelf import __version__
from papershelf.database.query import QueryParams
from papershelf.errors import FileRemovalError, LibraryPersistenceError, MonthParseError
from papershelf.models.entry import ImportedEntry

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)\.(\d+)", re.ASCII)

ConfirmCallback = Callable[[list[ImportedEntry]], bool]


@dataclass(frozen=True)
class VersionSpec:
    """A ``major.minor.patch`` version, recorded when a library is created."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "VersionSpec":
        match = _VERSION_RE.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"Version {text!r} is not formatted as major.minor.patch")
        return cls(*(int(part) for part in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass
class LibraryFile:
    """Serialized content of a library: creator version plus ordered entries."""

    creation_version: VersionSpec = field(default_factory=lambda: VersionSpec.parse(__version__))
    entries: list[ImportedEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "creation_version": str(self.creation_version),
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LibraryFile":
        return cls(
            creation_version=VersionSpec.parse(data["creation_version"]),
            entries=[ImportedEntry.from_dict(e) for e in data["entries"]],
        )


class Library:
    """In-memory library bound to its storage path.

    Mutations mark the library dirty; :meth:`close` writes it back.
    """

    def __init__(self, path: Path, content: Optional[LibraryFile] = None, changed: bool = True):
        self.path = Path(path)
        self._content = content or LibraryFile()
        self.changed = changed

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def create(cls, path: Union[str, Path]) -> "Library":
        """Return an empty library; it is dirty so it gets written."""
        return cls(Path(path), LibraryFile(), changed=True)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Library":
        """Load a library file.

        Raises:
            LibraryPersistenceError: On I/O or deserialization failure
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            content = LibraryFile.from_dict(data)
        except OSError as exc:
            raise LibraryPersistenceError(f"I/O error: {exc}") from exc
        except (ValueError, KeyError, TypeError, AttributeError, MonthParseError) as exc:
            # json.JSONDecodeError and malformed digests are ValueErrors
            raise LibraryPersistenceError(f"(De)serialization error in {path}: {exc!r}") from exc
        logger.debug("Loaded %d entries from %s", len(content.entries), path)
        return cls(path, content, changed=False)

    @classmethod
    def open(cls, path: Union[str, Path]) -> "Library":
        """Load *path* if it exists, otherwise create an empty library."""
        path = Path(path)
        if not path.exists():
            logger.info("No library at %s, creating a new one", path)
            return cls.create(path)
        return cls.load(path)

    def store(self) -> None:
        """Serialize the whole library, overwriting its file.

        Raises:
            LibraryPersistenceError: On I/O or serialization failure
        """
        try:
            payload = json.dumps(self._content.to_dict(), ensure_ascii=False, indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as exc:
            raise LibraryPersistenceError(f"I/O error: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise LibraryPersistenceError(f"(De)serialization error: {exc}") from exc
        self.changed = False
        logger.debug("Stored %d entries to %s", len(self._content.entries), self.path)

    def close(self) -> None:
        """Store if changed; a failure is logged and not raised."""
        if not self.changed:
            return
        try:
            self.store()
        except LibraryPersistenceError as exc:
            logger.error("Failed to save library %s: %s", self.path, exc)

    # ── Accessors ─────────────────────────────────────────────────────

    @property
    def creation_version(self) -> VersionSpec:
        return self._content.creation_version

    @property
    def entries(self) -> tuple[ImportedEntry, ...]:
        return tuple(self._content.entries)

    def __len__(self) -> int:
        return len(self._content.entries)

    # ── Mutations ─────────────────────────────────────────────────────

    def add_entry(self, entry: ImportedEntry) -> None:
        self._content.entries.append(entry)
        self.changed = True

    def query(self, params: QueryParams) -> list[int]:
        """Return the indices of entries matching *params*, ascending.

        Raises:
            QueryError: If a pattern is invalid
        """
        compiled = params.compile()
        return [
            i for i, entry in enumerate(self._content.entries)
            if compiled.matches(entry.record)
        ]

    def find(self, params: QueryParams) -> list[ImportedEntry]:
        return [self._content.entries[i] for i in self.query(params)]

    def remove_entries(
        self,
        params: QueryParams,
        remove_files: bool = False,
        confirm: Optional[ConfirmCallback] = None,
    ) -> list[ImportedEntry]:
        """Remove the entries matching *params*.

        Args:
            params: Query selecting the entries
            remove_files: Also delete every file path of the removed entries
            confirm: Receives the matched entries; returning False vetoes
                the whole removal

        Returns:
            The removed entries in library order (empty when vetoed)

        Raises:
            QueryError: If a pattern is invalid
            FileRemovalError: If deleting a file fails
        """
        indices = self.query(params)
        matched = [self._content.entries[i] for i in indices]
        if confirm is not None and not confirm(list(matched)):
            logger.info("Removal of %d entries vetoed", len(matched))
            return []

        failures = []
        # Descending so earlier deletions do not shift later indices
        for i in sorted(indices, reverse=True):
            entry = self._content.entries.pop(i)
            self.changed = True
            if remove_files:
                failures.extend(_remove_files(entry))

        if failures:
            raise FileRemovalError("Failed to delete files: " + "; ".join(failures))
        return matched


def _remove_files(entry: ImportedEntry) -> list[str]:
    failures = []
    for file_path in entry.file_paths:
        try:
            Path(file_path).unlink()
            logger.debug("Deleted %s", file_path)
        except FileNotFoundError:
            logger.warning("File %s already missing", file_path)
        except OSError as exc:
            failures.append(f"{file_path}: {exc}")
    return failures


@contextmanager
def open_library(path: Union[str, Path]) -> Iterator[Library]:
    """Context manager yielding the library at *path*, saved on every exit path."""
    library = Library.open(path)
    try:
        yield library
    finally:
        library.close()
