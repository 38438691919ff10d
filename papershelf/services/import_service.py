"""Import pipeline: bibliography → record → digest → file placement."""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Sequence, Union

from papershelf.config import Settings
from papershelf.errors import (
    BibliographyEncodingError,
    CorruptFilePathError,
    ImportIOError,
    RecordSelectionError,
    UnknownFileTypeError,
)
from papershelf.models.entry import BibliographicRecord, ImportedEntry
from papershelf.services.bibtex_service import PARSERS
from papershelf.utils.digest import file_digest
from papershelf.utils.naming import assemble_name

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def select_record(
    records: Sequence[BibliographicRecord],
    key: Optional[str] = None,
) -> BibliographicRecord:
    """Pick the record to import.

    With *key*, return the record carrying it; without, require exactly one
    record.

    Raises:
        RecordSelectionError: Listing every known key
    """
    known_keys = [r.key for r in records]
    if key is not None:
        for record in records:
            if record.key == key:
                return record
        raise RecordSelectionError(f"Key {key} unknown", known_keys)
    if len(records) == 1:
        return records[0]
    if not records:
        raise RecordSelectionError("No bibliography entries in file", known_keys)
    raise RecordSelectionError(
        "Multiple bibliography entries in file, please specify a key", known_keys
    )


def split_file_name(file_path: PathLike) -> tuple[str, str]:
    """Return ``(stem, extension)`` of *file_path*, extension without the dot.

    Raises:
        CorruptFilePathError: If stem or extension is missing or not UTF-8
    """
    path = Path(file_path)
    stem, suffix = path.stem, path.suffix
    if not stem or not suffix or suffix == ".":
        raise CorruptFilePathError(f"File path corrupt: {path} has no file name or extension")
    try:
        path.name.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CorruptFilePathError(
            f"File path corrupt: file name {path.name!r} not valid UTF-8"
        ) from exc
    return stem, suffix[1:]


def _safe_file_name(name: str) -> str:
    for sep in filter(None, (os.sep, os.altsep)):
        name = name.replace(sep, "-")
    return name


class ImportService:
    """Turns a paper file plus its metadata into an :class:`ImportedEntry`."""

    def __init__(self, settings: Settings):
        """Initialize import service.

        Args:
            settings: Active configuration snapshot
        """
        self.settings = settings

    # ── Bibliography handling ─────────────────────────────────────────

    def read_bibliography(self, bibliography_path: PathLike) -> list[BibliographicRecord]:
        """Read a bibliography file and parse it by extension.

        Raises:
            ImportIOError: If the file cannot be read
            BibliographyEncodingError: If it is not UTF-8
            UnknownFileTypeError: If no parser handles its extension
        """
        path = Path(bibliography_path)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise ImportIOError(f"I/O error: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BibliographyEncodingError(f"File not valid UTF-8: {exc}") from exc

        if not path.suffix:
            raise UnknownFileTypeError("File type unknown: file has no extension.")
        extension = path.suffix[1:]
        parser = PARSERS.get(extension.lower())
        if parser is None:
            raise UnknownFileTypeError(f"File type unknown: file extension {extension} not known.")
        return parser(text)

    def import_file(
        self,
        file_path: PathLike,
        bibliography_path: PathLike,
        key: Optional[str] = None,
        force_move: bool = False,
        force_copy: bool = False,
        tags: Sequence[str] = (),
    ) -> ImportedEntry:
        """Import *file_path* using the record from *bibliography_path*.

        Args:
            file_path: Paper file to place into the document root
            bibliography_path: Bibliography describing the paper
            key: Citation key to use when the bibliography has several
            force_move: Move regardless of the configuration
            force_copy: Copy regardless of the configuration
            tags: One destination per tag (``root/tag/name``)

        Raises:
            ImportFailedError: On any failure; nothing is rolled back
        """
        records = self.read_bibliography(bibliography_path)
        record = select_record(records, key)
        return self.import_record(file_path, record, force_move, force_copy, tags)

    # ── Placement ─────────────────────────────────────────────────────

    def import_record(
        self,
        file_path: PathLike,
        record: BibliographicRecord,
        force_move: bool = False,
        force_copy: bool = False,
        tags: Sequence[str] = (),
    ) -> ImportedEntry:
        """Digest and place *file_path* for an already selected *record*."""
        if force_move and force_copy:
            raise ValueError("force_move and force_copy are mutually exclusive")

        stem, extension = split_file_name(file_path)
        try:
            digest = file_digest(file_path)
        except OSError as exc:
            raise ImportIOError(f"I/O error: {exc}") from exc

        name = _safe_file_name(f"{assemble_name(stem, record, self.settings)}.{extension}")
        paths = self.destination_paths(name, tags)
        move = force_move or (not force_copy and self.settings.move_files)
        self._place(Path(file_path), paths, move)

        return ImportedEntry(
            record=record,
            tags=list(tags),
            file_paths=[str(p) for p in paths],
            digest=digest,
        )

    def destination_paths(self, name: str, tags: Sequence[str] = ()) -> list[Path]:
        """Return ``[root/name]`` or ``[root/tag/name, ...]`` for *tags*."""
        root = self.settings.document_location
        if not tags:
            return [root / name]
        return [root / tag / name for tag in tags]

    def _place(self, source: Path, paths: list[Path], move: bool) -> None:
        """Move or copy *source* to ``paths[0]`` and hard-link the others to it."""
        first = paths[0]
        try:
            for i, path in enumerate(paths):
                path.parent.mkdir(parents=True, exist_ok=True)
                if i > 0:
                    os.link(first, path)
                    logger.debug("Linked %s -> %s", path, first)
                elif move:
                    shutil.move(str(source), str(first))
                    logger.debug("Moved %s -> %s", source, first)
                else:
                    shutil.copy2(str(source), str(first))
                    logger.debug("Copied %s -> %s", source, first)
        except OSError as exc:
            raise ImportIOError(f"I/O error: {exc}") from exc
