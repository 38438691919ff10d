import textwrap
from pathlib import Path

import pytest

from papershelf.config import Settings
from papershelf.models.entry import BibliographicRecord, EntryType, ImportedEntry


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    root = tmp_path / "Papers"
    return Settings(
        document_location=root,
        library_location=root / "library.json",
    )


@pytest.fixture
def write_file(tmp_path: Path):
    def _write(name: str, payload: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(payload).strip() + "\n", encoding="utf-8")
        return path

    return _write


def make_record(
    key: str = "smith2020",
    entry_type: EntryType = EntryType.ARTICLE,
    title: str = "On Cats",
    authors: tuple[str, ...] = ("Alice Smith",),
    year: int = 2020,
    month=None,
) -> BibliographicRecord:
    return BibliographicRecord(
        key=key,
        entry_type=entry_type,
        title=title,
        authors=authors,
        year=year,
        month=month,
        original_fields={"title": title, "author": " and ".join(authors), "year": str(year)},
    )


def make_entry(record: BibliographicRecord, tags=(), paths=None) -> ImportedEntry:
    return ImportedEntry(
        record=record,
        tags=list(tags),
        file_paths=list(paths or [f"/papers/{record.key}.pdf"]),
        digest=bytes(range(32)),
    )
