"""Bibliographic record and library entry models."""

import hashlib
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from papershelf.errors import MonthOutOfBoundsError, UnknownMonthError

DIGEST_SIZE = hashlib.sha256().digest_size

_NUMBER_RE = re.compile(r"\d+", re.ASCII)


class EntryType(Enum):
    """Publication category; covers every standard BibTeX entry type."""

    ARTICLE = "Article"
    BOOK = "Book"
    BOOKLET = "Booklet"
    CONFERENCE = "Conference"
    IN_BOOK = "InBook"
    IN_COLLECTION = "InCollection"
    IN_PROCEEDINGS = "InProceedings"
    MANUAL = "Manual"
    MASTER_THESIS = "MasterThesis"
    THESIS = "Thesis"
    MISC = "Misc"
    PHD_THESIS = "PhdThesis"
    PROCEEDINGS = "Proceedings"
    TECH_REPORT = "TechReport"
    UNPUBLISHED = "Unpublished"

    @classmethod
    def from_bibtex(cls, name: str) -> Optional["EntryType"]:
        """Look up a BibTeX entry type name (case-insensitive)."""
        return _BIBTEX_TYPES.get(name.strip().lower())

    def __str__(self) -> str:
        return self.value


_BIBTEX_TYPES: dict[str, EntryType] = {
    "article": EntryType.ARTICLE,
    "book": EntryType.BOOK,
    "booklet": EntryType.BOOKLET,
    "conference": EntryType.CONFERENCE,
    "inbook": EntryType.IN_BOOK,
    "incollection": EntryType.IN_COLLECTION,
    "inproceedings": EntryType.IN_PROCEEDINGS,
    "manual": EntryType.MANUAL,
    "masterthesis": EntryType.MASTER_THESIS,
    "mastersthesis": EntryType.MASTER_THESIS,
    "thesis": EntryType.THESIS,
    "misc": EntryType.MISC,
    "phdthesis": EntryType.PHD_THESIS,
    "proceedings": EntryType.PROCEEDINGS,
    "techreport": EntryType.TECH_REPORT,
    "unpublished": EntryType.UNPUBLISHED,
}


class Month(Enum):
    """Calendar month; the value is the month number."""

    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12

    @property
    def full_name(self) -> str:
        return _MONTH_NAMES[self.value - 1]

    @property
    def abbreviation(self) -> str:
        """Three-letter name, as stored in the library file."""
        return self.name.title()

    @classmethod
    def from_number(cls, number: int) -> "Month":
        if not 1 <= number <= 12:
            raise MonthOutOfBoundsError(f"Failed to parse month: month {number} out of bounds")
        return cls(number)

    @classmethod
    def parse(cls, text: str) -> "Month":
        """Parse ``"3"``, ``"mar"``, ``"March"`` and the like.

        Raises:
            MonthOutOfBoundsError: numeric month outside 1..12
            UnknownMonthError: anything else that is not a month
        """
        text = text.strip()
        if _NUMBER_RE.fullmatch(text):
            return cls.from_number(int(text))
        prefix = text[:3].lower()
        for month in cls:
            if month.name.lower() == prefix:
                return month
        raise UnknownMonthError(f"Failed to parse month: month {prefix!r} unknown")

    def __str__(self) -> str:
        return self.full_name


_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


@dataclass(frozen=True)
class BibliographicRecord:
    """Citation metadata of one document, immutable once parsed."""

    key: str
    entry_type: EntryType
    title: str
    authors: tuple[str, ...]
    year: int
    month: Optional[Month] = None
    original_fields: Optional[dict[str, str]] = field(default=None, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "entry_type": self.entry_type.value,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "month": self.month.abbreviation if self.month else None,
            "original_fields": dict(self.original_fields) if self.original_fields is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BibliographicRecord":
        month = data.get("month")
        original_fields = data.get("original_fields")
        return cls(
            key=str(data["key"]),
            entry_type=EntryType(data["entry_type"]),
            title=str(data["title"]),
            authors=tuple(str(a) for a in data["authors"]),
            year=int(data["year"]),
            month=Month.parse(month) if month else None,
            original_fields=(
                {str(k): str(v) for k, v in original_fields.items()}
                if original_fields is not None
                else None
            ),
        )


@dataclass
class ImportedEntry:
    """A record together with where its file was placed and the file's digest."""

    record: BibliographicRecord
    tags: list[str]
    file_paths: list[str]
    digest: bytes

    def __post_init__(self) -> None:
        if not self.file_paths:
            raise ValueError("An imported entry needs at least one file path")
        if len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(self.digest)}")

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()

    def to_dict(self) -> dict[str, Any]:
        return {
            "record": self.record.to_dict(),
            "tags": list(self.tags),
            "file_paths": list(self.file_paths),
            "digest": self.hexdigest,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportedEntry":
        return cls(
            record=BibliographicRecord.from_dict(data["record"]),
            tags=[str(t) for t in data["tags"]],
            file_paths=[str(p) for p in data["file_paths"]],
            digest=bytes.fromhex(data["digest"]),
        )
