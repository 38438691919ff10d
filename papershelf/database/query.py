"""Regex queries over library entries."""

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from papershelf.errors import QueryError
from papershelf.models.entry import BibliographicRecord


@dataclass(frozen=True)
class QueryParams:
    """Regex patterns to filter entries by; ``None`` imposes no constraint.

    ``general`` matches when any author, the title, the year or the type
    name matches it.
    """

    author: Optional[str] = None
    year: Optional[str] = None
    title: Optional[str] = None
    doc_type: Optional[str] = None
    general: Optional[str] = None

    def compile(self) -> "CompiledQuery":
        """Compile all patterns.

        Raises:
            QueryError: If any pattern is not a valid regular expression
        """
        return CompiledQuery(
            author=_compile("author", self.author),
            year=_compile("year", self.year),
            title=_compile("title", self.title),
            doc_type=_compile("type", self.doc_type),
            general=_compile("general", self.general),
        )


def _compile(name: str, pattern: Optional[str]) -> Optional[Pattern[str]]:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise QueryError(f"Invalid regex for {name} ({pattern!r}): {exc}") from exc


@dataclass(frozen=True)
class CompiledQuery:
    author: Optional[Pattern[str]] = None
    year: Optional[Pattern[str]] = None
    title: Optional[Pattern[str]] = None
    doc_type: Optional[Pattern[str]] = None
    general: Optional[Pattern[str]] = None

    def matches(self, record: BibliographicRecord) -> bool:
        year = str(record.year)
        type_name = record.entry_type.value

        if self.author and not any(self.author.search(a) for a in record.authors):
            return False
        if self.year and not self.year.search(year):
            return False
        if self.title and not self.title.search(record.title):
            return False
        if self.doc_type and not self.doc_type.search(type_name):
            return False
        if self.general:
            return (
                any(self.general.search(a) for a in record.authors)
                or bool(self.general.search(record.title))
                or bool(self.general.search(year))
                or bool(self.general.search(type_name))
            )
        return True
