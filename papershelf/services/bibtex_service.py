"""BibTeX parsing service.

The document is cut into ``@type{...}`` blocks first and every block is
handed to pybtex on its own, so a broken block only costs that block.
"""

import logging
import re
from typing import Callable, Iterator, Optional

from pybtex.database import Entry
from pybtex.database.input import bibtex
from pybtex.exceptions import PybtexError

from papershelf.errors import (
    InvalidYearError,
    MissingFieldError,
    RecordParseError,
    UnknownEntryTypeError,
)
from papershelf.models.entry import BibliographicRecord, EntryType, Month

logger = logging.getLogger(__name__)

AUTHOR_SEPARATOR = " and "

_BLOCK_START_RE = re.compile(r"@\s*([A-Za-z]+)\s*([{(])")
_BLOCK_KEY_RE = re.compile(r"@\s*[A-Za-z]+\s*[{(]\s*([^,\s{}()]+)")
_NEXT_BLOCK_RE = re.compile(r"\n\s*@")
_YEAR_RE = re.compile(r"\d+", re.ASCII)


# ---------------------------------------------------------------------------
# Block scanning
# ---------------------------------------------------------------------------

def _block_end(text: str, pos: int, opener: str) -> Optional[int]:
    """Return the index just past the delimiter closing the block at *pos*.

    A ``"`` at brace depth zero opens or closes a quoted value; closing
    delimiters inside it do not end the block.
    """
    closer = "}" if opener == "{" else ")"
    depth = 0
    in_quote = False
    for i in range(pos, len(text)):
        char = text[i]
        if char == '"' and depth == 0:
            in_quote = not in_quote
        elif char == "{":
            depth += 1
        elif char == "}":
            if depth > 0:
                depth -= 1
            elif closer == "}" and not in_quote:
                return i + 1
        elif char == ")" and closer == ")" and depth == 0 and not in_quote:
            return i + 1
    return None


def iter_blocks(text: str) -> Iterator[str]:
    """Yield the raw ``@type{...}`` blocks of a BibTeX document.

    Text between blocks is a comment in BibTeX and is skipped.  A block
    whose braces never balance runs up to the next line starting with ``@``.
    """
    pos = 0
    while True:
        match = _BLOCK_START_RE.search(text, pos)
        if match is None:
            return
        start = match.start()
        end = _block_end(text, match.end(), match.group(2))
        if end is None:
            next_block = _NEXT_BLOCK_RE.search(text, match.end())
            end = next_block.start() + 1 if next_block else len(text)
        yield text[start:end]
        pos = end


def _block_key(block: str) -> str:
    match = _BLOCK_KEY_RE.match(block)
    return match.group(1) if match else "<unknown>"


# ---------------------------------------------------------------------------
# Record conversion
# ---------------------------------------------------------------------------

def parse_author_list(authors: str) -> tuple[str, ...]:
    """Split a BibTeX author field on the literal ``" and "``."""
    return tuple(a.strip() for a in authors.split(AUTHOR_SEPARATOR))


def parse_entry_type(name: str) -> EntryType:
    entry_type = EntryType.from_bibtex(name)
    if entry_type is None:
        raise UnknownEntryTypeError(f"Entry type {name} not known")
    return entry_type


def parse_year(value: str) -> int:
    value = value.strip()
    if not _YEAR_RE.fullmatch(value):
        raise InvalidYearError(f"Failed to parse year: {value!r} is not an unsigned integer")
    return int(value)


def record_from_entry(key: str, entry: Entry) -> BibliographicRecord:
    """Convert a pybtex entry into a record.

    Raises:
        RecordParseError: On unknown type, missing field, bad year or month
    """
    original_fields = {str(name): str(value) for name, value in entry.fields.items()}
    by_name = {name.lower(): value for name, value in original_fields.items()}

    def required(name: str) -> str:
        value = by_name.get(name)
        if value is None:
            raise MissingFieldError(f'Missing tag "{name}"')
        return value

    entry_type = parse_entry_type(entry.type)
    title = required("title")
    authors = parse_author_list(required("author"))
    year = parse_year(required("year"))
    month = Month.parse(by_name["month"]) if "month" in by_name else None

    return BibliographicRecord(
        key=key,
        entry_type=entry_type,
        title=title,
        authors=authors,
        year=year,
        month=month,
        original_fields=original_fields,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_bibtex(text: str) -> list[BibliographicRecord]:
    """Parse a BibTeX document into records, in document order.

    Blocks that fail to parse are logged and skipped; a repeated citation
    key keeps its first occurrence.
    """
    records: list[BibliographicRecord] = []
    seen: set[str] = set()
    macros = dict(bibtex.month_names)

    for block in iter_blocks(text):
        # author stays a plain field so it can be split on " and " verbatim
        parser = bibtex.Parser(macros=macros, person_fields=())
        try:
            data = parser.parse_string(block)
        except PybtexError as exc:
            logger.warning("Failed to load entry %s: %s", _block_key(block), exc)
            continue
        macros = dict(parser.macros)

        for key, entry in data.entries.items():
            if key in seen:
                logger.warning("Failed to load entry %s: duplicate citation key", key)
                continue
            try:
                record = record_from_entry(key, entry)
            except RecordParseError as exc:
                logger.warning("Failed to load entry %s: %s", key, exc)
                continue
            seen.add(key)
            records.append(record)

    logger.debug("Parsed %d record(s)", len(records))
    return records


# Parsers keyed by lower-case bibliography file extension
PARSERS: dict[str, Callable[[str], list[BibliographicRecord]]] = {
    "bib": parse_bibtex,
}
