"""File name assembly from record metadata."""

import re

from papershelf.config import Settings
from papershelf.models.entry import BibliographicRecord

# %F/%f original name, %K/%k key, %A/%a authors, %L/%l author last names,
# %T/%t title, %Y/%y year, %M/%m month. Upper case keeps capitalization.
_PLACEHOLDER_RE = re.compile(r"%([FfKkAaLlTtYyMm])")


def last_name(author: str) -> str:
    """Return the family name of ``"Last, First"`` or ``"First Last"``."""
    if "," in author:
        return author.split(",", 1)[0].strip()
    parts = author.split()
    return parts[-1] if parts else author


def _join_authors(record: BibliographicRecord, settings: Settings) -> tuple[str, str]:
    if settings.max_author_names <= 0 or not record.authors:
        return "", ""
    selected = record.authors[: settings.max_author_names]
    sep = settings.author_separator
    return sep.join(selected), sep.join(last_name(a) for a in selected)


def assemble_name(original_name: str, record: BibliographicRecord, settings: Settings) -> str:
    """Render ``settings.name_pattern`` for *record* (without extension).

    Text substituted for one placeholder is never scanned for further
    placeholders; unknown ``%x`` sequences are kept verbatim.
    """
    authors, last_names = _join_authors(record, settings)
    month = record.month.full_name if record.month else ""
    values = {
        "F": original_name,
        "f": original_name.lower(),
        "K": record.key,
        "k": record.key.lower(),
        "A": authors,
        "a": authors.lower(),
        "L": last_names,
        "l": last_names.lower(),
        "T": record.title,
        "t": record.title.lower(),
        "Y": str(record.year),
        "y": f"{record.year % 100:02d}",
        "M": month,
        "m": month.lower(),
    }
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], settings.name_pattern)
