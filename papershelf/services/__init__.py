"""Service layer."""

from papershelf.services.bibtex_service import PARSERS, parse_bibtex
from papershelf.services.crossref_service import CrossrefService
from papershelf.services.import_service import ImportService, select_record

__all__ = [
    "CrossrefService",
    "ImportService",
    "PARSERS",
    "parse_bibtex",
    "select_record",
]
