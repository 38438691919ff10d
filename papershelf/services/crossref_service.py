"""Crossref API service for looking up record metadata by DOI."""

import logging
import re
from typing import Any, Optional

import requests

from papershelf import __version__
from papershelf.errors import (
    MetadataNetworkError,
    NoMatchError,
    RequestFailedError,
)
from papershelf.models.entry import BibliographicRecord, EntryType, Month
from papershelf.utils.naming import last_name

logger = logging.getLogger(__name__)

CROSSREF_API_BASE = "https://api.crossref.org/works"

# Crossref work types → entry types; anything else is Misc
CROSSREF_TYPES: dict[str, EntryType] = {
    "journal-article": EntryType.ARTICLE,
    "book": EntryType.BOOK,
    "monograph": EntryType.BOOK,
    "edited-book": EntryType.BOOK,
    "reference-book": EntryType.BOOK,
    "book-chapter": EntryType.IN_COLLECTION,
    "book-section": EntryType.IN_COLLECTION,
    "book-part": EntryType.IN_BOOK,
    "proceedings-article": EntryType.IN_PROCEEDINGS,
    "proceedings": EntryType.PROCEEDINGS,
    "report": EntryType.TECH_REPORT,
    "dissertation": EntryType.PHD_THESIS,
    "posted-content": EntryType.UNPUBLISHED,
}


def normalize_doi(doi: str) -> str:
    """Normalize DOI by removing URL prefixes and converting to lowercase."""
    doi = doi.strip()
    doi = re.sub(r"^(?:https?://(?:dx\.)?doi\.org/|doi:)", "", doi, flags=re.IGNORECASE)
    return doi.strip().lower()


class CrossrefService:
    """Service for interacting with the Crossref API."""

    def __init__(self, contact_email: Optional[str] = None):
        """Initialize Crossref service.

        Args:
            contact_email: Email for polite pool access (recommended by Crossref)
        """
        self.contact_email = contact_email
        self._headers = self._build_headers()

    def _build_headers(self) -> dict[str, str]:
        """Build HTTP headers with user agent."""
        if self.contact_email:
            return {"User-Agent": f"papershelf/{__version__} (mailto:{self.contact_email})"}
        return {"User-Agent": f"papershelf/{__version__}"}

    def lookup(self, doi: str, timeout: int = 20) -> dict[str, Any]:
        """Look up work metadata by DOI.

        Args:
            doi: DOI to look up
            timeout: Request timeout in seconds

        Returns:
            Crossref work metadata dictionary

        Raises:
            MetadataNetworkError: If the request could not be completed
            RequestFailedError: On a non-success HTTP status
            NoMatchError: If the reply carries no work metadata
        """
        url = f"{CROSSREF_API_BASE}/{requests.utils.quote(normalize_doi(doi))}"
        logger.debug("GET %s", url)
        try:
            response = requests.get(url, headers=self._headers, timeout=timeout)
        except requests.RequestException as exc:
            raise MetadataNetworkError(f"Network error: {exc}") from exc

        if not response.ok:
            raise RequestFailedError(response.status_code)

        try:
            message = response.json().get("message")
        except ValueError as exc:
            raise NoMatchError("Crossref returned an unreadable reply.") from exc
        if not isinstance(message, dict) or not message:
            raise NoMatchError("No data was found for the article.")
        return message

    def fetch_record(self, doi: str, timeout: int = 20) -> BibliographicRecord:
        """Look up *doi* and convert the reply into a record."""
        return self.to_record(self.lookup(doi, timeout=timeout), doi)

    @staticmethod
    def to_record(meta: dict[str, Any], doi: str) -> BibliographicRecord:
        """Convert Crossref work metadata into a record.

        Raises:
            NoMatchError: If title, authors or publication year are missing
        """
        titles = meta.get("title")
        title = titles[0] if isinstance(titles, list) and titles else titles
        if not isinstance(title, str) or not title.strip():
            raise NoMatchError("No data was found for the article.")

        authors = []
        for author in meta.get("author") or []:
            full = " ".join([author.get("given", ""), author.get("family", "")]).strip()
            if not full:
                full = author.get("name", "").strip()
            if full:
                authors.append(full)
        if not authors:
            raise NoMatchError(f"Crossref lists no authors for {doi}.")

        year, month = None, None
        for key in ["published-print", "published-online", "issued", "created"]:
            parts = (meta.get(key) or {}).get("date-parts")
            if isinstance(parts, list) and parts and isinstance(parts[0], list) and parts[0]:
                if parts[0][0] is None:
                    continue
                year = int(parts[0][0])
                if len(parts[0]) > 1 and parts[0][1]:
                    month = Month.from_number(int(parts[0][1]))
                break
        if year is None:
            raise NoMatchError(f"Crossref lists no publication date for {doi}.")

        doi = normalize_doi(meta.get("DOI") or doi)
        original_fields = {"doi": doi}
        container = meta.get("container-title")
        if isinstance(container, list) and container:
            original_fields["journal"] = container[0]
        if meta.get("publisher"):
            original_fields["publisher"] = str(meta["publisher"])

        key = re.sub(r"\W", "", last_name(authors[0])).lower() + str(year)
        return BibliographicRecord(
            key=key,
            entry_type=CROSSREF_TYPES.get(meta.get("type", ""), EntryType.MISC),
            title=" ".join(title.split()),
            authors=tuple(authors),
            year=year,
            month=month,
            original_fields=original_fields,
        )
