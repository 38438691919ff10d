"""Exception hierarchy.

Every failure surfaced to callers derives from :class:`PaperShelfError`, so
the CLI can report any of them with a single ``except`` clause.
"""


class PaperShelfError(Exception):
    """Base class for all papershelf errors."""


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

class ImportFailedError(PaperShelfError):
    """An import was aborted; the library is left untouched."""


class ImportIOError(ImportFailedError):
    """Reading, copying, moving or linking a file failed."""


class BibliographyEncodingError(ImportFailedError):
    """The bibliography file is not valid UTF-8."""


class RecordParseError(ImportFailedError):
    """A bibliography block could not be turned into a record."""


class UnknownEntryTypeError(RecordParseError):
    """The entry type is not one of the supported BibTeX types."""


class MissingFieldError(RecordParseError):
    """A required field (title, author, year) is absent."""


class InvalidYearError(RecordParseError):
    """The year field is not an unsigned integer."""


class MonthParseError(RecordParseError):
    """The month field could not be interpreted."""


class UnknownMonthError(MonthParseError):
    """The month is neither a known name nor a number."""


class MonthOutOfBoundsError(MonthParseError):
    """The month was given as a number outside 1..12."""


class RecordSelectionError(ImportFailedError):
    """No unique record could be selected from a parsed bibliography."""

    def __init__(self, message: str, known_keys: list[str]):
        super().__init__(f"{message}; known keys are: {known_keys}")
        self.known_keys = known_keys


class UnknownFileTypeError(ImportFailedError):
    """No parser is registered for the bibliography's extension."""


class CorruptFilePathError(ImportFailedError):
    """A path lacks a name or extension, or is not valid UTF-8."""


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------

class LibraryPersistenceError(PaperShelfError):
    """Loading or storing the library file failed."""


class QueryError(PaperShelfError):
    """A query pattern is not a valid regular expression."""


class FileRemovalError(PaperShelfError):
    """Deleting the files of a removed entry failed."""


# ---------------------------------------------------------------------------
# Configuration / remote lookup
# ---------------------------------------------------------------------------

class ConfigurationError(PaperShelfError):
    """Loading or saving the configuration file failed."""


class MetadataFetchError(PaperShelfError):
    """Looking up metadata from Crossref failed."""


class MetadataNetworkError(MetadataFetchError):
    """The request could not be sent or no response arrived."""


class RequestFailedError(MetadataFetchError):
    """Crossref answered with a non-success status."""

    def __init__(self, status_code: int):
        super().__init__(f"Request failed: HTTP {status_code}")
        self.status_code = status_code


class NoMatchError(MetadataFetchError):
    """Crossref returned no usable data for the article."""
