"""papershelf - a library of academic paper files.

Imports paper files together with their BibTeX metadata, gives them a
deterministic name under a document root and records them in a JSON
library that can be searched with regular expressions.
"""

__version__ = "0.1.0"

from papershelf.config import Settings
from papershelf.models.entry import BibliographicRecord, EntryType, ImportedEntry, Month

__all__ = [
    "BibliographicRecord",
    "EntryType",
    "ImportedEntry",
    "Month",
    "Settings",
    "__version__",
]
