"""Utility functions."""

from papershelf.utils.digest import file_digest
from papershelf.utils.naming import assemble_name, last_name

__all__ = ["assemble_name", "file_digest", "last_name"]
