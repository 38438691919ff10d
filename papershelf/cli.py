"""Command-line interface handlers."""

import argparse
import logging
from typing import Optional, Sequence

from papershelf import __version__
from papershelf.config import Configuration, Settings
from papershelf.console import ConsoleUI
from papershelf.database.library import Library, open_library
from papershelf.database.query import QueryParams
from papershelf.errors import PaperShelfError
from papershelf.services.crossref_service import CrossrefService
from papershelf.services.import_service import ImportService

logger = logging.getLogger(__name__)


class PaperShelfCLI:
    """CLI application for papershelf."""

    def __init__(self, settings: Settings, library: Library, ui: Optional[ConsoleUI] = None):
        """Initialize CLI.

        Args:
            settings: Active configuration snapshot
            library: Library opened for this run
            ui: Console output (a default Rich console if not provided)
        """
        self.settings = settings
        self.library = library
        self.ui = ui or ConsoleUI()

    def cmd_import(
        self,
        file: str,
        bibliography: Optional[str],
        entry: Optional[str] = None,
        doi: Optional[str] = None,
        force_move: bool = False,
        force_copy: bool = False,
        tags: Sequence[str] = (),
        contact_email: Optional[str] = None,
    ) -> None:
        """Import a paper and print its destination paths."""
        service = ImportService(self.settings)
        if doi and bibliography is not None:
            raise PaperShelfError("Give either a bibliography file or --doi, not both")
        if doi:
            record = CrossrefService(contact_email).fetch_record(doi)
            imported = service.import_record(file, record, force_move, force_copy, tags)
        else:
            if bibliography is None:
                raise PaperShelfError("Either a bibliography file or --doi is required")
            imported = service.import_file(file, bibliography, entry, force_move, force_copy, tags)
        self.library.add_entry(imported)
        self.ui.imported(imported)

    def cmd_list(self, params: QueryParams) -> None:
        """List entries matching the query."""
        self.ui.display_entries(self.library.find(params))

    def cmd_remove(self, params: QueryParams, delete_files: bool = False, yes: bool = False) -> None:
        """Remove entries matching the query, asking first unless *yes*."""
        confirm = None if yes else self.ui.confirm_removal
        removed = self.library.remove_entries(params, remove_files=delete_files, confirm=confirm)
        if removed:
            self.ui.removed(removed)


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--author", help="Regex matched against each author")
    parser.add_argument("--year", help="Regex matched against the year")
    parser.add_argument("--title", help="Regex matched against the title")
    parser.add_argument("--type", dest="doc_type", help="Regex matched against the entry type")
    parser.add_argument("--general", help="Regex matched against authors, title, year or type")


def _query_params(args: argparse.Namespace) -> QueryParams:
    return QueryParams(
        author=args.author,
        year=args.year,
        title=args.title,
        doc_type=args.doc_type,
        general=args.general,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="papershelf",
        description="Organize, search and view academic papers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # import command
    import_parser = subparsers.add_parser("import", help="Import a document into the library")
    import_parser.add_argument("file", help="File to import")
    import_parser.add_argument(
        "bibliography",
        nargs="?",
        help="Bibliography used to obtain metadata about the file",
    )
    import_parser.add_argument(
        "-e", "--entry", help="Bibliography entry to use if there are multiple"
    )
    import_parser.add_argument("--doi", help="Look the metadata up on Crossref instead")
    import_parser.add_argument("--email", help="Contact email for the Crossref polite pool")
    placement = import_parser.add_mutually_exclusive_group()
    placement.add_argument(
        "-m", "--move", action="store_true", help="Move the file regardless of the configuration"
    )
    placement.add_argument(
        "-c", "--copy", action="store_true", help="Copy the file regardless of the configuration"
    )
    import_parser.add_argument(
        "-t",
        "--tag",
        action="append",
        default=[],
        dest="tags",
        help="Tag the document; may be given several times",
    )

    # list command
    list_parser = subparsers.add_parser("list", help="List entries matching a query")
    _add_query_arguments(list_parser)

    # remove command
    remove_parser = subparsers.add_parser("remove", help="Remove entries matching a query")
    _add_query_arguments(remove_parser)
    remove_parser.add_argument(
        "--delete-files", action="store_true", help="Also delete the files from disk"
    )
    remove_parser.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask for confirmation"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for CLI; returns the process exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ui = ConsoleUI()

    try:
        with Configuration.load() as conf:
            with open_library(conf.settings.library_location) as library:
                cli = PaperShelfCLI(conf.settings, library, ui)
                if args.command == "import":
                    cli.cmd_import(
                        args.file,
                        args.bibliography,
                        entry=args.entry,
                        doi=args.doi,
                        force_move=args.move,
                        force_copy=args.copy,
                        tags=args.tags,
                        contact_email=args.email,
                    )
                elif args.command == "list":
                    cli.cmd_list(_query_params(args))
                elif args.command == "remove":
                    cli.cmd_remove(_query_params(args), args.delete_files, args.yes)
    except PaperShelfError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        ui.error(str(exc))
        return 1
    return 0
