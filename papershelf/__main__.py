"""Entry point for running papershelf as a module or installed script.

Usage:
    papershelf <command> ... / python -m papershelf <command> ...
"""

import sys


def run() -> None:
    """Entry point: dispatch to the CLI and exit with its status."""
    from papershelf.cli import main

    sys.exit(main())


if __name__ == "__main__":
    run()
