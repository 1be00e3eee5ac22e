"""Typed errors for the bundler.

Every failure during pack or unpack is one of these. The CLI maps each
to a stable exit code and prints its message once.
"""

from typing import Tuple

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_IO = 11
EXIT_PARSE = 12
EXIT_BUILD = 13
EXIT_FORMAT = 14

EXIT_CODES: Tuple[Tuple[int, str], ...] = (
    (EXIT_OK, "Success"),
    (EXIT_USAGE, "Invalid command line arguments or configuration"),
    (EXIT_GENERIC, "Unexpected failure"),
    (EXIT_IO, "Filesystem access failure"),
    (EXIT_PARSE, "Malformed config file or build descriptor"),
    (EXIT_BUILD, "Build step failed or artifact missing"),
    (EXIT_FORMAT, "Bundle does not match its meta section"),
)


class BundlerError(Exception):
    """Base error for pack and unpack operations."""

    exit_code: int = EXIT_GENERIC


class BundleIOError(BundlerError):
    """Missing path, permission denied or file/directory mismatch."""

    exit_code = EXIT_IO


class ParseError(BundlerError):
    """Config file or build descriptor is not the expected JSON."""

    exit_code = EXIT_PARSE


class BuildError(BundlerError):
    """A build step could not be launched, exited non-zero, or left no artifact."""

    exit_code = EXIT_BUILD


class FormatError(BundlerError):
    exit_code = EXIT_FORMAT
