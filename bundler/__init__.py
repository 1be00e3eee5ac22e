"""Pack a project directory into one JSON bundle and unpack it again."""

from .bundle import Packager, package, unpack
from .errors import BuildError, BundleIOError, BundlerError, FormatError, ParseError
from .models import BuildDescriptor, MetaSection, NodeKind

__all__ = [
    "BuildDescriptor",
    "BuildError",
    "BundleIOError",
    "BundlerError",
    "FormatError",
    "MetaSection",
    "NodeKind",
    "Packager",
    "ParseError",
    "package",
    "unpack",
]
