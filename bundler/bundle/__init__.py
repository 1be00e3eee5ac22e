from .reader import unpack, unpack_tree
from .schema import MetaRecorder, serialize_tree
from .writer import Packager, package, write_bundle

__all__ = [
    "MetaRecorder",
    "Packager",
    "package",
    "serialize_tree",
    "unpack",
    "unpack_tree",
    "write_bundle",
]
