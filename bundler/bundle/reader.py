"""Bundle reader - rebuilds a directory tree from a bundle document.

The meta section drives everything: a level without one writes nothing,
which is why a bundle packed with ``strip_meta`` cannot be unpacked.
Nothing is rolled back on failure; files written before the error stay.
"""

import base64
import binascii
import json
from pathlib import Path
from typing import Any, Dict, Union

from loguru import logger

from ..constants import ARTIFACT_FIELD_NAME, BINARY_FILE_EXTENSION, META_SECTION_NAME
from ..errors import BundleIOError, FormatError, ParseError
from ..models import MetaSection, NodeKind


def decode_bytes(payload: str, name: str) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64 payload for {name!r}: {e}") from e


def _check_entry_name(name: str) -> None:
    if name in ("", ".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise FormatError(f"incompatible meta section: {name!r} is not a valid entry name")


def _write_file(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as e:
        raise BundleIOError(f"Could not write {path}: {e}") from e


def unpack_tree(obj: Dict[str, Any], to: Path) -> int:
    """Unpack one level of a bundle into ``to`` and recurse into its directories.

    Args:
        obj: The level's object; consumed entries are removed from it
        to: Existing destination directory for this level

    Returns:
        Number of files written at this level and below
    """
    if META_SECTION_NAME not in obj:
        logger.debug(f"No meta section for {to}, nothing to unpack")
        return 0

    meta = MetaSection.from_json(obj.pop(META_SECTION_NAME))
    written = 0

    for name, kind in meta.tree.items():
        _check_entry_name(name)
        if name not in obj:
            raise FormatError(f"incompatible meta section: {name!r} is declared but missing")
        entry = obj.pop(name)

        if kind is NodeKind.FILE:
            if not isinstance(entry, str):
                raise FormatError(f"incompatible meta section: file {name!r} is not a string")
            _write_file(to / name, decode_bytes(entry, name))
            written += 1
        elif kind is NodeKind.BIN:
            if not isinstance(entry, dict) or not isinstance(entry.get(ARTIFACT_FIELD_NAME), str):
                raise FormatError(f"incompatible meta section: artifact {name!r} has no {ARTIFACT_FIELD_NAME!r} string")
            _write_file(to / (name + BINARY_FILE_EXTENSION), decode_bytes(entry[ARTIFACT_FIELD_NAME], name))
            written += 1
        else:
            if not isinstance(entry, dict):
                raise FormatError(f"incompatible meta section: directory {name!r} is not an object")
            dir_path = to / name
            try:
                dir_path.mkdir(exist_ok=True)
            except OSError as e:
                raise BundleIOError(f"Could not create directory {dir_path}: {e}") from e
            written += unpack_tree(entry, dir_path)

    if meta.config_file is not None:
        _check_entry_name(meta.config_file)
        # an empty config file leaves no fields behind and is not recreated
        if obj:
            config_path = to / meta.config_file
            logger.debug(f"Writing {len(obj)} hoisted fields to {config_path}")
            _write_file(config_path, (json.dumps(obj, indent=2, ensure_ascii=False) + "\n").encode("utf-8"))
            written += 1
    elif obj:
        logger.warning(f"Ignoring {len(obj)} keys in {to} not covered by the meta section")

    return written


def unpack(path: Union[str, Path], to: Union[str, Path]) -> int:
    """Unpack the bundle file at ``path`` into the directory ``to``.

    Returns:
        Number of files written
    """
    path, to = Path(path), Path(to)
    if not path.is_file():
        raise BundleIOError(f"{path} doesn't point to a file")

    try:
        to.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        raise BundleIOError(f"{to} doesn't point to a directory") from e
    except OSError as e:
        raise BundleIOError(f"Could not create {to}: {e}") from e

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise BundleIOError(f"Could not read bundle {path}: {e}") from e

    try:
        content = json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise ParseError(f"Bundle {path} is not valid JSON: {e}") from e

    if not isinstance(content, dict):
        raise FormatError(f"Bundle {path} must contain a JSON object")

    written = unpack_tree(content, to)
    logger.info(f"Unpacked {written} files from {path} into {to}")
    return written
