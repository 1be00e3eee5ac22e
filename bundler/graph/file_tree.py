"""File tree scanner - turns one project directory into a BundleNode tree.

Each level goes through the same three steps:

1. list the immediate children that survive hidden-file and ignore filtering
2. hoist the level's config file (the first ``*.json`` by name) into the level
3. classify every other child as file, plain directory or buildable directory

Buildable directories are handed to a BuildRunner and replaced by their
artifact; plain directories are scanned recursively.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger

from ..build.runner import BuildRunner
from ..constants import BUILD_CONFIG_FILE_NAME, CONFIG_FILE_SUFFIX, IGNORE_FILE_NAME, META_SECTION_NAME
from ..errors import BundleIOError, FormatError, ParseError
from ..ignore import IgnoreFilter
from ..models import ArtifactNode, DirectoryNode, FileNode, NodeKind


def list_children(
    directory: Path, ignore: IgnoreFilter, exclude: Optional[Set[Path]] = None
) -> List[Path]:
    """List the immediate children of ``directory`` that should be packed.

    Hidden entries, entries matched by ignore rules and paths in ``exclude``
    (compared after resolving) are dropped. The result is sorted by name.

    Raises:
        BundleIOError: if the directory cannot be read
    """
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise BundleIOError(f"Could not read directory {directory}: {e}") from e

    children = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if exclude and entry.resolve() in exclude:
            logger.debug(f"Skipping excluded path {entry}")
            continue
        if not entry.is_file() and not entry.is_dir():
            logger.debug(f"Skipping {entry}: neither a file nor a directory")
            continue
        if ignore.is_ignored(entry, is_dir=entry.is_dir()):
            logger.debug(f"Ignoring {entry}")
            continue
        children.append(entry)
    return children


def select_config_file(children: Iterable[Path]) -> Optional[Path]:
    """Pick the level's config file: the first regular ``*.json`` file by name."""
    candidates = sorted(
        (p for p in children if p.is_file() and p.name.endswith(CONFIG_FILE_SUFFIX)),
        key=lambda p: p.name,
    )
    if not candidates:
        return None
    if len(candidates) > 1:
        others = ", ".join(p.name for p in candidates[1:])
        logger.warning(f"Several JSON files in {candidates[0].parent}; using {candidates[0].name}, packing {others} as files")
    return candidates[0]


def load_config_fields(path: Path) -> Dict[str, Any]:
    """Parse a config file, which must hold a single JSON object."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise BundleIOError(f"Could not read config file {path}: {e}") from e

    try:
        fields = json.loads(raw.decode("utf-8"))
    except ValueError as e:
        raise ParseError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(fields, dict):
        raise ParseError(f"Config file {path} must contain a JSON object, got {type(fields).__name__}")
    if META_SECTION_NAME in fields:
        raise FormatError(f"Config file {path} uses the reserved key {META_SECTION_NAME!r}")
    return fields


def classify(path: Path, descriptor_name: str = BUILD_CONFIG_FILE_NAME) -> NodeKind:
    """Classify a child: a file, a plain directory, or a buildable directory."""
    if path.is_file():
        return NodeKind.FILE
    if (path / descriptor_name).is_file():
        return NodeKind.BIN
    return NodeKind.DIR


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise BundleIOError(f"Could not read {path}: {e}") from e


class TreeScanner:
    """Builds the BundleNode tree for a project directory."""

    def __init__(
        self,
        build_runner: BuildRunner,
        ignore_file_name: str = IGNORE_FILE_NAME,
        descriptor_name: str = BUILD_CONFIG_FILE_NAME,
        exclude: Optional[Iterable[Path]] = None,
    ):
        self.build_runner = build_runner
        self.ignore_file_name = ignore_file_name
        self.descriptor_name = descriptor_name
        self.exclude = {p.resolve() for p in exclude or ()}

    def scan(self, directory: Path, ignore: Optional[IgnoreFilter] = None) -> DirectoryNode:
        """Scan ``directory`` and everything below it.

        Raises:
            BundleIOError, ParseError, BuildError, FormatError: the first failure
                anywhere in the tree; nothing is returned for a partial scan
        """
        if ignore is None:
            ignore = IgnoreFilter(file_name=self.ignore_file_name)
        ignore = ignore.descend(directory)

        children = list_children(directory, ignore, self.exclude)
        node = DirectoryNode(name=directory.name)

        config_path = select_config_file(children)
        if config_path is not None:
            node.config_file = config_path.name
            node.config_fields = load_config_fields(config_path)

        for child in children:
            if child == config_path:
                continue
            if child.name == META_SECTION_NAME:
                raise FormatError(f"{child} collides with the reserved key {META_SECTION_NAME!r}")
            if child.name in node.config_fields:
                raise FormatError(
                    f"{child} collides with a field hoisted from {directory / node.config_file}"
                )

            kind = classify(child, self.descriptor_name)
            logger.debug(f"{child}: {kind.value}")
            if kind is NodeKind.FILE:
                node.add(FileNode(child.name, read_bytes(child)))
            elif kind is NodeKind.BIN:
                node.add(ArtifactNode(child.name, self.build_runner.run(child)))
            else:
                node.add(self.scan(child, ignore))

        return node


def count_nodes(node: DirectoryNode) -> Tuple[int, int, int]:
    """Count (files, directories, artifacts) below ``node``."""
    files = dirs = artifacts = 0
    for child in node.children.values():
        if isinstance(child, FileNode):
            files += 1
        elif isinstance(child, ArtifactNode):
            artifacts += 1
        else:
            dirs += 1
            sub_files, sub_dirs, sub_artifacts = count_nodes(child)
            files += sub_files
            dirs += sub_dirs
            artifacts += sub_artifacts
    return files, dirs, artifacts
