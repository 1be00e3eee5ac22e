"""
Core models for the bundler.

The BundleNode tree (FileNode / DirectoryNode / ArtifactNode) is the semantic,
pre-serialization view of a packed directory. MetaSection and BuildDescriptor
are the two JSON contracts read and written on disk.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .constants import META_CONFIG_SECTION_NAME, META_TREE_SECTION_NAME
from .errors import BundleIOError, FormatError, ParseError


class NodeKind(str, Enum):
    """Kind of a directory child, as recorded in the meta section."""

    FILE = "file"
    DIR = "dir"
    BIN = "bin"


# ============================================================================
# BundleNode tree
# ============================================================================


@dataclass
class FileNode:
    name: str
    content: bytes

    @property
    def kind(self) -> NodeKind:
        return NodeKind.FILE


@dataclass
class ArtifactNode:
    """Build output embedded in place of a buildable directory's sources."""

    name: str
    content: bytes

    @property
    def kind(self) -> NodeKind:
        return NodeKind.BIN


@dataclass
class DirectoryNode:
    """One directory level.

    ``config_fields`` holds the hoisted fields of the level's config file and
    ``config_file`` its name; both are empty when the level has none.
    """

    name: str
    children: Dict[str, "BundleNode"] = field(default_factory=dict)
    config_file: Optional[str] = None
    config_fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> NodeKind:
        return NodeKind.DIR

    def add(self, node: "BundleNode") -> None:
        self.children[node.name] = node


BundleNode = Union[FileNode, DirectoryNode, ArtifactNode]


# ============================================================================
# JSON contracts
# ============================================================================


class MetaSection(BaseModel):
    """Reconstruction metadata stored under the reserved key of each level."""

    config_file: Optional[str] = None
    tree: Dict[str, NodeKind] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.config_file is None and not self.tree

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.tree:
            data[META_TREE_SECTION_NAME] = {name: kind.value for name, kind in self.tree.items()}
        if self.config_file is not None:
            data[META_CONFIG_SECTION_NAME] = self.config_file
        return data

    @classmethod
    def from_json(cls, raw: Any) -> "MetaSection":
        if not isinstance(raw, dict):
            raise FormatError("incompatible meta section: expected an object")
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise FormatError(f"incompatible meta section: {e.errors()[0]['msg']}") from e


class BuildDescriptor(BaseModel):
    """Contents of a ``.build`` file: commands to run and the artifact they produce."""

    steps: Dict[str, List[str]] = Field(default_factory=dict)
    artifact: str

    @classmethod
    def from_file(cls, path: Path) -> "BuildDescriptor":
        """Read and validate a build descriptor.

        Raises:
            BundleIOError: if the file cannot be read
            ParseError: if it is not a valid descriptor object
        """
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise BundleIOError(f"Could not read build descriptor {path}: {e}") from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Build descriptor {path} is not valid UTF-8: {e}") from e

        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise ParseError(f"Invalid build descriptor {path}: {e.errors()[0]['msg']}") from e

    @classmethod
    def with_artifact(cls, artifact: Union[str, Path]) -> "BuildDescriptor":
        return cls(steps={}, artifact=Path(artifact).as_posix())

    def cmd(self, command: str, args: List[str]) -> "BuildDescriptor":
        """Append a step; returns self so calls can be chained."""
        self.steps[command] = list(args)
        return self

    def save_as(self, path: Path) -> None:
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.model_dump(mode="json"), f, indent=2)
        except OSError as e:
            raise BundleIOError(f"Could not write build descriptor {path}: {e}") from e
