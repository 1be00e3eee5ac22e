"""Bundle schema - how a BundleNode tree maps to the JSON document."""

import base64
from typing import Any, Dict, Optional

from ..constants import ARTIFACT_FIELD_NAME, META_SECTION_NAME
from ..models import ArtifactNode, DirectoryNode, FileNode, MetaSection, NodeKind


def encode_bytes(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


class MetaRecorder:
    """Collects the kind of every child of one level plus its config filename."""

    def __init__(self):
        self._tree: Dict[str, NodeKind] = {}
        self._config_file: Optional[str] = None

    def record(self, name: str, kind: NodeKind) -> None:
        self._tree[name] = kind

    def record_config(self, file_name: str) -> None:
        self._config_file = file_name

    def section(self) -> MetaSection:
        return MetaSection(config_file=self._config_file, tree=dict(self._tree))


def serialize_tree(node: DirectoryNode, strip_meta: bool = False) -> Dict[str, Any]:
    """Serialize one directory level, recursing into subdirectories.

    Hoisted config fields come first, then one key per child. Unless
    ``strip_meta`` is set, a non-empty meta section is added under the
    reserved key.
    """
    tree: Dict[str, Any] = dict(node.config_fields)
    recorder = MetaRecorder()

    if node.config_file is not None:
        recorder.record_config(node.config_file)

    for name, child in node.children.items():
        recorder.record(name, child.kind)
        if isinstance(child, FileNode):
            tree[name] = encode_bytes(child.content)
        elif isinstance(child, ArtifactNode):
            tree[name] = {ARTIFACT_FIELD_NAME: encode_bytes(child.content)}
        else:
            tree[name] = serialize_tree(child, strip_meta)

    if not strip_meta:
        section = recorder.section()
        if not section.is_empty():
            tree[META_SECTION_NAME] = section.to_json()

    return tree
