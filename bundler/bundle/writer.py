"""Bundle writer - packs a project directory and writes the bundle document.

The tree is scanned and serialized in memory first; the output file is
only opened once that has succeeded.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from loguru import logger

from ..build.runner import BuildRunner, CommandExecutor
from ..constants import DEFAULT_BUNDLE_FILE_NAME
from ..errors import BundleIOError
from ..graph.file_tree import TreeScanner, count_nodes
from .schema import serialize_tree


def write_bundle(tree: Dict[str, Any], output: Path) -> Path:
    """Write a serialized tree as a pretty-printed UTF-8 JSON document."""
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(tree, f, indent=2, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise BundleIOError(f"Could not write bundle {output}: {e}") from e
    return output


class Packager:
    """Packs a project directory into a single bundle document."""

    def __init__(self, strip_meta: bool = False, executor: Optional[CommandExecutor] = None):
        self.strip_meta = strip_meta
        self.build_runner = BuildRunner(executor)

    def bundle(self, root: Path, exclude: Iterable[Path] = ()) -> Dict[str, Any]:
        """Scan ``root`` and return its serialized tree without writing anything."""
        if not root.is_dir():
            raise BundleIOError(f"{root} is not a directory")

        scanner = TreeScanner(self.build_runner, exclude=exclude)
        node = scanner.scan(root)

        files, dirs, artifacts = count_nodes(node)
        logger.info(f"Packed {files} files, {dirs} directories, {artifacts} build artifacts from {root}")
        return serialize_tree(node, self.strip_meta)

    def run(self, root: Path, output: Path) -> Path:
        # a bundle written inside the project must not be packed into the next one
        tree = self.bundle(root, exclude=[output])
        return write_bundle(tree, output)


def package(
    root: Union[str, Path] = ".",
    output: Optional[Union[str, Path]] = None,
    strip_meta: bool = False,
    executor: Optional[CommandExecutor] = None,
) -> Path:
    """Pack ``root`` into a bundle file and return the path written.

    The whole tree is encoded before the output is opened, so a failed pack
    leaves no bundle behind.
    """
    output_path = Path(output) if output is not None else Path(DEFAULT_BUNDLE_FILE_NAME)
    return Packager(strip_meta, executor).run(Path(root), output_path)
