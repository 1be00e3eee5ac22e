"""Ignore-rule handling for the tree walker.

Rules use gitignore syntax and live in a ``.hcignore`` file. A rule file
applies to the directory holding it and to everything below it.
"""

from pathlib import Path
from typing import List, Optional, Tuple

import pathspec
from loguru import logger

from .constants import IGNORE_FILE_NAME
from .errors import BundleIOError


class IgnoreFilter:
    """Stack of gitignore specs collected from the root down to one directory."""

    def __init__(self, specs: Optional[List[Tuple[Path, pathspec.PathSpec]]] = None, file_name: str = IGNORE_FILE_NAME):
        self._specs = list(specs or [])
        self.file_name = file_name

    def descend(self, directory: Path) -> "IgnoreFilter":
        """Return the filter in effect inside ``directory``.

        Reads the directory's own rule file, if any, on top of the inherited rules.
        """
        rule_file = directory / self.file_name
        if not rule_file.is_file():
            return IgnoreFilter(self._specs, self.file_name)

        try:
            lines = rule_file.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise BundleIOError(f"Could not read ignore file {rule_file}: {e}") from e

        logger.debug(f"Loaded {len(lines)} ignore rules from {rule_file}")
        spec = pathspec.GitIgnoreSpec.from_lines(lines)
        return IgnoreFilter(self._specs + [(directory, spec)], self.file_name)

    def is_ignored(self, path: Path, is_dir: bool = False) -> bool:
        """Deepest rule file with a matching pattern decides, so ``!pattern`` can re-include."""
        for base, spec in reversed(self._specs):
            try:
                relative = path.relative_to(base).as_posix()
            except ValueError:
                continue
            if is_dir:
                relative += "/"
            result = spec.check_file(relative)
            if result.include is not None:
                return result.include
        return False
