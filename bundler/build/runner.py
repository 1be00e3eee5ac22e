"""Build runner - executes a buildable directory's steps and captures its artifact."""

import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..constants import BUILD_CONFIG_FILE_NAME
from ..errors import BuildError, BundleIOError
from ..models import BuildDescriptor


class CommandExecutor(ABC):
    """
    Interface for running one external build command.
    Swapped out in tests for a stand-in that never launches a process.
    """

    @abstractmethod
    def execute(self, command: str, args: List[str], cwd: Path) -> int:
        """
        Run ``command`` with ``args`` inside ``cwd`` and wait for it.

        Returns:
            The process exit status

        Raises:
            OSError: if the command cannot be launched
        """
        pass


class SubprocessExecutor(CommandExecutor):
    """Runs commands as child processes sharing this process's stdout/stderr."""

    def execute(self, command: str, args: List[str], cwd: Path) -> int:
        completed = subprocess.run([command, *args], cwd=cwd, check=False)
        return completed.returncode


class BuildRunner:
    """Runs the steps declared in a ``.build`` descriptor, in order, with no retry."""

    def __init__(self, executor: Optional[CommandExecutor] = None, descriptor_name: str = BUILD_CONFIG_FILE_NAME):
        self.executor = executor or SubprocessExecutor()
        self.descriptor_name = descriptor_name

    def run(self, directory: Path) -> bytes:
        """
        Build ``directory`` and return the bytes of its artifact.

        Args:
            directory: A buildable directory (holds a descriptor file)

        Returns:
            Full content of the declared artifact

        Raises:
            ParseError: if the descriptor is malformed
            BuildError: if a step fails or the artifact is missing afterwards
        """
        descriptor = BuildDescriptor.from_file(directory / self.descriptor_name)
        logger.info(f"Building {directory} ({len(descriptor.steps)} steps)")

        for command, args in descriptor.steps.items():
            self._run_step(directory, command, args)

        artifact_path = directory / descriptor.artifact
        if not artifact_path.is_file():
            raise BuildError(f"Artifact {artifact_path} either doesn't exist or is not a file")

        try:
            content = artifact_path.read_bytes()
        except OSError as e:
            raise BundleIOError(f"Could not read artifact {artifact_path}: {e}") from e

        logger.info(f"Captured artifact {artifact_path} ({len(content)} bytes)")
        return content

    def _run_step(self, directory: Path, command: str, args: List[str]) -> None:
        shown = " ".join([command, *args])
        logger.info(f"  $ {shown}")
        try:
            status = self.executor.execute(command, args, directory)
        except OSError as e:
            raise BuildError(f"Could not launch '{shown}' in {directory}: {e}") from e

        if status != 0:
            raise BuildError(f"'{shown}' failed in {directory} with exit status {status}")
