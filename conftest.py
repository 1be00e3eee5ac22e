from pathlib import Path
from typing import List, Tuple

import pytest

from bundler.build.runner import CommandExecutor


class RecordingExecutor(CommandExecutor):
    """Records build commands instead of running them and returns a fixed status."""

    def __init__(self, status: int = 0):
        self.status = status
        self.calls: List[Tuple[str, List[str], Path]] = []

    def execute(self, command: str, args: List[str], cwd: Path) -> int:
        self.calls.append((command, list(args), Path(cwd)))
        return self.status


@pytest.fixture
def recording_executor():
    return RecordingExecutor
