from .runner import BuildRunner, CommandExecutor, SubprocessExecutor

__all__ = ["BuildRunner", "CommandExecutor", "SubprocessExecutor"]
