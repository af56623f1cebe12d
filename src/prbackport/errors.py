"""Domain errors for prbackport."""

from typing import List, Optional


class BackportError(RuntimeError):
    """Raised when the backport cannot continue safely."""


class MissingDependencyError(BackportError):
    """Raised when a required external command is not installed."""


class CherryPickConflictError(BackportError):
    """Raised when the cherry-pick stops on conflicts."""

    def __init__(
        self,
        message: str,
        recovery_command: str,
        conflicted_paths: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.recovery_command = recovery_command
        self.conflicted_paths = list(conflicted_paths or [])
