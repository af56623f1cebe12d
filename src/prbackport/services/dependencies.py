"""External tool discovery for prbackport."""

import shutil
from typing import Callable, Iterable, List, Optional

from prbackport.errors import MissingDependencyError
from prbackport.errors_catalog import actionable_error


class DependencyService:
    """Checks that the commands the pipeline shells out to are installed."""

    def __init__(self, logger, which: Callable[[str], Optional[str]] = shutil.which):
        self.logger = logger
        self.which = which

    def missing(self, commands: Iterable[str]) -> List[str]:
        return [command for command in commands if not self.which(command)]

    def ensure_available(self, commands: Iterable[str]):
        commands = list(commands)
        missing = self.missing(commands)
        if missing:
            raise MissingDependencyError(
                actionable_error("missing_dependency", command=", ".join(missing))
            )
        self.logger.debug("Found required commands: %s", ", ".join(commands))
