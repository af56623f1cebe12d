"""Git operations used by the backport pipeline."""

import os
from typing import List, Optional

from prbackport.constants import GIT_COMMAND
from prbackport.errors import BackportError
from prbackport.errors_catalog import actionable_error
from prbackport.models import RepositoryContext


class GitService:
    """Thin wrapper around the git CLI, always scoped to a RepositoryContext."""

    def __init__(self, logger, command_runner, git_command: str = GIT_COMMAND):
        self.logger = logger
        self.command_runner = command_runner
        self.git_command = git_command

    def _git(self, context: Optional[RepositoryContext], args: List[str], **kwargs):
        cwd = kwargs.pop("cwd", None)
        if context:
            cwd = context.root
        kwargs.setdefault("capture_output", True)
        return self.command_runner.run([self.git_command] + args, cwd=cwd, **kwargs)

    def load_context(self, path: Optional[str] = None) -> RepositoryContext:
        path = path or os.getcwd()
        result = self._git(None, ["rev-parse", "--show-toplevel"], cwd=path, check=False)
        if result.returncode != 0 or not result.stdout.strip():
            raise BackportError(actionable_error("not_a_repository", path=path))

        context = RepositoryContext(root=result.stdout.strip())
        names = self._git(context, ["remote"]).stdout.split()
        remotes = {}
        for name in names:
            url = self.remote_url(context, name)
            if url:
                remotes[name] = url

        self.logger.debug("Repository root: %s, remotes: %s", context.root, ", ".join(remotes))
        return RepositoryContext(root=context.root, remotes=remotes)

    def remote_url(self, context: RepositoryContext, name: str) -> Optional[str]:
        result = self._git(context, ["remote", "get-url", name], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def show_subject(self, context: RepositoryContext, ref: str) -> str:
        result = self._git(context, ["show", "-s", "--format=%s", ref])
        return result.stdout.strip()

    def current_branch(self, context: RepositoryContext) -> str:
        result = self._git(context, ["rev-parse", "--abbrev-ref", "HEAD"])
        branch = result.stdout.strip()
        if not branch or branch == "HEAD":
            raise BackportError("Could not determine current branch (detached HEAD?).")
        return branch

    def create_branch(self, context: RepositoryContext, name: str, base: str):
        self._git(context, ["checkout", "-b", name, base])

    def cherry_pick(self, context: RepositoryContext, ref: str) -> bool:
        """Return False when the pick stopped on conflicts.

        Failures that leave no cherry-pick in progress (merge commits, bad
        refs) raise BackportError, since --continue cannot resume them.
        """
        result = self._git(context, ["cherry-pick", ref], check=False)
        if result.returncode == 0:
            return True

        output = (result.stderr or result.stdout or "").strip()
        if not self.cherry_pick_in_progress(context):
            message = f"Command failed ({result.returncode}): git cherry-pick {ref}"
            if output:
                message = f"{message}\n{output}"
            raise BackportError(message)

        if output:
            self.logger.warning(output)
        return False

    def cherry_pick_in_progress(self, context: RepositoryContext) -> bool:
        result = self._git(context, ["rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD"], check=False)
        return result.returncode == 0 or bool(self.conflicted_paths(context))

    def cherry_pick_continue(self, context: RepositoryContext):
        # git would otherwise open an editor for the message
        self._git(context, ["cherry-pick", "--continue"], env={"GIT_EDITOR": "true"})

    def conflicted_paths(self, context: RepositoryContext) -> List[str]:
        result = self._git(context, ["diff", "--name-only", "--diff-filter=U"], check=False)
        if result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def amend_commit_message(self, context: RepositoryContext, message: str):
        self._git(context, ["commit", "--amend", "-m", message])

    def push(self, context: RepositoryContext, remote: str, branch: str):
        self._git(context, ["push", "--set-upstream", remote, branch], capture_output=False)
