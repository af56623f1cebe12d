import logging
import os
import shlex
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_ASSIGNEE,
    DEFAULT_FORGE_HOST,
    DEFAULT_ORIGIN_REMOTE,
    DEFAULT_PR_TEMPLATE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_UPSTREAM_REMOTE,
    FORGE_COMMAND,
    GIT_COMMAND,
    PR_NUMBER_PLACEHOLDER,
    PROGRAM_NAME,
)
from .errors import BackportError, CherryPickConflictError, MissingDependencyError
from .errors_catalog import actionable_error
from .models import (
    BackportRequest,
    BuildState,
    CommitDescriptor,
    ForgeCredentials,
    PullRequestDraft,
    PullRequestMetadata,
    RepositoryContext,
)
from .services.command_runner import CommandRunner
from .services.commit_message import (
    build_branch_name,
    extract_pr_number,
    rewrite_commit_message,
    target_suffix,
)
from .services.dependencies import DependencyService
from .services.forge import ForgeService
from .services.git import GitService
from .services.remotes import resolve_remote_identity

console = Console()
logger = logging.getLogger("prbackport")


class Backporter:
    def __init__(
        self,
        source_ref: str,
        target_ref: str,
        continue_run: bool = False,
        local_only: bool = False,
        pr_number: Optional[int] = None,
        origin_remote: str = DEFAULT_ORIGIN_REMOTE,
        upstream_remote: str = DEFAULT_UPSTREAM_REMOTE,
        forge_host: str = DEFAULT_FORGE_HOST,
        api_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        assignee: Optional[str] = DEFAULT_ASSIGNEE,
        pr_template: Optional[str] = DEFAULT_PR_TEMPLATE,
        web: bool = True,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        repo_path: Optional[str] = None,
        recovery_args: Optional[List[str]] = None,
        git_service: Optional[GitService] = None,
        forge_service: Optional[ForgeService] = None,
        dependency_service: Optional[DependencyService] = None,
    ):
        self.request = BackportRequest(
            source_ref=source_ref,
            target_ref=target_ref,
            continue_run=continue_run,
            local_only=local_only,
            pr_number=pr_number,
        )
        self.origin_remote = origin_remote
        self.upstream_remote = upstream_remote
        self.assignee = assignee
        self.pr_template = pr_template
        self.web = web
        self.repo_path = repo_path or os.getcwd()
        self.recovery_args = list(recovery_args or [])
        self.credentials = ForgeCredentials(token=token, host=forge_host, api_url=api_url)

        self.command_runner = CommandRunner(logger=logger)
        self.dependency_service = dependency_service or DependencyService(logger=logger)
        self.git_service = git_service or GitService(logger=logger, command_runner=self.command_runner)
        self.forge_service = forge_service or ForgeService(
            credentials=self.credentials,
            logger=logger,
            console=console,
            command_runner=self.command_runner,
            timeout=request_timeout,
        )

        self.context: Optional[RepositoryContext] = None
        self.state = BuildState.RESUMED if continue_run else BuildState.FRESH
        self.current_step_name: Optional[str] = None

    @property
    def suffix(self) -> str:
        return target_suffix(self.request.target_ref)

    def required_commands(self) -> List[str]:
        if self.request.local_only:
            return [GIT_COMMAND]
        return [GIT_COMMAND, FORGE_COMMAND]

    def recovery_command(self) -> str:
        args = [PROGRAM_NAME, self.request.source_ref, self.request.target_ref]
        if self.request.local_only:
            args.append("--local")
        if self.request.pr_number is not None:
            args += ["--pr", str(self.request.pr_number)]
        args += self.recovery_args
        args.append("--continue")
        return " ".join(shlex.quote(arg) for arg in args)

    def _run_step(self, name: str, callback, *args, **kwargs):
        logger.debug("Step started: %s", name)
        self.current_step_name = name
        result = callback(*args, **kwargs)
        self.current_step_name = None
        logger.debug("Step finished: %s", name)
        return result

    def inspect_commit(self) -> CommitDescriptor:
        subject = self.git_service.show_subject(self.context, self.request.source_ref)
        pr_number = self.request.pr_number
        if pr_number is None:
            pr_number = extract_pr_number(subject)

        logger.info("Source commit: %s", subject)
        if pr_number is None:
            console.print("[yellow]No pull request reference found in the commit subject.[/yellow]")
        else:
            logger.info("Referenced pull request: #%s", pr_number)
        return CommitDescriptor(subject=subject, pr_number=pr_number)

    def build_branch(self, commit: CommitDescriptor) -> str:
        """Creates the backport branch and cherry-picks, or resumes a conflicted pick."""
        if self.state == BuildState.RESUMED:
            console.print("[blue]Continuing the cherry-pick in progress...[/blue]")
            try:
                self.git_service.cherry_pick_continue(self.context)
            except BackportError as exc:
                raise BackportError(f"{actionable_error('continue_failed')}\n{exc}") from exc
            self.state = BuildState.DONE
            return self.git_service.current_branch(self.context)

        branch_name = build_branch_name(self.request.source_ref, commit.pr_number, self.suffix)
        console.print(f"[blue]Creating branch {branch_name} from {self.request.target_ref}...[/blue]")
        self.git_service.create_branch(self.context, branch_name, self.request.target_ref)

        console.print(f"[blue]Cherry-picking {self.request.source_ref}...[/blue]")
        if not self.git_service.cherry_pick(self.context, self.request.source_ref):
            command = self.recovery_command()
            raise CherryPickConflictError(
                actionable_error(
                    "cherry_pick_conflict",
                    ref=self.request.source_ref,
                    branch=branch_name,
                    command=command,
                ),
                recovery_command=command,
                conflicted_paths=self.git_service.conflicted_paths(self.context),
            )

        self.state = BuildState.DONE
        return branch_name

    def rewrite_commit(self, commit: CommitDescriptor) -> str:
        message = rewrite_commit_message(commit.subject, commit.pr_number, self.suffix)
        self.git_service.amend_commit_message(self.context, message)
        console.print(f"[green]Commit message set to:[/green] {escape(message)}")
        return message

    def _read_template(self) -> str:
        if not self.pr_template:
            return ""

        path = self.pr_template
        if not os.path.isabs(path):
            path = os.path.join(self.context.root, path)
        if not os.path.isfile(path):
            return ""

        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                return file_obj.read()
        except OSError as exc:
            logger.warning("Could not read pull request template %s: %s", path, exc)
            return ""

    def compose_body(
        self,
        upstream_repo: str,
        pr_number: Optional[int],
        original: Optional[PullRequestMetadata],
    ) -> str:
        if original is not None:
            return f"Backport of {original.url}\n\n{original.body}"

        reference = pr_number if pr_number is not None else PR_NUMBER_PLACEHOLDER
        header = f"Backport of {self.forge_service.pull_request_url(upstream_repo, reference)}"
        return f"{header}\n\n{self._read_template()}"

    def publish(self, commit: CommitDescriptor, message: str):
        identity = resolve_remote_identity(
            self.context, self.origin_remote, self.upstream_remote, logger=logger
        )
        branch = self.git_service.current_branch(self.context)

        console.print(f"[blue]Pushing {branch} to {self.origin_remote}...[/blue]")
        self._run_step("push", self.git_service.push, self.context, self.origin_remote, branch)

        original = None
        if commit.pr_number is not None:
            original = self._run_step(
                "fetch_pull_request",
                self.forge_service.get_pull_request,
                identity.upstream_repo,
                commit.pr_number,
            )
            logger.info("Mirroring body and labels of #%s (%s)", original.number, original.url)

        draft = PullRequestDraft(
            repo=identity.upstream_repo,
            base=self.suffix,
            head=f"{identity.origin_owner}:{branch}",
            title=message,
            body=self.compose_body(identity.upstream_repo, commit.pr_number, original),
            assignee=self.assignee,
            labels=tuple(sorted(set(original.labels))) if original is not None else (),
        )
        self._run_step("create_pull_request", self.forge_service.create_pull_request, draft, web=self.web)
        return draft

    def _report_conflict(self, exc: CherryPickConflictError):
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.conflicted_paths:
            console.print(f"Conflicts in {len(exc.conflicted_paths)} file(s):")
            for path in exc.conflicted_paths:
                console.print(f"  {escape(path)}")
        console.print("\nAfter resolving the conflicts, re-run:")
        console.print(f"    $ {exc.recovery_command}", markup=False)

    def run(self) -> int:
        try:
            self._run_step(
                "check_dependencies",
                self.dependency_service.ensure_available,
                self.required_commands(),
            )
            self.context = self._run_step("load_repository", self.git_service.load_context, self.repo_path)

            commit = self._run_step("inspect_commit", self.inspect_commit)
            branch = self._run_step("build_branch", self.build_branch, commit)
            message = self._run_step("rewrite_commit", self.rewrite_commit, commit)

            if self.request.local_only:
                console.print(f"[green]Backport commit ready on {branch}.[/green] --local used, not publishing.")
                return 0

            self._run_step("publish", self.publish, commit, message)
            console.print(f"[green]Backport of {self.request.source_ref} to {self.suffix} done.[/green]")
            return 0

        except MissingDependencyError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.debug(str(exc))
            return 2
        except CherryPickConflictError as exc:
            self._report_conflict(exc)
            logger.debug("Stopped at step %s", self.current_step_name)
            return 1
        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except BackportError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
            logger.debug("Failed at step %s", self.current_step_name)
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            return 1
