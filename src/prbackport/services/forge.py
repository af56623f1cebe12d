"""Forge (GitHub) access: pull request lookup and creation."""

from typing import List, Optional

import requests

from prbackport.constants import FORGE_COMMAND
from prbackport.errors import BackportError
from prbackport.errors_catalog import actionable_error
from prbackport.models import ForgeCredentials, PullRequestDraft, PullRequestMetadata


class ForgeService:
    """Reads pull requests over the REST API and opens new ones through ``gh``."""

    def __init__(
        self,
        credentials: ForgeCredentials,
        logger,
        console,
        command_runner,
        requests_module=requests,
        timeout: Optional[float] = None,
        forge_command: str = FORGE_COMMAND,
    ):
        self.credentials = credentials
        self.logger = logger
        self.console = console
        self.command_runner = command_runner
        self.requests = requests_module
        self.timeout = timeout
        self.forge_command = forge_command

    def pull_request_url(self, repo: str, number) -> str:
        return f"https://{self.credentials.host}/{repo}/pull/{number}"

    def _headers(self):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.credentials.token:
            headers["Authorization"] = f"Bearer {self.credentials.token}"
        return headers

    def get_pull_request(self, repo: str, number: int) -> PullRequestMetadata:
        url = f"{self.credentials.api_url.rstrip('/')}/repos/{repo}/pulls/{number}"
        self.logger.info("Fetching pull request #%s from %s", number, repo)

        try:
            response = self.requests.get(url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except self.requests.RequestException as exc:
            raise BackportError(
                actionable_error("forge_request_failed", number=str(number), repo=repo, reason=str(exc))
            ) from exc
        except ValueError as exc:
            raise BackportError(
                actionable_error(
                    "forge_request_failed",
                    number=str(number),
                    repo=repo,
                    reason=f"invalid JSON response ({exc})",
                )
            ) from exc

        labels = tuple(
            label["name"]
            for label in payload.get("labels") or []
            if isinstance(label, dict) and label.get("name")
        )
        return PullRequestMetadata(
            number=number,
            url=payload.get("html_url") or self.pull_request_url(repo, number),
            body=payload.get("body") or "",
            labels=labels,
        )

    def build_create_command(self, draft: PullRequestDraft, web: bool = True) -> List[str]:
        cmd = [
            self.forge_command,
            "pr",
            "create",
            "--repo",
            draft.repo,
            "--base",
            draft.base,
            "--head",
            draft.head,
            "--title",
            draft.title,
            "--body",
            draft.body,
        ]
        if draft.assignee:
            cmd += ["--assignee", draft.assignee]
        for label in draft.labels:
            cmd += ["--label", label]
        if web:
            cmd.append("--web")
        return cmd

    def create_pull_request(self, draft: PullRequestDraft, web: bool = True):
        cmd = self.build_create_command(draft, web=web)
        env = {"GH_TOKEN": self.credentials.token} if self.credentials.token else None
        if web:
            self.console.print("[blue]Opening the pull request form in your browser...[/blue]")
        self.command_runner.run(cmd, env=env)
