"""Actionable error catalog for prbackport."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "missing_dependency": {
        "what": "Required command not found: {command}.",
        "next": "Install `{command}` and make sure it is on your PATH.",
    },
    "not_a_repository": {
        "what": "Not inside a git repository: {path}",
        "next": "Run prbackport from a clone of the project you want to backport into.",
    },
    "remote_not_found": {
        "what": "Remote `{remote}` is not configured in this repository.",
        "next": "Add it with `git remote add {remote} <url>` or set `{key}` in the config file.",
    },
    "invalid_remote_url": {
        "what": "Cannot parse owner/repo from remote URL: {url}",
        "next": "Use an `https://host/owner/repo` or `git@host:owner/repo` remote URL.",
    },
    "cherry_pick_conflict": {
        "what": "Cherry-pick of {ref} onto {branch} stopped on conflicts.",
        "next": "Resolve the conflicts, stage them with `git add`, then run `{command}`.",
    },
    "continue_failed": {
        "what": "Could not continue the cherry-pick in progress.",
        "next": "Check `git status`; --continue only works after a conflicted cherry-pick.",
    },
    "forge_request_failed": {
        "what": "Could not fetch pull request #{number} from {repo}: {reason}",
        "next": "Check your network and token (`--token`, GH_TOKEN or GITHUB_TOKEN), then open the PR by hand.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
