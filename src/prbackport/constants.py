"""Defaults shared by the CLI and the backport pipeline."""

PROGRAM_NAME = "prbackport"
DEFAULT_CONFIG_FILE = ".prbackport.yml"

BRANCH_PREFIX = "backport"
PR_NUMBER_PLACEHOLDER = "XXXX"

DEFAULT_ORIGIN_REMOTE = "origin"
DEFAULT_UPSTREAM_REMOTE = "upstream"
DEFAULT_FORGE_HOST = "github.com"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_ASSIGNEE = "@me"
DEFAULT_PR_TEMPLATE = ".github/pull_request_template.md"
DEFAULT_REQUEST_TIMEOUT = 30.0

GIT_COMMAND = "git"
FORGE_COMMAND = "gh"
