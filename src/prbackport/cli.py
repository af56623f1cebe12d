import logging
import os

import click
from rich.logging import RichHandler

from . import __version__
from .constants import (
    DEFAULT_API_URL,
    DEFAULT_ASSIGNEE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_FORGE_HOST,
    DEFAULT_ORIGIN_REMOTE,
    DEFAULT_PR_TEMPLATE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_UPSTREAM_REMOTE,
    PROGRAM_NAME,
)
from .core import Backporter, BackportError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name=PROGRAM_NAME)
@click.argument("source_ref")
@click.argument("target_ref")
@click.option(
    "-c",
    "--continue",
    "continue_run",
    is_flag=True,
    help="Resume after resolving a conflicted cherry-pick instead of creating the branch.",
)
@click.option(
    "-l",
    "--local",
    "local_only",
    is_flag=True,
    help="Stop after rewriting the commit; do not push or open a pull request.",
)
@click.option(
    "--pr",
    "pr_number",
    type=click.IntRange(min=1),
    default=None,
    help="Original pull request number, overriding the one found in the commit subject.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--token",
    envvar=["GH_TOKEN", "GITHUB_TOKEN"],
    default=None,
    help="Forge API token (default: GH_TOKEN or GITHUB_TOKEN env var).",
)
def main(
    source_ref,
    target_ref,
    continue_run,
    local_only,
    pr_number,
    config,
    verbose,
    log_file,
    token,
):
    """Backport SOURCE_REF onto TARGET_REF and open a pull request for it.

    TARGET_REF is usually a remote branch such as upstream/5.2.z; its last
    path segment names the base branch of the new pull request.
    """
    logger = logging.getLogger("prbackport")

    # options repeated in the printed --continue command; the token stays in the environment
    recovery_args = []
    if config is not None:
        recovery_args += ["--config", config]
    if verbose:
        recovery_args.append("--verbose")
    if log_file is not None:
        recovery_args += ["--log-file", log_file]

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except BackportError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    origin_remote = _resolve_option(None, config_values, "origin_remote", default=DEFAULT_ORIGIN_REMOTE)
    upstream_remote = _resolve_option(
        None, config_values, "upstream_remote", default=DEFAULT_UPSTREAM_REMOTE
    )
    forge_host = _resolve_option(None, config_values, "forge_host", default=DEFAULT_FORGE_HOST)
    api_url = _resolve_option(None, config_values, "api_url", default=DEFAULT_API_URL)
    assignee = _resolve_option(None, config_values, "assignee", default=DEFAULT_ASSIGNEE)
    pr_template = _resolve_option(None, config_values, "pr_template", default=DEFAULT_PR_TEMPLATE)
    web = bool(_resolve_option(None, config_values, "web", default=True))
    request_timeout = float(
        _resolve_option(None, config_values, "request_timeout", default=DEFAULT_REQUEST_TIMEOUT)
    )

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    backporter = Backporter(
        source_ref=source_ref,
        target_ref=target_ref,
        continue_run=continue_run,
        local_only=local_only,
        pr_number=pr_number,
        origin_remote=origin_remote,
        upstream_remote=upstream_remote,
        forge_host=forge_host,
        api_url=api_url,
        token=token,
        assignee=assignee,
        pr_template=pr_template,
        web=web,
        request_timeout=request_timeout,
        recovery_args=recovery_args,
    )

    raise SystemExit(backporter.run())


def run(args=None):
    """Console entry point: usage errors exit with status 1."""
    try:
        exit_code = main.main(args=args, prog_name=PROGRAM_NAME, standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        raise SystemExit(1)
    except click.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        raise SystemExit(1)

    raise SystemExit(exit_code or 0)


if __name__ == "__main__":
    run()
