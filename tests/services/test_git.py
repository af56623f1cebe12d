import subprocess

import pytest

from prbackport.errors import BackportError
from prbackport.models import RepositoryContext
from prbackport.services.git import GitService


class DummyLogger:
    def __init__(self):
        self.warnings = []

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, message, *args):
        self.warnings.append(message % args if args else message)


class FakeRunner:
    """Records git invocations and answers from a table keyed by arguments."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def run(self, cmd, check=True, capture_output=False, cwd=None, env=None, timeout=None):
        self.calls.append({"cmd": cmd, "cwd": cwd, "env": env, "capture_output": capture_output})
        returncode, stdout, stderr = self.responses.get(tuple(cmd[1:]), (0, "", ""))
        if returncode != 0 and check:
            raise BackportError(f"Command failed ({returncode}): {' '.join(cmd)}\n{stderr}")
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


CONTEXT = RepositoryContext(root="/work/repo", remotes={"origin": "git@github.com:me/repo.git"})


def test_load_context_collects_root_and_remotes():
    runner = FakeRunner(
        {
            ("rev-parse", "--show-toplevel"): (0, "/work/repo\n", ""),
            ("remote",): (0, "origin\nupstream\n", ""),
            ("remote", "get-url", "origin"): (0, "git@github.com:me/repo.git\n", ""),
            ("remote", "get-url", "upstream"): (0, "https://github.com/acme/repo.git\n", ""),
        }
    )
    service = GitService(logger=DummyLogger(), command_runner=runner)

    context = service.load_context("/work/repo/src")

    assert context.root == "/work/repo"
    assert context.remotes == {
        "origin": "git@github.com:me/repo.git",
        "upstream": "https://github.com/acme/repo.git",
    }
    assert runner.calls[0]["cwd"] == "/work/repo/src"
    assert all(call["cwd"] == "/work/repo" for call in runner.calls[1:])


def test_load_context_outside_repository_fails():
    runner = FakeRunner({("rev-parse", "--show-toplevel"): (128, "", "fatal: not a git repository")})
    service = GitService(logger=DummyLogger(), command_runner=runner)

    with pytest.raises(BackportError, match="Not inside a git repository"):
        service.load_context("/tmp/elsewhere")


def test_show_subject_reads_one_line_subject():
    runner = FakeRunner({("show", "-s", "--format=%s", "abc123"): (0, "Fix race condition (#482)\n", "")})
    service = GitService(logger=DummyLogger(), command_runner=runner)

    assert service.show_subject(CONTEXT, "abc123") == "Fix race condition (#482)"


def test_create_branch_checks_out_new_branch_from_base():
    runner = FakeRunner()
    service = GitService(logger=DummyLogger(), command_runner=runner)

    service.create_branch(CONTEXT, "backport-pr-482-5.2.z", "upstream/5.2.z")

    assert runner.calls[0]["cmd"] == ["git", "checkout", "-b", "backport-pr-482-5.2.z", "upstream/5.2.z"]
    assert runner.calls[0]["cwd"] == "/work/repo"


def test_cherry_pick_reports_conflict_without_raising():
    runner = FakeRunner(
        {
            ("cherry-pick", "abc123"): (1, "", "error: could not apply abc123"),
            ("rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD"): (0, "abc123\n", ""),
        }
    )
    logger = DummyLogger()
    service = GitService(logger=logger, command_runner=runner)

    assert service.cherry_pick(CONTEXT, "abc123") is False
    assert logger.warnings == ["error: could not apply abc123"]


def test_cherry_pick_continue_skips_editor():
    runner = FakeRunner()
    service = GitService(logger=DummyLogger(), command_runner=runner)

    service.cherry_pick_continue(CONTEXT)

    assert runner.calls[0]["cmd"] == ["git", "cherry-pick", "--continue"]
    assert runner.calls[0]["env"] == {"GIT_EDITOR": "true"}


def test_cherry_pick_continue_without_pick_in_progress_fails():
    runner = FakeRunner({("cherry-pick", "--continue"): (128, "", "error: no cherry-pick or revert in progress")})
    service = GitService(logger=DummyLogger(), command_runner=runner)

    with pytest.raises(BackportError, match="no cherry-pick"):
        service.cherry_pick_continue(CONTEXT)


def test_conflicted_paths_lists_unmerged_files():
    runner = FakeRunner({("diff", "--name-only", "--diff-filter=U"): (0, "src/a.py\nsrc/b.py\n", "")})
    service = GitService(logger=DummyLogger(), command_runner=runner)

    assert service.conflicted_paths(CONTEXT) == ["src/a.py", "src/b.py"]


def test_current_branch_rejects_detached_head():
    runner = FakeRunner({("rev-parse", "--abbrev-ref", "HEAD"): (0, "HEAD\n", "")})
    service = GitService(logger=DummyLogger(), command_runner=runner)

    with pytest.raises(BackportError, match="detached HEAD"):
        service.current_branch(CONTEXT)


def test_amend_and_push_commands():
    runner = FakeRunner()
    service = GitService(logger=DummyLogger(), command_runner=runner)

    service.amend_commit_message(CONTEXT, "Fix race condition [5.2.z]")
    service.push(CONTEXT, "origin", "backport-pr-482-5.2.z")

    assert runner.calls[0]["cmd"] == ["git", "commit", "--amend", "-m", "Fix race condition [5.2.z]"]
    assert runner.calls[1]["cmd"] == ["git", "push", "--set-upstream", "origin", "backport-pr-482-5.2.z"]
    assert runner.calls[1]["capture_output"] is False


def test_cherry_pick_without_pick_in_progress_raises_git_error():
    runner = FakeRunner(
        {
            ("cherry-pick", "merge123"): (
                128,
                "",
                "error: commit merge123 is a merge but no -m option was given.",
            ),
            ("rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD"): (1, "", ""),
            ("diff", "--name-only", "--diff-filter=U"): (0, "", ""),
        }
    )
    logger = DummyLogger()
    service = GitService(logger=logger, command_runner=runner)

    with pytest.raises(BackportError, match="is a merge but no -m option"):
        service.cherry_pick(CONTEXT, "merge123")
    assert logger.warnings == []


def test_cherry_pick_in_progress_detects_unmerged_paths():
    runner = FakeRunner(
        {
            ("rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD"): (1, "", ""),
            ("diff", "--name-only", "--diff-filter=U"): (0, "src/a.py\n", ""),
        }
    )
    service = GitService(logger=DummyLogger(), command_runner=runner)

    assert service.cherry_pick_in_progress(CONTEXT) is True
