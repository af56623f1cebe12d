"""Commit subject parsing and rewriting helpers."""

import re
from typing import Optional

from prbackport.constants import BRANCH_PREFIX

PR_REFERENCE_PATTERN = re.compile(r"#(\d+)")
BRACKETED_TAG_PATTERN = re.compile(r"\[[^\]]*\]")


def extract_pr_number(subject: str) -> Optional[int]:
    """Return the number of the last ``#<digits>`` token in ``subject``."""
    matches = PR_REFERENCE_PATTERN.findall(subject)
    if not matches:
        return None
    return int(matches[-1])


def target_suffix(target_ref: str) -> str:
    """
    return '5.2.z' from 'upstream/5.2.z'
    """
    return target_ref.rstrip("/").split("/")[-1]


def build_branch_name(source_ref: str, pr_number: Optional[int], suffix: str) -> str:
    if pr_number is not None:
        return f"{BRANCH_PREFIX}-pr-{pr_number}-{suffix}"
    return f"{BRANCH_PREFIX}-{source_ref}-{suffix}"


def rewrite_commit_message(subject: str, pr_number: Optional[int], suffix: str) -> str:
    """Drop the PR reference and bracketed tags, then tag with the target suffix.

    Only a single whitespace character in front of ``(#N)`` is consumed, so
    spacing around removed ``[...]`` spans is kept as-is.
    """
    message = subject
    if pr_number is not None:
        message = re.sub(rf"\s?\(#0*{pr_number}\)", "", message)
    message = BRACKETED_TAG_PATTERN.sub("", message)
    return f"{message} [{suffix}]"
