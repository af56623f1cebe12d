import re

import pytest

from prbackport.services.commit_message import (
    build_branch_name,
    extract_pr_number,
    rewrite_commit_message,
    target_suffix,
)


@pytest.mark.parametrize(
    "subject, expected",
    [
        ("Fix race condition (#482)", 482),
        ("Bump dependency #7", 7),
        ("Refs #12, fixes #34 (#56)", 56),
        ("Improve [core] logging", None),
        ("Mention issue # 12 without digits attached", None),
    ],
)
def test_extract_pr_number_uses_last_reference(subject, expected):
    assert extract_pr_number(subject) == expected


@pytest.mark.parametrize(
    "target_ref, expected",
    [
        ("upstream/5.2.z", "5.2.z"),
        ("origin/release/6.0.z", "6.0.z"),
        ("6.0.z", "6.0.z"),
        ("upstream/5.2.z/", "5.2.z"),
    ],
)
def test_target_suffix_is_last_path_segment(target_ref, expected):
    assert target_suffix(target_ref) == expected


def test_branch_name_prefers_pr_number():
    assert build_branch_name("abc123", 482, "5.2.z") == "backport-pr-482-5.2.z"


def test_branch_name_falls_back_to_source_ref():
    assert build_branch_name("master", None, "6.0.z") == "backport-master-6.0.z"


def test_rewrite_removes_pr_reference():
    assert rewrite_commit_message("Fix race condition (#482)", 482, "5.2.z") == "Fix race condition [5.2.z]"


def test_rewrite_removes_zero_padded_pr_reference():
    assert rewrite_commit_message("Fix race condition (#0482)", 482, "5.2.z") == "Fix race condition [5.2.z]"


def test_rewrite_keeps_reference_to_a_longer_pr_number():
    assert rewrite_commit_message("Fix race (#4820) (#482)", 482, "5.2.z") == "Fix race (#4820) [5.2.z]"


def test_rewrite_keeps_spacing_around_removed_tags():
    assert rewrite_commit_message("Improve [core] logging", None, "6.0.z") == "Improve  logging [6.0.z]"


def test_rewrite_leaves_pr_like_text_alone_without_pr_number():
    assert rewrite_commit_message("Fix (#9)", None, "5.2.z") == "Fix (#9) [5.2.z]"


@pytest.mark.parametrize(
    "subject, pr_number",
    [
        ("[ci] Fix flaky test (#100)", 100),
        ("Fix [a] and [b] (#3)", 3),
        ("[backport 5.1] Fix crash (#77) [skip ci]", 77),
    ],
)
def test_rewrite_drops_every_original_tag(subject, pr_number):
    message = rewrite_commit_message(subject, pr_number, "5.2.z")

    assert f"(#{pr_number})" not in message
    assert re.findall(r"\[[^\]]*\]", message) == ["[5.2.z]"]
    assert message.endswith(" [5.2.z]")
