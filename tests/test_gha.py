from __future__ import annotations

from ci_mail_test.gha import github_run_id


def test_github_run_id_is_verbatim() -> None:
    assert github_run_id({"GITHUB_RUN_ID": "98765"}) == "98765"
    assert github_run_id({"GITHUB_RUN_ID": ""}) == ""


def test_github_run_id_placeholder_when_unset() -> None:
    assert github_run_id({}) == "undefined"
