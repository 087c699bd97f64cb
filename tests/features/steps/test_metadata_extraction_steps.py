"""Behavioural tests for end-to-end metadata extraction."""
# ruff: noqa: D103

from __future__ import annotations

import io
import typing as typ

import msgspec
import pytest
from pytest_bdd import given, parsers, scenario, then, when
from ruamel.yaml import YAML

from ghmeta.config import ActionConfig
from ghmeta.errors import InsufficientHistoryError, MetadataError
from ghmeta.pipeline import ActionResult, RunnerFiles, run_action
from tests.helpers.action_env import (
    base_environ,
    make_context,
    pull_request_environ,
    pull_request_payload,
    push_payload,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from tests.helpers.git_fake import ScriptedGit

FEATURE = "../metadata_extraction.feature"


class StepContext(typ.TypedDict, total=False):
    """State shared between BDD steps in this module."""

    environ: dict[str, str]
    event: dict[str, typ.Any]
    inputs: dict[str, str]
    runner_files: RunnerFiles
    result: ActionResult
    error: MetadataError


@scenario(FEATURE, "Push to the default branch")
def test_push_to_default_branch() -> None:
    """Branch pushes to main are flagged as default and main."""


@scenario(FEATURE, "Push of a version tag")
def test_push_of_version_tag() -> None:
    """Version tags set tag_push_event."""


@scenario(FEATURE, "Push of a tag that is not a version")
def test_push_of_non_version_tag() -> None:
    """Other tags are tag pushes without tag_push_event."""


@scenario(FEATURE, "Pull request without enough history")
def test_pull_request_without_history() -> None:
    """A merge base beyond the depth bound fails the run."""


@scenario(FEATURE, "Artifact limited to YAML")
def test_artifact_limited_to_yaml() -> None:
    """Format selection controls the artifact contents."""


@scenario(FEATURE, "No files changed")
def test_no_files_changed() -> None:
    """An empty change set still renders completely."""


@pytest.fixture
def context(tmp_path: Path) -> StepContext:
    return {
        "inputs": {"RUNNER_TEMP": str(tmp_path / "runner-temp")},
        "runner_files": RunnerFiles(
            output=tmp_path / "output", summary=tmp_path / "summary.md"
        ),
    }


@given(parsers.parse('a push to "{ref}"'))
def push_to_ref(context: StepContext, scripted_git: ScriptedGit, ref: str) -> None:
    ref_type = "tag" if ref.startswith("refs/tags/") else "branch"
    context["environ"] = base_environ(GITHUB_REF=ref, GITHUB_REF_TYPE=ref_type)
    context["event"] = push_payload()
    scripted_git.diff_paths = ["src/app.py"]


@given(parsers.parse('a pull request from "{head}" into "{base}"'))
def pull_request(
    context: StepContext, scripted_git: ScriptedGit, head: str, base: str
) -> None:
    del scripted_git
    context["environ"] = pull_request_environ(
        GITHUB_HEAD_REF=head, GITHUB_BASE_REF=base
    )
    context["event"] = pull_request_payload(head_ref=head, base_ref=base)


@given(parsers.parse("the merge base is not within {depth:d} commits"))
def merge_base_out_of_reach(
    context: StepContext, scripted_git: ScriptedGit, depth: int
) -> None:
    context["inputs"]["INPUT_GIT_FETCH_DEPTH"] = str(depth)
    scripted_git.merge_base_depth = None


@given(parsers.parse('the input "{name}" is "{value}"'))
def action_input(context: StepContext, name: str, value: str) -> None:
    context["inputs"][f"INPUT_{name.upper()}"] = value


@given("no files changed")
def no_files_changed(scripted_git: ScriptedGit) -> None:
    scripted_git.diff_paths = []


@when("the action runs")
def the_action_runs(context: StepContext, tmp_path: Path) -> None:
    config = ActionConfig.from_env(context["inputs"])
    try:
        context["result"] = run_action(
            make_context(context["environ"], context["event"]),
            config,
            runner_files=context["runner_files"],
            workspace=tmp_path,
        )
    except MetadataError as exc:
        context["error"] = exc


@then(parsers.re(r'the output "(?P<name>[^"]+)" is "(?P<value>[^"]*)"'))
def output_value(context: StepContext, name: str, value: str) -> None:
    assert "error" not in context, f"Run failed: {context.get('error')}"
    outputs = context["result"].outputs
    assert outputs[name] == value, f"{name}={outputs[name]!r}, expected {value!r}"


@then("the diff strategy was used")
def diff_strategy_used(scripted_git: ScriptedGit) -> None:
    assert any(call[0] == "merge-base" for call in scripted_git.calls), (
        "Expected the diff strategy to look for a merge base"
    )


@then("the run fails with insufficient history")
def run_fails_with_insufficient_history(context: StepContext) -> None:
    error = context.get("error")
    assert isinstance(error, InsufficientHistoryError), f"Got {error!r}"
    assert error.depth == 15


@then("no step outputs were written")
def no_outputs_written(context: StepContext) -> None:
    output = context["runner_files"].output
    assert output is not None
    assert not output.exists(), "A failed run must not emit outputs"


@then(parsers.parse('the artifact directory contains only "{filename}"'))
def artifact_contains_only(context: StepContext, filename: str) -> None:
    artifact_path = context["result"].artifact_path
    assert artifact_path is not None, "Expected an artifact directory"
    assert [path.name for path in artifact_path.iterdir()] == [filename]


@then("the JSON and YAML renderings describe the same record")
def renderings_agree(context: StepContext) -> None:
    rendered = context["result"].rendered
    from_yaml = YAML(typ="safe", pure=True).load(io.StringIO(rendered.yaml))
    assert msgspec.json.decode(rendered.json) == from_yaml
