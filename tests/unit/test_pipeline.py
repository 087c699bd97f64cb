"""Unit tests for the extraction pipeline."""

from __future__ import annotations

import typing as typ

import msgspec
import pytest

from ghmeta.config import ActionConfig, ArtifactFormat
from ghmeta.errors import ArtifactWriteError, InsufficientHistoryError
from ghmeta.pipeline import RunnerFiles, collect_metadata, run_action
from tests.helpers.action_env import (
    FailingDetector,
    StaticDetector,
    make_context,
    pull_request_environ,
    pull_request_payload,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from tests.helpers.git_fake import ScriptedGit


def _runner_files(tmp_path: Path) -> RunnerFiles:
    return RunnerFiles(output=tmp_path / "output", summary=tmp_path / "summary.md")


def _config(tmp_path: Path, **overrides: typ.Any) -> ActionConfig:  # noqa: ANN401
    values: dict[str, typ.Any] = {"artifact_dir": tmp_path / "artifacts"}
    values.update(overrides)
    return ActionConfig(**values)


class TestRunnerFiles:
    """Tests for RunnerFiles.from_environ."""

    def test_reads_command_file_paths(self, tmp_path: Path) -> None:
        """Both command files are taken from the environment."""
        files = RunnerFiles.from_environ(
            {
                "GITHUB_OUTPUT": str(tmp_path / "o"),
                "GITHUB_STEP_SUMMARY": str(tmp_path / "s"),
            }
        )
        assert files.output == tmp_path / "o"
        assert files.summary == tmp_path / "s"

    def test_blank_paths_mean_stdout(self) -> None:
        """Unset or blank variables fall back to stdout."""
        files = RunnerFiles.from_environ({"GITHUB_OUTPUT": "  "})
        assert files.output is None
        assert files.summary is None


class TestRunAction:
    """Tests for run_action."""

    def test_successful_run_emits_everything(self, tmp_path: Path) -> None:
        """Outputs, summary, and artifacts are all written."""
        files = _runner_files(tmp_path)

        result = run_action(
            make_context(),
            _config(tmp_path, upload_artifact=True),
            runner_files=files,
            detector=StaticDetector(["a.py"]),
        )

        assert result.artifact_path is not None
        assert result.artifact_path.parent == tmp_path / "artifacts"
        assert result.artifact_path.name.startswith("build-")
        assert sorted(p.name for p in result.artifact_path.iterdir()) == [
            "metadata-pretty.json",
            "metadata.json",
            "metadata.yaml",
        ]
        output_text = (tmp_path / "output").read_text(encoding="utf-8")
        assert "commit_sha_short=a1b2c3d\n" in output_text
        assert f"artifact_name={result.artifact_path.name}\n" in output_text
        assert "metadata_yaml<<ghmeta_" in output_text
        summary = (tmp_path / "summary.md").read_text(encoding="utf-8")
        assert summary.startswith("# Repository metadata: octo/reef")

    def test_outputs_match_json(self, tmp_path: Path) -> None:
        """Every leaf output agrees with the JSON document."""
        result = run_action(
            make_context(pull_request_environ(), pull_request_payload()),
            _config(tmp_path),
            runner_files=_runner_files(tmp_path),
            detector=StaticDetector([]),
        )

        decoded = msgspec.json.decode(result.outputs["metadata_json"])
        assert result.outputs["pr_number"] == str(decoded["pull_request"]["number"])
        assert result.outputs["changed_files_count"] == "0"
        assert result.outputs["changed_files"] == ""
        assert result.rendered.yaml == result.outputs["metadata_yaml"]

    def test_no_artifacts_unless_requested(self, tmp_path: Path) -> None:
        """upload_artifact defaults to off."""
        result = run_action(
            make_context(),
            _config(tmp_path),
            runner_files=_runner_files(tmp_path),
            detector=StaticDetector(),
        )

        assert result.artifact_path is None
        assert "artifact_path" not in result.outputs
        assert not (tmp_path / "artifacts").exists()

    def test_yaml_only_artifact(self, tmp_path: Path) -> None:
        """Format selection controls which files are written."""
        result = run_action(
            make_context(),
            _config(
                tmp_path,
                upload_artifact=True,
                artifact_formats=(ArtifactFormat.YAML,),
            ),
            runner_files=_runner_files(tmp_path),
            detector=StaticDetector(),
        )

        assert result.artifact_path is not None
        assert [p.name for p in result.artifact_path.iterdir()] == ["metadata.yaml"]

    def test_summary_skipped_when_disabled(self, tmp_path: Path) -> None:
        """generate_summary=false leaves the summary file untouched."""
        files = _runner_files(tmp_path)

        result = run_action(
            make_context(),
            _config(tmp_path, generate_summary=False),
            runner_files=files,
            detector=StaticDetector(),
        )

        assert result.summary is None
        assert not (tmp_path / "summary.md").exists()

    def test_failed_detection_writes_nothing(self, tmp_path: Path) -> None:
        """A stage failure leaves no outputs, summary, or artifacts."""
        files = _runner_files(tmp_path)

        with pytest.raises(InsufficientHistoryError):
            run_action(
                make_context(),
                _config(tmp_path, upload_artifact=True),
                runner_files=files,
                detector=FailingDetector(
                    InsufficientHistoryError("origin/main", depth=15)
                ),
            )

        assert not (tmp_path / "output").exists()
        assert not (tmp_path / "summary.md").exists()
        assert not (tmp_path / "artifacts").exists()

    def test_output_failure_removes_artifacts(self, tmp_path: Path) -> None:
        """Artifacts written by a run that then fails are removed."""
        files = RunnerFiles(output=tmp_path, summary=None)
        config = _config(tmp_path, upload_artifact=True, generate_summary=False)

        with pytest.raises(ArtifactWriteError) as excinfo:
            run_action(
                make_context(),
                config,
                runner_files=files,
                detector=StaticDetector(),
            )

        assert excinfo.value.stage == "outputs"
        assert list((tmp_path / "artifacts").iterdir()) == []

    def test_partial_artifact_write_is_removed(
        self, tmp_path: Path, disk_full_on_second_write: list[Path]
    ) -> None:
        """A disk filling up mid-artifact leaves no directory or outputs."""
        files = _runner_files(tmp_path)

        with pytest.raises(ArtifactWriteError) as excinfo:
            run_action(
                make_context(),
                _config(tmp_path, upload_artifact=True),
                runner_files=files,
                detector=StaticDetector(),
            )

        assert excinfo.value.stage == "artifacts"
        assert len(disk_full_on_second_write) == 2
        assert list((tmp_path / "artifacts").rglob("*")) == []
        assert not (tmp_path / "output").exists()
        assert not (tmp_path / "summary.md").exists()


class TestCollectMetadata:
    """Tests for collect_metadata strategy wiring."""

    def test_selects_git_strategy_without_token(
        self, tmp_path: Path, scripted_git: ScriptedGit
    ) -> None:
        """Without a token the diff strategy runs against the workspace."""
        scripted_git.diff_paths = ["src/app.py"]

        record, rendered = collect_metadata(
            make_context(), _config(tmp_path), workspace=tmp_path
        )

        assert record.changed_files.files == "src/app.py"
        assert any(call[0] == "diff" for call in scripted_git.calls)
        assert rendered.data["changed_files"]["count"] == 1

    def test_pull_request_without_history_fails(
        self, tmp_path: Path, scripted_git: ScriptedGit
    ) -> None:
        """A merge base outside the depth bound is fatal."""
        scripted_git.merge_base_depth = None

        with pytest.raises(InsufficientHistoryError):
            collect_metadata(
                make_context(pull_request_environ(), pull_request_payload()),
                _config(tmp_path, git_fetch_depth=10),
                workspace=tmp_path,
            )

        assert scripted_git.depth == 10
