"""Formatter runner and pipeline routing tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from stub_ktfmt import CountingProvisioner, RecordingFormat, modern_entry_point, stub_bundle

from polisher.lib.config.settings import KtfmtConfig, NpmConfig, PolisherConfig, PrettierConfig
from polisher.lib.errors import ProvisioningError
from polisher.lib.formatter import FileResult, FileStatus, Formatter
from polisher.lib.kotlin._api import Style
from polisher.lib.pipeline import Pipeline
from polisher.lib.step.base import FormatterFunc, FormatterStep, StepCache


def _replace_factory(state: tuple[str, str]) -> FormatterFunc:
    old, new = state

    def _format(text: str, path: Path | None = None) -> str:
        _ = path
        return text.replace(old, new)

    return _format


def _failing_factory(state: str) -> FormatterFunc:
    def _format(text: str, path: Path | None = None) -> str:
        raise ValueError(f"{state}: cannot parse {path}")

    return _format


def _step(old: str, new: str) -> FormatterStep[tuple[str, str]]:
    return FormatterStep.create(f"replace-{old}", (old, new), _replace_factory)


def test_compute_applies_steps_in_order() -> None:
    formatter = Formatter([_step("a", "b"), _step("b", "c")])

    assert formatter.compute("aab") == "ccc"


def test_compute_preserves_windows_line_endings() -> None:
    seen: list[str] = []

    def _factory(state: str) -> FormatterFunc:
        def _format(text: str, path: Path | None = None) -> str:
            seen.append(text)
            return text.upper()

        return _format

    formatter = Formatter([FormatterStep.create("upper", "x", _factory)])

    assert formatter.compute("a\r\nb\r\n") == "A\r\nB\r\n"
    assert seen == ["a\nb\n"]


def test_compute_leaves_untouched_mixed_line_endings_alone() -> None:
    text = "a\r\nb\nc\r\n"

    assert Formatter([_step("x", "y")]).compute(text) == text


def test_compute_normalizes_changed_mixed_line_endings_to_lf() -> None:
    formatter = Formatter([_step("a", "A")])

    assert formatter.compute("a\r\nb\nc\r\n") == "A\nb\nc\n"


def test_format_file_writes_changes(tmp_path: Path) -> None:
    source = tmp_path / "Main.kt"
    source.write_text("val x=1\n", encoding="utf-8")

    result = Formatter([_step("=", " = ")]).format_file(source)

    assert result == FileResult(path=source, status=FileStatus.FORMATTED)
    assert source.read_text(encoding="utf-8") == "val x = 1\n"


def test_check_mode_reports_without_writing(tmp_path: Path) -> None:
    dirty = tmp_path / "Dirty.kt"
    clean = tmp_path / "Clean.kt"
    dirty.write_text("val x=1\n", encoding="utf-8")
    clean.write_text("val x = 1\n", encoding="utf-8")

    results = Formatter([_step("x=1", "x = 1")]).format_files([dirty, clean], check=True)

    assert [result.status for result in results] == [FileStatus.DIRTY, FileStatus.CLEAN]
    assert dirty.read_text(encoding="utf-8") == "val x=1\n"


def test_step_failure_is_reported_per_file(tmp_path: Path) -> None:
    source = tmp_path / "Broken.kt"
    source.write_text("val =\n", encoding="utf-8")
    formatter = Formatter([FormatterStep.create("fail", "ktfmt", _failing_factory)])

    [result] = formatter.format_files([source])

    assert result.status is FileStatus.ERROR
    assert result.error is not None
    assert "cannot parse" in result.error
    assert result.format_text().startswith("error\t")


def test_step_setup_failure_aborts_the_run(tmp_path: Path) -> None:
    source = tmp_path / "Main.kt"
    source.write_text("val x=1\n", encoding="utf-8")
    error = ProvisioningError("no ktfmt artifact")
    provisioner = CountingProvisioner(error=error)
    pipeline = Pipeline(PolisherConfig(), tmp_path, provisioner=provisioner, cache=StepCache())

    with pytest.raises(ProvisioningError) as excinfo:
        pipeline.format_files([source])

    assert excinfo.value is error
    assert source.read_text(encoding="utf-8") == "val x=1\n"


def test_format_files_keeps_input_order(tmp_path: Path) -> None:
    paths = []
    for index in range(12):
        path = tmp_path / f"File{index}.kt"
        path.write_text(f"val x{index}=1\n", encoding="utf-8")
        paths.append(path)

    results = Formatter([_step("=", " = ")], max_workers=4).format_files(paths)

    assert [result.path for result in results] == paths
    assert all(result.status is FileStatus.FORMATTED for result in results)


@pytest.fixture
def provisioner() -> CountingProvisioner:
    return CountingProvisioner(stub_bundle(modern_entry_point(RecordingFormat(
        lambda *args: args[-1].replace("=", " = ")
    ))))


def test_pipeline_routes_by_extension(tmp_path: Path, provisioner: CountingProvisioner) -> None:
    kotlin = tmp_path / "Main.kt"
    notes = tmp_path / "notes.txt"
    kotlin.write_text("val x=1\n", encoding="utf-8")
    notes.write_text("a=b\n", encoding="utf-8")
    pipeline = Pipeline(PolisherConfig(), tmp_path, provisioner=provisioner, cache=StepCache())

    results = pipeline.format_files([kotlin, notes])

    assert results == [FileResult(path=kotlin, status=FileStatus.FORMATTED)]
    assert kotlin.read_text(encoding="utf-8") == "val x = 1\n"
    assert notes.read_text(encoding="utf-8") == "a=b\n"
    assert pipeline.steps_for(notes) == ()


def test_pipelines_sharing_a_cache_provision_once(
    tmp_path: Path,
    provisioner: CountingProvisioner,
) -> None:
    cache = StepCache()
    config = PolisherConfig(ktfmt=KtfmtConfig(version="0.21", style=Style.GOOGLE))
    first = Pipeline(config, tmp_path, provisioner=provisioner, cache=cache)
    second = Pipeline(config, tmp_path, provisioner=provisioner, cache=cache)
    source = tmp_path / "Main.kt"

    for pipeline in (first, second):
        source.write_text("val x=1\n", encoding="utf-8")
        pipeline.format_files([source])

    [step] = first.steps_for(source)
    assert second.steps_for(source) == (step,)
    assert second.steps_for(source)[0] is step
    assert provisioner.calls == 1


def test_prettier_steps_differ_by_npm_settings(tmp_path: Path) -> None:
    cache = StepCache()
    script = tmp_path / "app.ts"
    steps = []
    for executable in ("/opt/a/npm", "/opt/b/npm"):
        config = PolisherConfig(
            prettier=PrettierConfig(enabled=True),
            npm=NpmConfig(executable=executable),
        )
        [step] = Pipeline(config, tmp_path, cache=cache).steps_for(script)
        steps.append(step)

    first, second = steps
    assert first is not second
    assert len(cache) == 2
    assert first.state.npm_executable == Path("/opt/a/npm")
    assert second.state.npm_executable == Path("/opt/b/npm")
