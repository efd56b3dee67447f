"""Integration tests for the full discovery, collection and merge pipeline."""

import logging
import threading
from pathlib import Path

import pytest

from bytescope.application import PipelineCoordinator, PipelineState, run_pipeline
from bytescope.domain.exceptions import (
    ByteScopeError,
    PipelineStateError,
    RenderingError,
    RootDirectoryError,
)
from bytescope.domain.models import ByteHistogram
from bytescope.infrastructure.config import PipelineConfig
from bytescope.infrastructure.logging import LOGGER_NAME
from bytescope.infrastructure.parallel import FileHistogramWorker
from bytescope.infrastructure.progress import ProgressTracker
from bytescope.infrastructure.rendering import BarChartRenderer, HistogramRenderer, JSONExporter

from tests.conftest import build_tree, expected_counts


def _coordinator(root: Path, **kwargs) -> PipelineCoordinator:
    return PipelineCoordinator(PipelineConfig(root_directory=str(root), **kwargs))


class _RecordingRenderer(HistogramRenderer):
    name = "recording"

    def __init__(self):
        self.seen = []

    def render(self, result):
        self.seen.append(result.histogram.copy())
        return "recorded"


class _FailingRenderer(HistogramRenderer):
    name = "failing"

    def render(self, result):
        raise RenderingError("cannot draw", renderer=self.name)


class _DeletingTracker(ProgressTracker):
    """Removes a file just before a worker opens it."""

    def __init__(self, victim: Path):
        super().__init__()
        self.victim = victim

    def on_file_start(self, file_path: str):
        if Path(file_path) == self.victim and self.victim.exists():
            self.victim.unlink()
        super().on_file_start(file_path)


@pytest.mark.integration
class TestPipelineHistogram:
    """The total histogram equals the per-byte count over every readable file."""

    def test_total_matches_reference(self, temp_dir, sample_tree):
        result = _coordinator(temp_dir).run()

        assert result.histogram.counts == expected_counts(*sample_tree.values())
        assert result.total_bytes == sum(len(data) for data in sample_tree.values())
        assert result.files_processed == len(sample_tree)
        assert result.files_failed == 0

    @pytest.mark.parametrize("worker_count", [1, 2, 8])
    def test_worker_count_does_not_change_result(self, temp_dir, sample_tree, worker_count):
        result = _coordinator(temp_dir, worker_count=worker_count).run()

        assert result.histogram.counts == expected_counts(*sample_tree.values())
        assert result.partials_merged == worker_count

    @pytest.mark.parametrize("queue_capacity", [1, 1000])
    def test_queue_capacity_does_not_change_result(self, many_files_tree, queue_capacity):
        result = _coordinator(many_files_tree, queue_capacity=queue_capacity).run()

        assert result.histogram[0x41] == 100
        assert result.total_bytes == 100
        assert result.walk_stats.files_discovered == 100

    def test_more_workers_than_files(self, temp_dir):
        build_tree(temp_dir, {"only.txt": b"xyz"})

        result = _coordinator(temp_dir, worker_count=16).run()

        assert result.total_bytes == 3
        assert result.partials_merged == 16

    def test_empty_directory(self, temp_dir):
        result = _coordinator(temp_dir).run()

        assert result.histogram == ByteHistogram()
        assert result.files_processed == 0

    def test_directory_of_empty_files(self, temp_dir):
        build_tree(temp_dir, {f"empty{i}": b"" for i in range(5)})

        result = _coordinator(temp_dir).run()

        assert result.total_bytes == 0
        assert result.files_processed == 5

    def test_file_removed_after_discovery_is_skipped(self, temp_dir):
        files = build_tree(temp_dir, {"keep.txt": b"keep", "victim.txt": b"victim"})
        tracker = _DeletingTracker(temp_dir / "victim.txt")

        result = PipelineCoordinator(
            PipelineConfig(root_directory=str(temp_dir), worker_count=2),
            progress=tracker,
        ).run()

        assert result.histogram.counts == expected_counts(files["keep.txt"])
        assert result.files_failed == 1
        assert result.files_processed == 1
        assert tracker.snapshot().files_failed == 1

    def test_exclusions_are_not_counted(self, temp_dir):
        build_tree(temp_dir, {"a.txt": b"aa", "b.log": b"bbbb", ".cache/c": b"cc"})

        result = _coordinator(temp_dir, exclude=["*.log", ".cache"]).run()

        assert result.histogram.counts == expected_counts(b"aa")

    def test_progress_tracker_sees_every_file(self, temp_dir, sample_tree):
        tracker = ProgressTracker()

        PipelineCoordinator(
            PipelineConfig(root_directory=str(temp_dir)), progress=tracker
        ).run()

        progress = tracker.get_progress()
        assert progress["files_discovered"] == len(sample_tree)
        assert progress["files_completed"] == len(sample_tree)
        assert progress["progress_percent"] == 100.0

    def test_run_pipeline_helper(self, many_files_tree):
        histogram = run_pipeline(str(many_files_tree), worker_count=3, queue_capacity=2)

        assert histogram.counts == expected_counts(b"A" * 100)


@pytest.mark.integration
class TestPipelineLifecycle:
    """State transitions and failure handling of the coordinator."""

    def test_missing_root_fails_before_collection(self, temp_dir):
        coordinator = _coordinator(temp_dir / "missing")

        with pytest.raises(RootDirectoryError, match="directory not found"):
            coordinator.run()

        assert coordinator.state is PipelineState.FAILED

    def test_root_that_is_a_file(self, temp_dir):
        build_tree(temp_dir, {"file.bin": b"\x00"})
        coordinator = _coordinator(temp_dir / "file.bin")

        with pytest.raises(RootDirectoryError, match="not a directory"):
            coordinator.run()

        assert coordinator.state is PipelineState.FAILED

    def test_states_through_a_full_run(self, temp_dir, sample_tree):
        coordinator = _coordinator(temp_dir)
        assert coordinator.state is PipelineState.INITIALIZING

        result = coordinator.run()
        assert coordinator.state is PipelineState.MERGING

        outcome = coordinator.render(result, [])
        assert coordinator.state is PipelineState.DONE
        assert outcome.success

    def test_cannot_run_twice(self, temp_dir):
        coordinator = _coordinator(temp_dir)
        coordinator.run()

        with pytest.raises(PipelineStateError):
            coordinator.run()

    def test_cannot_render_before_run(self, temp_dir):
        coordinator = _coordinator(temp_dir)

        with pytest.raises(PipelineStateError):
            coordinator.render(None, [])

    def test_execute_hands_total_to_renderers(self, temp_dir, sample_tree):
        recorder = _RecordingRenderer()

        result, outcome = _coordinator(temp_dir).execute([recorder])

        assert recorder.seen == [result.histogram]
        assert outcome.outputs == {"recording": "recorded"}

    def test_failing_renderer_does_not_stop_others(self, temp_dir, sample_tree):
        recorder = _RecordingRenderer()
        coordinator = _coordinator(temp_dir)

        _, outcome = coordinator.execute([_FailingRenderer(), recorder])

        assert not outcome.success
        assert outcome.errors == {"failing": "cannot draw"}
        assert len(recorder.seen) == 1
        assert coordinator.state is PipelineState.DONE

    def test_json_export_of_a_real_run(self, temp_dir):
        root = temp_dir / "tree"
        build_tree(root, {"x.bin": b"\x01\x02\x02"})
        exporter = JSONExporter(output_directory=temp_dir / "out")

        _, outcome = _coordinator(root).execute([exporter])

        assert outcome.outputs["json"].is_file()

    def test_start_and_quit_are_logged(self, temp_dir, caplog):
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            _coordinator(temp_dir).execute()

        messages = [record.getMessage() for record in caplog.records]
        assert any(m.startswith(f"Start research {temp_dir}") for m in messages)
        assert "Quit" in messages

    def test_all_workers_crashing_fails_instead_of_hanging(self, temp_dir, monkeypatch):
        build_tree(temp_dir, {f"f{i}.txt": b"x" for i in range(10)})

        def boom(self, path):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(FileHistogramWorker, "process_file", boom)
        monkeypatch.setattr(threading, "excepthook", lambda args: None)
        coordinator = _coordinator(temp_dir, worker_count=1, queue_capacity=1)
        outcome = {}

        def target():
            try:
                coordinator.run()
            except ByteScopeError as e:
                outcome["error"] = e

        runner = threading.Thread(target=target, daemon=True)
        runner.start()
        runner.join(10.0)

        assert not runner.is_alive()
        assert "terminated unexpectedly" in str(outcome["error"])
        assert coordinator.state is PipelineState.FAILED

    def test_bad_chart_color_does_not_stop_other_renderers(self, temp_dir):
        root = temp_dir / "tree"
        build_tree(root, {"x.bin": b"abc"})
        charts = BarChartRenderer(output_directory=temp_dir / "out", bar_color="not-a-colour")
        exporter = JSONExporter(output_directory=temp_dir / "out")
        coordinator = _coordinator(root)

        _, outcome = coordinator.execute([charts, exporter])

        assert set(outcome.errors) == {"png"}
        assert outcome.outputs["json"].is_file()
        assert coordinator.state is PipelineState.DONE
