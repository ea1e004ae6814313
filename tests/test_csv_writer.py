from __future__ import annotations

import datetime as dt
import threading
from pathlib import Path

import pytest

from gamebar.analysis.session_analyzer import SessionAnalyzer
from gamebar.config.app_config import AnalyzerSettings, load_analyzer_settings, save_analyzer_settings
from gamebar.config.log_format import LOG_HEADER
from gamebar.dataio.csv_writer import SessionLogRecorder, write_rows


def test_write_rows_creates_directories(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "out.csv"
    write_rows(path, ["a", "b"], [[1, 2], [3, 4]])
    assert path.read_text(encoding="utf-8") == "a,b\n1,2\n3,4\n"


def test_samples_are_ignored_until_capture_starts() -> None:
    recorder = SessionLogRecorder()
    assert not recorder.add_sample(fps=60)
    assert len(recorder) == 0

    recorder.start_capture()
    assert recorder.is_capturing
    assert recorder.add_sample(fps=60)
    recorder.stop_capture()
    assert not recorder.add_sample(fps=61)
    assert len(recorder) == 1


def test_unknown_columns_are_rejected() -> None:
    recorder = SessionLogRecorder()
    recorder.start_capture()
    with pytest.raises(TypeError):
        recorder.add_sample(fps=60, bogus=1)

    recorder.stop_capture()
    with pytest.raises(TypeError):
        recorder.add_sample(fps=60, bogus=1)


def test_buffer_keeps_only_newest_rows(tmp_path: Path) -> None:
    recorder = SessionLogRecorder(max_rows=3)
    recorder.start_capture()
    start = dt.datetime(2025, 1, 1, 10, 0, 0)
    for i in range(5):
        recorder.add_sample(start + dt.timedelta(seconds=i), package_name="pkg", fps=50 + i)

    assert len(recorder) == 3
    path = recorder.export(tmp_path, started_at=start)
    assert path is not None
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ",".join(LOG_HEADER)
    assert [line.split(",")[2] for line in lines[1:]] == ["52", "53", "54"]


def test_export_empty_buffer_writes_nothing(tmp_path: Path) -> None:
    recorder = SessionLogRecorder()
    assert recorder.export(tmp_path) is None
    assert list(tmp_path.iterdir()) == []


def test_exported_log_round_trips_through_analyzer(tmp_path: Path) -> None:
    recorder = SessionLogRecorder()
    recorder.start_capture()
    start = dt.datetime(2025, 1, 15, 14, 32, 45)
    recorder.add_sample(
        start,
        package_name="com.example.game",
        fps=60,
        frame_time=16.7,
        cpu_usage=35,
        cpu_clock=["cpu0: 1800 MHz", "cpu1: 2000 MHz"],
        cpu_temp=51.2,
        gpu_usage=44,
        gpu_clock=585,
        gpu_temp=47.0,
    )
    recorder.add_sample(start + dt.timedelta(seconds=1), package_name="com.example.game", fps=40)
    recorder.stop_capture()

    path = recorder.export(tmp_path, started_at=start)
    assert path is not None
    assert path.name == "com.example.game_GameBar_log_20250115_143245.csv"

    report = SessionAnalyzer().analyze(path)
    assert report is not None
    assert report.app_name == "com.example.game"
    assert report.session_date == "Jan 15, 2025 14:32"
    assert report.total_samples == 2
    assert report.fps_stats.avg_fps == 50.0
    assert sorted(report.cpu_clock_series) == [0, 1]
    assert report.session_duration == "1s"


def test_recorder_sized_from_saved_settings(tmp_path: Path) -> None:
    path = save_analyzer_settings(AnalyzerSettings(max_buffered_rows=3), tmp_path / "settings.yaml")
    recorder = SessionLogRecorder.from_settings(load_analyzer_settings(path))
    recorder.start_capture()
    for i in range(5):
        recorder.add_sample(fps=50 + i)
    assert len(recorder) == 3


def test_export_names_file_after_oldest_row(tmp_path: Path) -> None:
    recorder = SessionLogRecorder()
    recorder.start_capture()
    start = dt.datetime(2025, 1, 1, 10, 0, 0)
    recorder.add_sample(start, package_name="pkg", fps=60)
    recorder.add_sample(start + dt.timedelta(seconds=1), package_name="other", fps=61)

    path = recorder.export(tmp_path)
    assert path is not None
    assert path.name == "pkg_GameBar_log_20250101_100000.csv"


def test_stop_capture_is_final_across_threads() -> None:
    recorder = SessionLogRecorder(max_rows=100_000)
    recorder.start_capture()
    stopped = threading.Event()
    late = []

    def producer() -> None:
        for _ in range(2000):
            was_stopped = stopped.is_set()
            if recorder.add_sample(fps=60) and was_stopped:
                late.append(True)

    threads = [threading.Thread(target=producer) for _ in range(4)]
    for t in threads:
        t.start()
    recorder.stop_capture()
    stopped.set()
    count = len(recorder)
    for t in threads:
        t.join()

    assert late == []
    assert len(recorder) == count
    assert not recorder.is_capturing
