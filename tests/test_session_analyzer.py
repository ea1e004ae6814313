from __future__ import annotations

from pathlib import Path

import pytest

from gamebar.analysis.session_analyzer import (
    SessionAnalyzer,
    format_duration,
    format_fps_stats,
)
from gamebar.config.app_config import AnalyzerSettings

HEADER = (
    "DateTime,PackageName,FPS,Frame_Time,Battery_Temp,CPU_Usage,CPU_Clock,CPU_Temp,"
    "RAM_Usage,RAM_Speed,RAM_Temp,GPU_Usage,GPU_Clock,GPU_Temp"
)
LOG_NAME = "com.example.game_GameBar_log_20250101_100000.csv"


def _row(ts: str, fps: str, **extra: str) -> str:
    cols = {
        "frame_time": "N/A",
        "battery_temp": "N/A",
        "cpu_usage": "N/A",
        "cpu_clock": "N/A",
        "cpu_temp": "N/A",
        "ram_usage": "N/A",
        "ram_speed": "N/A",
        "ram_temp": "N/A",
        "gpu_usage": "N/A",
        "gpu_clock": "N/A",
        "gpu_temp": "N/A",
    }
    cols.update(extra)
    return ",".join([ts, "com.example.game", fps, *cols.values()])


def _write_log(tmp_path: Path, lines: list[str], name: str = LOG_NAME) -> Path:
    path = tmp_path / name
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_fps_statistics_for_three_samples(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("2025-01-01 10:00:00", "60"),
            _row("2025-01-01 10:00:01", "30"),
            _row("2025-01-01 10:00:02", "90"),
        ],
    )
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    stats = report.fps_stats
    assert stats.max_fps == 90.0
    assert stats.min_fps == 30.0
    assert stats.avg_fps == pytest.approx(60.0)
    assert stats.variance == pytest.approx(600.0)
    assert stats.standard_deviation == pytest.approx(600.0 ** 0.5)
    assert stats.fps_1_percent_low == 30.0
    assert stats.fps_0_1_percent_low == 30.0
    assert stats.smoothness_percentage == pytest.approx(66.67, abs=0.01)
    assert report.total_samples == 3
    assert report.app_name == "com.example.game"
    assert report.session_duration == "2s"
    assert report.session_date == "Jan 01, 2025 10:00"
    assert list(report.fps_series) == [(0, 60.0), (1000, 30.0), (2000, 90.0)]
    assert report.cpu_usage_series == ()
    assert report.cpu_clock_series == {}


def test_not_available_fps_row_does_not_stop_parsing(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("2025-01-01 10:00:00", "60"),
            _row("2025-01-01 10:00:01", "N/A", cpu_usage="40"),
            _row("2025-01-01 10:00:02", "58"),
        ],
    )
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    assert report.total_samples == 2
    assert [v for _, v in report.fps_series] == [60.0, 58.0]
    # The CPU sample borrows the time of the latest FPS point.
    assert list(report.cpu_usage_series) == [(0, 40.0)]


def test_cpu_clock_series_per_core(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("2025-01-01 10:00:00", "60", cpu_clock="cpu0: 1800 MHz;cpu1: garbage;cpu2: 2000 MHz"),
            _row("2025-01-01 10:00:01", "61", cpu_clock="cpu0: 1900 MHz;cpu1: N/A;cpu2: 2100 MHz"),
        ],
    )
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    assert sorted(report.cpu_clock_series) == [0, 2]
    assert list(report.cpu_clock_series[0]) == [(0, 1800.0), (1000, 1900.0)]
    assert list(report.cpu_clock_series[2]) == [(0, 2000.0), (1000, 2100.0)]


def test_zero_core_clocks_are_dropped(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [HEADER, _row("2025-01-01 10:00:00", "60", cpu_clock="cpu0: 0 MHz;cpu1: 1800 MHz")],
    )
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    assert sorted(report.cpu_clock_series) == [1]


def test_all_unavailable_fps_yields_no_report(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("2025-01-01 10:00:00", "N/A", cpu_usage="20"),
            _row("2025-01-01 10:00:01", "-", cpu_usage="25"),
            _row("2025-01-01 10:00:02", "0"),
        ],
    )
    assert SessionAnalyzer().analyze(path) is None


def test_missing_and_empty_files_yield_no_report(tmp_path: Path) -> None:
    analyzer = SessionAnalyzer()
    assert analyzer.analyze(tmp_path / "nope.csv") is None
    assert analyzer.analyze(tmp_path) is None
    assert analyzer.analyze(_write_log(tmp_path, [HEADER])) is None


def test_duration_and_date_rendering(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("2025-01-01 10:00:00", "60"),
            _row("2025-01-01 10:01:05", "60"),
        ],
    )
    report = SessionAnalyzer().analyze(path)
    assert report is not None
    assert report.session_duration == "1m 5s"


def test_swapped_or_missing_timestamps_are_unknown(tmp_path: Path) -> None:
    swapped = _write_log(
        tmp_path,
        [HEADER, _row("2025-01-01 10:01:05", "60"), _row("2025-01-01 10:00:00", "60")],
        name="swapped_GameBar_log_20250101_100105.csv",
    )
    missing = _write_log(
        tmp_path,
        [HEADER, _row("2025-01-01 10:00:00", "60"), _row("not a time", "60")],
        name="session.csv",
    )

    swapped_report = SessionAnalyzer().analyze(swapped)
    missing_report = SessionAnalyzer().analyze(missing)

    assert swapped_report is not None and missing_report is not None
    assert swapped_report.session_duration == "Unknown"
    assert missing_report.session_duration == "Unknown"
    assert missing_report.session_date == "Unknown Date"


def test_synthetic_clock_when_timestamps_do_not_parse(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row("garbage", "60", gpu_usage="10"),
            _row("garbage", "55", gpu_usage="12"),
            "short,line",
            _row("garbage", "50", gpu_usage="14"),
            "",
            _row("garbage", "45", gpu_usage="16"),
        ],
    )
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    assert list(report.fps_series) == [(1000, 60.0), (2000, 55.0), (4000, 50.0), (6000, 45.0)]
    assert list(report.gpu_usage_series) == [(1000, 10.0), (2000, 12.0), (4000, 14.0), (6000, 16.0)]
    assert report.session_duration == "Unknown"


def test_channel_statistics_and_acceptance_filters(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [
            HEADER,
            _row(
                "2025-01-01 10:00:00",
                "60",
                frame_time="16.7",
                battery_temp="33.5",
                cpu_usage="0",
                cpu_temp="50",
                ram_usage="3000",
                ram_speed="2.133 GHz",
                ram_temp="40.0°C",
                gpu_usage="20",
                gpu_clock="500",
                gpu_temp="45",
            ),
            _row(
                "2025-01-01 10:00:01",
                "58",
                frame_time="-3",
                cpu_usage="50",
                cpu_temp="60",
                gpu_usage="40",
                gpu_clock="0",
                gpu_temp="55",
            ),
        ],
    )
    report = SessionAnalyzer().analyze(path)
    assert report is not None

    cpu, gpu = report.cpu_stats, report.gpu_stats
    assert (cpu.usage.minimum, cpu.usage.maximum, cpu.usage.average) == (0.0, 50.0, 25.0)
    assert (cpu.temp.minimum, cpu.temp.maximum, cpu.temp.average) == (50.0, 60.0, 55.0)
    assert (gpu.usage.minimum, gpu.usage.maximum, gpu.usage.average) == (20.0, 40.0, 30.0)
    # A zero clock is not a valid reading.
    assert (gpu.clock.minimum, gpu.clock.maximum, gpu.clock.average) == (500.0, 500.0, 500.0)
    assert gpu.temp.average == 50.0

    assert list(report.frame_time_series) == [(0, 16.7)]
    assert list(report.battery_temp_series) == [(0, 33.5)]
    assert list(report.ram_usage_series) == [(0, 3000.0)]
    assert list(report.ram_speed_series) == [(0, pytest.approx(2133.0))]
    assert list(report.ram_temp_series) == [(0, 40.0)]


def test_empty_channels_report_zero_statistics(tmp_path: Path) -> None:
    path = _write_log(tmp_path, [HEADER, _row("2025-01-01 10:00:00", "60")])
    report = SessionAnalyzer().analyze(path)

    assert report is not None
    assert report.cpu_stats.usage.maximum == 0.0
    assert report.gpu_stats.clock.average == 0.0


def test_custom_smoothness_threshold(tmp_path: Path) -> None:
    path = _write_log(
        tmp_path,
        [HEADER, _row("2025-01-01 10:00:00", "50"), _row("2025-01-01 10:00:01", "70")],
    )
    settings = AnalyzerSettings(smoothness_threshold_fps=60.0)
    report = SessionAnalyzer(settings).analyze(path)

    assert report is not None
    assert report.fps_stats.smoothness_percentage == 50.0


def test_analyze_is_repeatable(tmp_path: Path) -> None:
    path = _write_log(tmp_path, [HEADER, _row("2025-01-01 10:00:00", "60")])
    analyzer = SessionAnalyzer()
    assert analyzer.analyze(path) == analyzer.analyze(path)


def test_unexpected_errors_become_none(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_log(tmp_path, [HEADER, _row("2025-01-01 10:00:00", "60")])

    def _boom(*_args, **_kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("gamebar.analysis.session_analyzer.read_rows", _boom)
    assert SessionAnalyzer().analyze(path) is None


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (0, 0, "0s"),
        (0, 59_999, "59s"),
        (0, 65_000, "1m 5s"),
        (0, 3_723_000, "1h 2m 3s"),
        (None, 1000, "Unknown"),
        (5000, 1000, "Unknown"),
    ],
)
def test_format_duration(start, end, expected) -> None:
    assert format_duration(start, end) == expected


def test_format_fps_stats_lists_lows(tmp_path: Path) -> None:
    path = _write_log(tmp_path, [HEADER, _row("2025-01-01 10:00:00", "60")])
    report = SessionAnalyzer().analyze(path)
    assert report is not None

    text = format_fps_stats(report.fps_stats)
    assert "Avg FPS:     60.0" in text
    assert "1% Low:      60.0" in text
    assert "0.1% Low:    60.0" in text
