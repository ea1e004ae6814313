#!/usr/bin/env python3
"""
Command-line front end for session analytics and sensor detection.

Sub-commands:

  * ``analyze LOG [--plot PNG]`` prints the session summary and frame-pacing
    statistics, optionally rendering the time series with Matplotlib;
  * ``detect`` prints the sysfs node and divider chosen for each metric;
  * ``history [DIR]`` lists recorded session logs, newest first.

When ``history`` gets no directory it uses ``AppPaths().logs`` (override with
``GAMEBAR_LOG_DIR``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..analysis.session_analyzer import SessionAnalyzer, format_fps_stats
from ..config.app_config import AppPaths, load_analyzer_settings
from ..core.models import SessionReport, TimeSeries
from ..dataio.file_paths import list_session_logs
from ..sensors.sysfs_detector import SensorPathResolver

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- # output
def summarize(report: SessionReport) -> str:
    cpu, gpu = report.cpu_stats, report.gpu_stats
    lines = [
        f"App:         {report.app_name or '-'}",
        f"Date:        {report.session_date}",
        f"Duration:    {report.session_duration}",
        f"Samples:     {report.total_samples}",
        "",
        format_fps_stats(report.fps_stats),
        f"CPU usage:   {cpu.usage.minimum:.0f}-{cpu.usage.maximum:.0f}% (avg {cpu.usage.average:.1f}%)",
        f"CPU temp:    {cpu.temp.minimum:.1f}-{cpu.temp.maximum:.1f} C (avg {cpu.temp.average:.1f} C)",
        f"GPU usage:   {gpu.usage.minimum:.0f}-{gpu.usage.maximum:.0f}% (avg {gpu.usage.average:.1f}%)",
        f"GPU clock:   {gpu.clock.minimum:.0f}-{gpu.clock.maximum:.0f} MHz (avg {gpu.clock.average:.0f} MHz)",
        f"GPU temp:    {gpu.temp.minimum:.1f}-{gpu.temp.maximum:.1f} C (avg {gpu.temp.average:.1f} C)",
    ]
    return "\n".join(lines)


def _plot_series(ax, series: TimeSeries, label: str) -> None:
    if not series:
        return
    times = [t / 1000.0 for t, _ in series]
    values = [v for _, v in series]
    ax.plot(times, values, label=label, linewidth=1.0)


def plot_report(report: SessionReport, out_path: Path) -> Path:
    """Render FPS, frame time, CPU and GPU series into a PNG."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    fig, axes = plt.subplots(4, 1, figsize=(10, 10), sharex=True)
    ax_fps, ax_ft, ax_cpu, ax_gpu = axes

    _plot_series(ax_fps, report.fps_series, "FPS")
    ax_fps.axhline(report.fps_stats.avg_fps, color="gray", linestyle="--", linewidth=0.8, label="avg")
    ax_fps.set_ylabel("FPS")

    _plot_series(ax_ft, report.frame_time_series, "frame time")
    ax_ft.set_ylabel("ms")

    _plot_series(ax_cpu, report.cpu_usage_series, "CPU %")
    _plot_series(ax_cpu, report.cpu_temp_series, "CPU temp")
    ax_cpu.set_ylabel("CPU")

    _plot_series(ax_gpu, report.gpu_usage_series, "GPU %")
    _plot_series(ax_gpu, report.gpu_temp_series, "GPU temp")
    ax_gpu.set_ylabel("GPU")
    ax_gpu.set_xlabel("time [s]")

    for ax in axes:
        ax.grid(True, alpha=0.3)
        if ax.get_legend_handles_labels()[0]:
            ax.legend(loc="upper right", fontsize="small")

    fig.suptitle(f"{report.app_name or 'session'} - {report.session_date}")
    fig.tight_layout()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=100)
    plt.close(fig)
    return out_path


# --------------------------------------------------------------------------- # commands
def _cmd_analyze(args: argparse.Namespace) -> int:
    settings = load_analyzer_settings(args.settings) if args.settings else load_analyzer_settings()
    report = SessionAnalyzer(settings).analyze(args.log)
    if report is None:
        print(f"No report: {args.log} is missing, unreadable or has no FPS data", file=sys.stderr)
        return 1

    print(summarize(report))
    if args.plot:
        path = plot_report(report, Path(args.plot))
        print(f"Plot written to {path}")
    return 0


def _cmd_detect(args: argparse.Namespace) -> int:
    resolver = SensorPathResolver()
    for sensor in resolver.describe():
        if sensor.supported:
            print(f"{sensor.kind.value:<14} {sensor.path} (divider {sensor.divider})")
        else:
            print(f"{sensor.kind.value:<14} not available")
    return 0


def _cmd_history(args: argparse.Namespace) -> int:
    directory = Path(args.directory) if args.directory else AppPaths().logs
    logs = list_session_logs(directory, package_name=args.package)
    if not logs:
        print(f"No session logs under {directory}")
        return 0
    for path in logs:
        print(path.name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamebar-report", description=__doc__.splitlines()[1])
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="analyze a session log")
    analyze.add_argument("log", type=Path, help="path to a session CSV log")
    analyze.add_argument("--plot", type=Path, default=None, help="write a PNG of the series")
    analyze.add_argument("--settings", type=Path, default=None, help="analyzer.yaml to use")
    analyze.set_defaults(func=_cmd_analyze)

    detect = sub.add_parser("detect", help="print detected sysfs nodes")
    detect.set_defaults(func=_cmd_detect)

    history = sub.add_parser("history", help="list session logs, newest first")
    history.add_argument("directory", nargs="?", default=None)
    history.add_argument("--package", default=None, help="only logs for this package")
    history.set_defaults(func=_cmd_history)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
