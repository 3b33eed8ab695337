# src/rehabcoach/scoring/report.py
import numpy as np

from ..data_models import RepQuality, SessionReport, SessionStats


def format_duration(seconds: int) -> str:
    """m:ss, e.g. 75 -> '1:15'."""
    m, s = divmod(max(0, int(seconds)), 60)
    return f"{m}:{s:02d}"


def session_duration(stats: SessionStats) -> int:
    """Whole seconds between start and end; 0 until the session has ended."""
    if stats.start_time is None or stats.end_time is None:
        return 0
    return int(max(0.0, stats.end_time - stats.start_time))


def build_session_report(stats: SessionStats) -> SessionReport:
    """
    Summarise a session for the end-of-set report.

    Good/bad counts and the average peak depth come from the per-rep
    history; reps counted before the session started are not in it.
    """
    history = stats.rep_history
    good = sum(1 for r in history if r.quality == RepQuality.GOOD)
    peaks = [r.peak_depth for r in history]
    duration = session_duration(stats)
    return SessionReport(
        duration_seconds=duration,
        duration_label=format_duration(duration),
        total_reps=stats.total_reps,
        max_depth=round(float(stats.max_depth), 1),
        good_reps=good,
        bad_reps=len(history) - good,
        average_peak_depth=round(float(np.mean(peaks)), 1) if peaks else 0.0,
    )
