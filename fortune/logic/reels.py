"""Staggered reel-stop timing for the presentation layer.

Pure functions of a spin session and a timestamp. The outcome is fixed
when the session settles; these only say which reels look stopped.
"""
from fortune.logic.models import SpinSession


def reel_stop_times(session: SpinSession, columns: int, stagger: float) -> list[float]:
    """
    Stop time per column, left to right.

    The last column stops exactly at the logical settle time; each earlier
    column stops one stagger sooner, but never before the spin started.
    """
    return [
        max(session.started_at, session.settle_at - (columns - 1 - column) * stagger)
        for column in range(columns)
    ]


def stopped_reels(session: SpinSession, columns: int, stagger: float, now: float) -> list[bool]:
    """Which columns should be drawn as stopped at time `now`."""
    return [now >= stop for stop in reel_stop_times(session, columns, stagger)]


def spin_progress(session: SpinSession, now: float) -> float:
    """Fraction of the spin duration elapsed, in [0, 1]."""
    duration = session.settle_at - session.started_at
    if duration <= 0:
        return 1.0
    return min(1.0, max(0.0, (now - session.started_at) / duration))
