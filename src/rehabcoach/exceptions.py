"""
Exception types for rehabcoach.

Expected degenerate input (short frames, flat calibration) never raises;
these cover programmer errors and collaborator failures.
"""


class RehabCoachError(Exception):
    """Base exception for all rehabcoach errors."""
    pass


class SessionContextError(RehabCoachError):
    """Engine accessor used outside an active coaching_session block."""
    pass


class UnknownExerciseError(RehabCoachError):
    """Exercise selector is not one of the supported exercises."""
    pass


class ExportError(RehabCoachError):
    """A snapshot or dataset exporter could not write its artifact."""
    pass
