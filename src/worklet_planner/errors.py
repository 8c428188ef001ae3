"""Planner error types.

Every error here is recoverable: the host catches ``PlannerError`` and
leaves the worklet as it was.
"""


class PlannerError(Exception):
    """Base class for planner errors."""


class AlreadyRedistributed(PlannerError):
    """Raised when redistributing a worklet that still holds an undo snapshot."""


class NothingToUndo(PlannerError):
    """Raised when undoing a worklet that has no undo snapshot."""


class InvalidRedistributionTarget(PlannerError):
    """Raised when the requested day cannot be redistributed."""


class NoFutureDays(PlannerError):
    """Raised when no future work day is left to absorb a missed day."""


class TaskNotFound(PlannerError):
    """Raised when a worklet has no daily task for the given date."""


class TaskNotToggleable(PlannerError):
    """Raised when toggling completion on a redistributed day."""
