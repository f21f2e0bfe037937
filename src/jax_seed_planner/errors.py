"""Exception hierarchy for seed planning.

Every failure raised inside the planner derives from ``PlanningError`` so the
planner entry point can turn it into a status code in one place.
"""


class PlanningError(Exception):
    """Base class for all seed-planning failures."""


class InvalidInputError(PlanningError, ValueError):
    """Input that cannot be planned: bad waypoints, tags, handles or metadata."""


class KinematicsError(PlanningError, RuntimeError):
    """Forward kinematics failed for a configuration assumed to be reachable."""


class SeedNotImplementedError(PlanningError, NotImplementedError):
    """Interpolation branch that exists in the interface but has no implementation."""
