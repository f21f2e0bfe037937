"""Planner request and response."""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..core.instructions import CompositeInstruction
from ..core.status import PlannerStatus
from ..kinematics.environment import EnvState
from ..kinematics.interfaces import Environment

# planner name -> {requested profile -> profile to use}
ProfileRemapping = Mapping[str, Mapping[str, str]]


@dataclass(frozen=True, eq=False)
class PlannerRequest:
    """Read-only input of a planning call.

    Attributes:
        instructions: The motion request tree.
        env_state: Robot state snapshot used as start and IK seed.
        env: Kinematics provider. ``None`` is rejected by the planner.
        plan_profile_remapping: Per-planner profile name overrides.
    """
    instructions: CompositeInstruction
    env_state: EnvState = field(default_factory=EnvState)
    env: Optional[Environment] = None
    plan_profile_remapping: ProfileRemapping = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class PlannerResponse:
    """Output of a planning call. ``results`` is None unless the status is ok."""
    status: PlannerStatus
    results: Optional[CompositeInstruction] = None
