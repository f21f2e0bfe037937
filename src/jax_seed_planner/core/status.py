"""Planner status codes."""

import enum
from dataclasses import dataclass


class StatusCode(enum.Enum):
    SOLUTION_FOUND = 0
    ERROR_INVALID_INPUT = -1
    FAILED_TO_FIND_VALID_SOLUTION = -3

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    StatusCode.SOLUTION_FOUND: "Found valid solution",
    StatusCode.ERROR_INVALID_INPUT: "Input to planner is invalid. Check that instructions and seed are compatible",
    StatusCode.FAILED_TO_FIND_VALID_SOLUTION: "Failed to find valid solution",
}


@dataclass(frozen=True)
class PlannerStatus:
    """Outcome of a planning call.

    Attributes:
        code: The status code.
        planner: Name of the planner that produced the status.
        detail: Optional cause, e.g. the message of the error that aborted planning.
    """
    code: StatusCode
    planner: str = ""
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.code is StatusCode.SOLUTION_FOUND

    @property
    def message(self) -> str:
        return self.code.message

    def __str__(self) -> str:
        text = f"{self.planner}: {self.message}" if self.planner else self.message
        return f"{text} ({self.detail})" if self.detail else text
