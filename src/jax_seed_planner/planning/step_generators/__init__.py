"""Step generators: turn one segment into a composite of resolved states."""

from .fixed_size import fixed_size_interpolate_cart_state_waypoint, fixed_size_interpolate_state_waypoint
from .lvs import lvs_interpolate_cart_state_waypoint, lvs_interpolate_state_waypoint

__all__ = [
    "fixed_size_interpolate_cart_state_waypoint",
    "fixed_size_interpolate_state_waypoint",
    "lvs_interpolate_cart_state_waypoint",
    "lvs_interpolate_state_waypoint",
]
