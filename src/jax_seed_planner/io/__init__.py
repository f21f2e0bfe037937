"""Loading robot models from URDF."""

from .urdf_parser import load_urdf, parse_urdf

__all__ = ["load_urdf", "parse_urdf"]
