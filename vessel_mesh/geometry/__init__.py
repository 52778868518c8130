"""Procedural geometry: tubes, junction caps, previews and normalization."""

from .basis import orthonormal_basis, normalize
from .tubes import collect_tube_segments, create_tapered_cylinder, build_tube_mesh, TubeBuildStats
from .junctions import create_junction, build_junction_mesh, junction_radius, junction_normal
from .preview import build_line_segments, build_point_cloud
from .normalize import normalize_buffers

__all__ = [
    "orthonormal_basis",
    "normalize",
    "collect_tube_segments",
    "create_tapered_cylinder",
    "build_tube_mesh",
    "TubeBuildStats",
    "create_junction",
    "build_junction_mesh",
    "junction_radius",
    "junction_normal",
    "build_line_segments",
    "build_point_cloud",
    "normalize_buffers",
]
