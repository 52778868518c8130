"""
Tapered-cylinder tube generation for polyline cells.

Each consecutive point pair of a cell becomes one open cylinder with two
vertex rings. Endpoints that are branch points are pushed slightly past
the branch center and widened a little so the tube overlaps the junction
cap generated there.
"""

from dataclasses import dataclass
from typing import AbstractSet, Dict, List, Tuple
import numpy as np

from ..core.buffers import MeshBuffers
from ..core.types import ScalarFieldName, TubeSegment, VTKDataset
from ..coloring.colormaps import ColorMapper
from .basis import orthonormal_basis


@dataclass
class TubeBuildStats:
    segments: int = 0
    dangling_pairs: int = 0
    degenerate_pairs: int = 0
    
    def to_dict(self) -> Dict[str, int]:
        return {
            "segments": self.segments,
            "dangling_pairs": self.dangling_pairs,
            "degenerate_pairs": self.degenerate_pairs,
        }


def collect_tube_segments(
    dataset: VTKDataset,
    branch_indices: AbstractSet[int],
    color_mapper: ColorMapper,
    min_length: float = 1e-12,
) -> Tuple[List[TubeSegment], TubeBuildStats]:
    """
    One ``TubeSegment`` per consecutive in-bounds pair of every cell.
    
    Parameters
    ----------
    dataset : VTKDataset
        Parsed points, cells and scalars
    branch_indices : set of int
        Branch point indices
    color_mapper : ColorMapper
        Active coloring strategy
    min_length : float
        Pairs shorter than this have no direction and are skipped
    
    Returns
    -------
    segments : list of TubeSegment
    stats : TubeBuildStats
    """
    stats = TubeBuildStats()
    segments = []
    
    for chain in dataset.cells:
        for i1, i2 in zip(chain[:-1], chain[1:]):
            if not (dataset.in_bounds(i1) and dataset.in_bounds(i2)):
                stats.dangling_pairs += 1
                continue
            
            p1 = np.array(dataset.point(i1), dtype=float)
            p2 = np.array(dataset.point(i2), dtype=float)
            if np.linalg.norm(p2 - p1) < min_length:
                stats.degenerate_pairs += 1
                continue
            
            segments.append(
                TubeSegment(
                    start_index=i1,
                    end_index=i2,
                    start=p1,
                    end=p2,
                    radius_start=dataset.value(ScalarFieldName.RADIUS, i1),
                    radius_end=dataset.value(ScalarFieldName.RADIUS, i2),
                    color_start=color_mapper.color_at(i1),
                    color_end=color_mapper.color_at(i2),
                    start_is_branch=i1 in branch_indices,
                    end_is_branch=i2 in branch_indices,
                )
            )
    
    stats.segments = len(segments)
    return segments, stats


def create_tapered_cylinder(
    segment: TubeSegment,
    radial_segments: int = 10,
    extension_factor: float = 0.08,
    extension_floor: float = 0.005,
    branch_radius_scale: float = 1.02,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Vertex rings and wall triangles for one tapered tube.
    
    Parameters
    ----------
    segment : TubeSegment
        Endpoints, radii, colors and branch flags
    radial_segments : int
        Vertices per ring
    extension_factor, extension_floor : float
        A branch endpoint moves outward along the axis by
        ``max(radius * extension_factor, extension_floor)``
    branch_radius_scale : float
        Radius multiplier at branch endpoints
    
    Returns
    -------
    positions, normals, colors : (2 * radial_segments, 3) arrays
    indices : (6 * radial_segments,) int array, outward winding
    """
    p1, p2 = segment.start, segment.end
    r1, r2 = segment.radius_start, segment.radius_end
    direction = (p2 - p1) / np.linalg.norm(p2 - p1)
    
    if segment.start_is_branch:
        p1 = p1 - direction * max(r1 * extension_factor, extension_floor)
        r1 = r1 * branch_radius_scale
    if segment.end_is_branch:
        p2 = p2 + direction * max(r2 * extension_factor, extension_floor)
        r2 = r2 * branch_radius_scale
    
    right, forward = orthonormal_basis(direction)
    
    angles = np.arange(radial_segments) * (2.0 * np.pi / radial_segments)
    # (R, 3) unit vectors pointing away from the axis
    radial = np.outer(np.cos(angles), right) + np.outer(np.sin(angles), forward)
    
    positions = []
    normals = []
    colors = []
    for t in (0.0, 1.0):
        center = p1 + (p2 - p1) * t
        radius = r1 + (r2 - r1) * t
        color = segment.color_start + (segment.color_end - segment.color_start) * t
        positions.append(center + radial * radius)
        normals.append(radial)
        colors.append(np.tile(color, (radial_segments, 1)))
    
    indices = []
    for s in range(radial_segments):
        current = s
        following = (s + 1) % radial_segments
        current_next = radial_segments + s
        following_next = radial_segments + following
        indices.extend((current, current_next, following))
        indices.extend((current_next, following_next, following))
    
    return (
        np.vstack(positions),
        np.vstack(normals),
        np.vstack(colors),
        np.array(indices, dtype=np.int64),
    )


def build_tube_mesh(
    segments: List[TubeSegment],
    radial_segments: int = 10,
    extension_factor: float = 0.08,
    extension_floor: float = 0.005,
    branch_radius_scale: float = 1.02,
) -> MeshBuffers:
    """Append one tapered cylinder per segment into a triangle buffer."""
    buffers = MeshBuffers("triangles")
    for segment in segments:
        positions, normals, colors, indices = create_tapered_cylinder(
            segment,
            radial_segments=radial_segments,
            extension_factor=extension_factor,
            extension_floor=extension_floor,
            branch_radius_scale=branch_radius_scale,
        )
        buffers.append(positions, colors, indices, normals=normals)
    return buffers
