"""
Blended junction caps at branch points.

A junction is a latitude/longitude grid of directions around the branch
center. The surface radius along each direction grows toward the incident
tubes so that the cap covers every tube mouth, and normals lean toward the
tube axes so shading continues smoothly into the tubes.
"""

from typing import Dict, Iterable, Optional, Tuple
import numpy as np

from ..core.buffers import MeshBuffers
from ..core.types import BranchPoint
from ..coloring.colormaps import ColorMapper
from .basis import normalize

MIN_CONNECTIONS = 3


def _sphere_directions(resolution: int) -> np.ndarray:
    """(resolution + 1)^2 unit directions, row-major over (theta, phi)."""
    theta = np.linspace(0.0, np.pi, resolution + 1)
    phi = np.linspace(0.0, 2.0 * np.pi, resolution + 1)
    t, p = np.meshgrid(theta, phi, indexing="ij")
    directions = np.stack(
        [np.sin(t) * np.cos(p), np.cos(t), np.sin(t) * np.sin(p)],
        axis=-1,
    )
    return directions.reshape(-1, 3)


def junction_radius(
    direction: np.ndarray,
    branch: BranchPoint,
    base_radius: float,
    influence_exponent: float = 3.0,
    contribution_factor: float = 0.3,
    coverage_factor: float = 1.2,
    scale_factor: float = 0.2,
    min_radius_factor: float = 0.9,
    strong_influence_threshold: float = 0.1,
    strong_radius_factor: float = 1.25,
) -> float:
    """
    Surface radius of a junction cap along one sample direction.
    
    Every incident tube adds ``influence = max(0, d . n) ** 3`` and a radius
    contribution ``max(base, r * 1.2) * influence * 0.3``. The blended
    radius is scaled by ``1 + 0.2 * total_influence`` and never falls below
    ``1.25 * r`` of a strongly aligned tube (influence above 0.1) nor below
    ``0.9 * base``.
    """
    smooth_radius = base_radius
    total_influence = 0.0
    max_directional_radius = base_radius
    
    for conn in branch.connections:
        dot = max(0.0, float(np.dot(direction, conn.direction)))
        influence = dot ** influence_exponent
        
        directional_radius = max(base_radius, conn.radius * coverage_factor)
        smooth_radius += directional_radius * influence * contribution_factor
        total_influence += influence
        
        if influence > strong_influence_threshold:
            max_directional_radius = max(max_directional_radius, conn.radius * strong_radius_factor)
    
    smooth_radius = max(smooth_radius * (1.0 + total_influence * scale_factor), max_directional_radius)
    return max(smooth_radius, base_radius * min_radius_factor)


def junction_normal(
    direction: np.ndarray,
    branch: BranchPoint,
    normal_exponent: float = 2.5,
    normal_blend: float = 0.12,
) -> np.ndarray:
    """
    Radial direction bent slightly toward the incident tube axes.
    
    Tube weights are ``max(0, d . n) ** 2.5 * r``, normalized over all
    tubes; the weighted axis sum is scaled by 0.12 before being added.
    """
    weights = []
    for conn in branch.connections:
        dot = max(0.0, float(np.dot(direction, conn.direction)))
        weights.append(dot ** normal_exponent * conn.radius)
    
    total_weight = sum(weights)
    normal = np.array(direction, dtype=float)
    if total_weight > 0:
        for conn, weight in zip(branch.connections, weights):
            normal = normal + conn.direction * (weight / total_weight * normal_blend)
    return normalize(normal)


def create_junction(
    branch: BranchPoint,
    color: np.ndarray,
    resolution: int = 6,
    base_radius_factor: float = 0.95,
    **radius_kwargs,
) -> Optional[Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]]:
    """
    Grid vertices and triangles for one junction cap.
    
    Parameters
    ----------
    branch : BranchPoint
        Center, radius and incident tube connections
    color : np.ndarray
        Flat color of the whole cap
    resolution : int
        Latitude and longitude subdivisions
    base_radius_factor : float
        Base radius as a fraction of the largest incident tube radius
    **radius_kwargs
        Passed to ``junction_radius`` (``normal_exponent`` and
        ``normal_blend`` go to ``junction_normal``)
    
    Returns
    -------
    tuple or None
        (positions, normals, colors, indices), or None when the branch has
        fewer than three usable connections
    """
    if branch.degree < MIN_CONNECTIONS:
        return None
    
    normal_kwargs = {
        key: radius_kwargs.pop(key)
        for key in ("normal_exponent", "normal_blend")
        if key in radius_kwargs
    }
    
    base_radius = base_radius_factor * branch.max_connected_radius()
    directions = _sphere_directions(resolution)
    
    positions = np.empty_like(directions)
    normals = np.empty_like(directions)
    for k, d in enumerate(directions):
        radius = junction_radius(d, branch, base_radius, **radius_kwargs)
        positions[k] = branch.position + d * radius
        normals[k] = junction_normal(d, branch, **normal_kwargs)
    
    colors = np.tile(np.asarray(color, dtype=float), (len(directions), 1))
    
    indices = []
    row = resolution + 1
    for i in range(resolution):
        for j in range(resolution):
            first = i * row + j
            second = first + row
            indices.extend((first, first + 1, second))
            indices.extend((second, first + 1, second + 1))
    
    return positions, normals, colors, np.array(indices, dtype=np.int64)


def build_junction_mesh(
    branch_points: Iterable[BranchPoint],
    color_mapper: ColorMapper,
    resolution: int = 6,
    **junction_kwargs,
) -> Tuple[MeshBuffers, Dict[int, int]]:
    """
    Append a junction cap for every branch point with enough connections.
    
    Returns
    -------
    buffers : MeshBuffers
    junction_vertex_counts : dict
        Branch point index -> number of vertices emitted for it
    """
    buffers = MeshBuffers("triangles")
    emitted = {}
    for branch in branch_points:
        junction = create_junction(
            branch,
            color_mapper.color_at(branch.index),
            resolution=resolution,
            **dict(junction_kwargs),
        )
        if junction is None:
            continue
        positions, normals, colors, indices = junction
        buffers.append(positions, colors, indices, normals=normals)
        emitted[branch.index] = len(positions)
    return buffers, emitted
