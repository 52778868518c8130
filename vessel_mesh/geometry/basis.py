"""
Orthonormal frame construction shared by tube and junction generation.
"""

from typing import Tuple
import numpy as np


UP_AXIS = np.array([0.0, 1.0, 0.0])
FALLBACK_AXIS = np.array([1.0, 0.0, 0.0])


def normalize(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """Unit vector along ``v``; a zero vector is returned unchanged."""
    v = np.asarray(v, dtype=float)
    length = np.linalg.norm(v)
    if length < eps:
        return v.copy()
    return v / length


def orthonormal_basis(
    direction: np.ndarray,
    up: np.ndarray = UP_AXIS,
    fallback: np.ndarray = FALLBACK_AXIS,
    min_sine: float = 1e-6,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Two unit vectors spanning the plane perpendicular to ``direction``.
    
    ``right = direction x up``; when ``direction`` is (anti)parallel to
    ``up`` the cross product vanishes and ``fallback`` is used as the
    reference axis instead. ``forward = right x direction`` completes the
    frame.
    
    Parameters
    ----------
    direction : np.ndarray
        Unit axis direction
    up, fallback : np.ndarray
        Primary and secondary reference axes
    min_sine : float
        Cross-product length below which ``up`` counts as parallel
    
    Returns
    -------
    right, forward : np.ndarray
        Unit vectors, orthogonal to each other and to ``direction``
    """
    direction = normalize(direction)
    right = np.cross(direction, up)
    if np.linalg.norm(right) < min_sine:
        right = np.cross(direction, fallback)
    right = normalize(right)
    forward = normalize(np.cross(right, direction))
    return right, forward
