"""
Centering and uniform rescaling of merged buffers.
"""

from typing import Tuple
import numpy as np

from ..core.buffers import MeshBuffers


def normalize_buffers(buffers: MeshBuffers, target_size: float) -> Tuple[np.ndarray, float]:
    """
    Move the bounding-box center to the origin and scale the largest
    dimension to ``target_size``.
    
    Parameters
    ----------
    buffers : MeshBuffers
        Modified in place
    target_size : float
        Target extent of the largest bounding-box dimension (world units)
    
    Returns
    -------
    center : np.ndarray
        Original bounding-box center
    scale : float
        Applied uniform scale; 1.0 when the geometry has zero extent
    """
    if buffers.vertex_count == 0:
        return np.zeros(3), 1.0
    
    bbox_min, bbox_max = buffers.bounds()
    center = (bbox_min + bbox_max) / 2.0
    max_dim = float(np.max(bbox_max - bbox_min))
    scale = target_size / max_dim if max_dim > 0 else 1.0
    
    buffers.transform(-center, scale)
    return center, scale
