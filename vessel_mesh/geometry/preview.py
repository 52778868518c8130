"""
Lightweight geometry: line segments and point clouds.

Line segments are the coarse preview shown before tubes are built, and the
output when a dataset has no radius field. A point cloud is the last
resort when the cells yield no drawable segment.
"""

from typing import Tuple
import numpy as np

from ..core.buffers import MeshBuffers
from ..core.types import VTKDataset
from ..coloring.colormaps import ColorMapper
from ..analysis.connectivity import iter_cell_pairs


def build_line_segments(
    dataset: VTKDataset,
    color_mapper: ColorMapper,
) -> Tuple[MeshBuffers, int]:
    """
    Two vertices per consecutive in-bounds pair of every cell.
    
    Returns
    -------
    buffers : MeshBuffers
        ``lines`` primitive buffer
    num_segments : int
    """
    buffers = MeshBuffers("lines")
    num_segments = 0
    for i1, i2 in iter_cell_pairs(dataset.cells, dataset.num_points):
        positions = np.vstack([dataset.point(i1), dataset.point(i2)])
        colors = np.vstack([color_mapper.color_at(i1), color_mapper.color_at(i2)])
        buffers.append(positions, colors, np.array([0, 1]))
        num_segments += 1
    return buffers, num_segments


def build_point_cloud(dataset: VTKDataset, color_mapper: ColorMapper) -> MeshBuffers:
    """Every parsed point as a ``points`` primitive."""
    buffers = MeshBuffers("points")
    n = dataset.num_points
    if n == 0:
        return buffers
    colors = np.vstack([color_mapper.color_at(i) for i in range(n)])
    buffers.append(dataset.coordinates, colors, np.arange(n))
    return buffers
