"""
Tests for centering and rescaling of built buffers.
"""

import pytest
import numpy as np

from vessel_mesh.core.buffers import MeshBuffers
from vessel_mesh.geometry.normalize import normalize_buffers


def _points(coords):
    buffers = MeshBuffers("points")
    coords = np.asarray(coords, dtype=float)
    buffers.append(coords, np.ones_like(coords), np.arange(len(coords)))
    return buffers


def test_largest_dimension_matches_target():
    buffers = _points([[10, 0, 0], [14, 2, 1], [12, -2, 0]])
    center, scale = normalize_buffers(buffers, 420.0)
    
    bbox_min, bbox_max = buffers.bounds()
    assert np.max(bbox_max - bbox_min) == pytest.approx(420.0)
    np.testing.assert_allclose((bbox_min + bbox_max) / 2.0, 0.0, atol=1e-9)
    np.testing.assert_allclose(center, [12, 0, 0.5])
    assert scale == pytest.approx(420.0 / 4.0)


def test_scaling_is_uniform():
    buffers = _points([[0, 0, 0], [2, 1, 0]])
    normalize_buffers(buffers, 10.0)
    
    extent = np.ptp(buffers.positions, axis=0)
    np.testing.assert_allclose(extent, [10.0, 5.0, 0.0])


def test_zero_extent_uses_unit_scale():
    buffers = _points([[3, 3, 3], [3, 3, 3]])
    center, scale = normalize_buffers(buffers, 420.0)
    
    assert scale == 1.0
    np.testing.assert_allclose(center, [3, 3, 3])
    np.testing.assert_allclose(buffers.positions, 0.0)


def test_empty_buffers_are_left_alone():
    buffers = MeshBuffers("triangles")
    center, scale = normalize_buffers(buffers, 420.0)
    
    assert scale == 1.0
    np.testing.assert_allclose(center, 0.0)
    assert buffers.vertex_count == 0
