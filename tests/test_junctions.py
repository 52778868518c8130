"""
Tests for junction caps at branch points.
"""

import pytest
import numpy as np

from vessel_mesh.analysis.connectivity import (
    build_connectivity_graph,
    collect_branch_points,
    detect_branch_points,
)
from vessel_mesh.coloring.colormaps import ColorMapper, PressureColorMapper
from vessel_mesh.core.types import BranchConnection, BranchPoint
from vessel_mesh.geometry.junctions import (
    build_junction_mesh,
    create_junction,
    junction_normal,
    junction_radius,
)
from vessel_mesh.io.vtk_parser import parse_vtk_text


def _branch(directions, radii, center=(0.0, 0.0, 0.0)):
    connections = []
    for k, (d, r) in enumerate(zip(directions, radii)):
        d = np.asarray(d, dtype=float)
        connections.append(
            BranchConnection(neighbor=k + 1, direction=d / np.linalg.norm(d), radius=r, distance=1.0)
        )
    return BranchPoint(index=0, position=np.asarray(center, dtype=float), radius=1.0, connections=connections)


@pytest.fixture
def y_branch(y_network_vtk):
    dataset = parse_vtk_text(y_network_vtk)
    G = build_connectivity_graph(dataset.cells, dataset.num_points)
    branch_points = collect_branch_points(dataset, detect_branch_points(G))
    return dataset, branch_points[2]


def test_fewer_than_three_connections_yields_nothing():
    branch = _branch([[1, 0, 0], [-1, 0, 0]], [1.0, 1.0])
    
    assert create_junction(branch, np.ones(3)) is None


@pytest.mark.parametrize("resolution", [2, 6, 9])
def test_junction_counts(resolution):
    branch = _branch([[1, 0, 0], [0, 1, 0], [0, 0, 1]], [1.0, 1.0, 1.0])
    positions, normals, colors, indices = create_junction(branch, np.ones(3), resolution=resolution)
    
    assert positions.shape == ((resolution + 1) ** 2, 3)
    assert normals.shape == positions.shape
    assert colors.shape == positions.shape
    assert len(indices) == 6 * resolution ** 2
    assert indices.max() < len(positions)


def test_radius_along_tube_covers_tube_mouth():
    branch = _branch([[1, 0, 0], [0, 1, 0], [0, 0, 1]], [0.5, 1.0, 2.0])
    base = 0.95 * 2.0
    
    for conn in branch.connections:
        radius = junction_radius(conn.direction, branch, base)
        assert radius >= 1.25 * conn.radius
        assert radius >= 0.9 * base


def test_radius_away_from_tubes_is_base():
    branch = _branch([[1, 0, 0], [0, 1, 0], [-1, 0, 0]], [1.0, 1.0, 1.0])
    
    assert junction_radius(np.array([0.0, 0.0, 1.0]), branch, 0.95) == pytest.approx(0.95)


def test_radius_grows_toward_tube():
    branch = _branch([[1, 0, 0], [0, 1, 0], [-1, 0, 0]], [1.0, 1.0, 1.0])
    aligned = junction_radius(np.array([0.0, 1.0, 0.0]), branch, 0.95)
    oblique = junction_radius(np.array([0.0, 0.8, 0.6]), branch, 0.95)
    
    assert aligned > oblique > 0.95


def test_normal_without_influence_is_radial():
    branch = _branch([[1, 0, 0], [0, 1, 0], [-1, 0, 0]], [1.0, 1.0, 1.0])
    
    np.testing.assert_allclose(junction_normal(np.array([0.0, 0.0, -1.0]), branch), [0, 0, -1])


def test_normal_leans_toward_tube():
    branch = _branch([[1, 0, 0], [0, 1, 0], [-1, 0, 0]], [1.0, 1.0, 1.0])
    d = np.array([0.0, 0.6, 0.8])
    normal = junction_normal(d, branch)
    
    assert np.linalg.norm(normal) == pytest.approx(1.0)
    assert normal[1] / normal[2] > d[1] / d[2]


def test_y_junction_geometry(y_branch):
    dataset, branch = y_branch
    positions, normals, colors, indices = create_junction(branch, np.array([0.2, 0.4, 0.6]))
    
    assert branch.degree == 3
    assert sorted(c.neighbor for c in branch.connections) == [0, 1, 3]
    
    offsets = positions - branch.position
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)
    assert np.all(np.einsum("ij,ij->i", normals, offsets) > 0)
    
    # first grid row is the +y pole, aligned with the tube toward point 3
    assert np.linalg.norm(offsets[0]) >= 1.25
    
    np.testing.assert_allclose(colors, np.tile([0.2, 0.4, 0.6], (len(colors), 1)))


def test_y_junction_winds_outward(y_branch):
    _, branch = y_branch
    positions, _, _, indices = create_junction(branch, np.ones(3))
    offsets = positions - branch.position
    
    checked = 0
    for a, b, c in indices.reshape(-1, 3):
        volume = np.dot(offsets[a], np.cross(offsets[b], offsets[c]))
        if abs(volume) < 1e-12:
            # collapsed pole triangle
            continue
        assert volume > 0
        checked += 1
    assert checked > 0


def test_build_junction_mesh_uses_mapper_color(y_branch):
    dataset, branch = y_branch
    mapper = PressureColorMapper(dataset)
    buffers, emitted = build_junction_mesh([branch], mapper, resolution=4)
    
    assert emitted == {2: 25}
    assert buffers.vertex_count == 25
    assert buffers.triangle_count == 32
    np.testing.assert_allclose(buffers.colors, np.tile(mapper.color_at(2), (25, 1)))


def test_build_junction_mesh_skips_low_degree():
    low = _branch([[1, 0, 0], [-1, 0, 0]], [1.0, 1.0])
    high = _branch([[1, 0, 0], [0, 1, 0], [0, 0, 1]], [1.0, 1.0, 1.0])
    high.index = 7
    buffers, emitted = build_junction_mesh([low, high], ColorMapper(), resolution=3)
    
    assert emitted == {7: 16}
    assert buffers.vertex_count == 16