import pytest
import numpy as np
from pathlib import Path
import tempfile


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def straight_polyline_vtk():
    """Three collinear points along x joined by one polyline cell."""
    return "\n".join([
        "# vtk DataFile Version 3.0",
        "straight vessel",
        "ASCII",
        "DATASET POLYDATA",
        "POINTS 3 float",
        "0 0 0 1 0 0",
        "2 0 0",
        "LINES 1 4",
        "3 0 1 2",
        "POINT_DATA 3",
        "SCALARS radius float 1",
        "LOOKUP_TABLE default",
        "0.5 0.4 0.3",
    ])


@pytest.fixture
def y_network_vtk():
    """
    Five-point Y: point 2 joins points 0, 1 and 3; point 4 extends the stem.
    
    The 2 -> 3 -> 4 stem runs along +y, parallel to the tube reference axis.
    """
    return "\n".join([
        "# vtk DataFile Version 3.0",
        "Y network",
        "ASCII",
        "DATASET POLYDATA",
        "POINTS 5 float",
        "-1 -1 0",
        "1 -1 0",
        "0 0 0",
        "0 1 0",
        "0 2 0",
        "LINES 3 10",
        "2 0 2",
        "2 1 2",
        "3 2 3 4",
        "POINT_DATA 5",
        "SCALARS radius float 1",
        "LOOKUP_TABLE default",
        "1.0 1.0 1.0 1.0 1.0",
        "SCALARS Pressure float 1",
        "LOOKUP_TABLE default",
        "10 20 30 40 50",
        "SCALARS flux float 1",
        "LOOKUP_TABLE default",
        "-4 -2 0 2 4",
    ])


@pytest.fixture
def points_only_vtk():
    """Points and scalars but no cells."""
    return "\n".join([
        "# vtk DataFile Version 3.0",
        "cloud",
        "ASCII",
        "DATASET POLYDATA",
        "POINTS 4 float",
        "0 0 0 1 0 0 0 1 0 0 0 1",
        "POINT_DATA 4",
        "SCALARS radius float 1",
        "LOOKUP_TABLE default",
        "0.1 0.1 0.1 0.1",
    ])


@pytest.fixture
def segment_centroid_outward():
    """Check that every face of a tube winds outward from the given axis."""
    def check(positions, faces, p1, p2):
        axis = (p2 - p1) / np.linalg.norm(p2 - p1)
        for face in faces:
            a, b, c = positions[face]
            face_normal = np.cross(b - a, c - a)
            centroid = (a + b + c) / 3.0
            along = np.dot(centroid - p1, axis)
            radial = centroid - (p1 + along * axis)
            assert np.dot(face_normal, radial) > 0
    return check
