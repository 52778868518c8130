"""
End-to-end tests for parse -> build -> normalize.
"""

import pytest
import numpy as np

from vessel_mesh import (
    ColorMode,
    ErrorCode,
    VesselMeshConfig,
    build_from_text,
    build_preview_mesh,
    build_vessel_mesh,
    parse_vtk_text,
)


def test_y_network_builds_tubes_and_one_junction(y_network_vtk):
    result = build_from_text(y_network_vtk)
    
    assert result.is_success()
    meta = result.metadata
    buffers = meta["buffers"]
    
    assert meta["primitive"] == "triangles"
    assert meta["detail"] == "full"
    assert meta["num_segments"] == 4
    assert meta["num_junctions"] == 1
    assert meta["junction_centers"] == [2]
    assert meta["branch_points"] == {2: [0, 1, 3]}
    assert meta["tube_stats"] == {"segments": 4, "dangling_pairs": 0, "degenerate_pairs": 0}
    assert meta["config"]["tube"]["radial_segments"] == 10
    assert meta["config"]["color"]["mode"] == "pressure"
    
    # 4 tubes x 2 rings x 10 + one 7 x 7 junction grid
    assert buffers.vertex_count == 4 * 20 + 49
    assert buffers.triangle_count == 4 * 20 + 72
    assert buffers.indices.max() < buffers.vertex_count
    assert buffers.indices.min() >= 0
    assert len(buffers.normals) == buffers.vertex_count


def test_y_network_is_normalized(y_network_vtk):
    config = VesselMeshConfig(model_size=100.0)
    result = build_from_text(y_network_vtk, config)
    
    bbox_min, bbox_max = result.metadata["buffers"].bounds()
    assert np.max(bbox_max - bbox_min) == pytest.approx(100.0)
    np.testing.assert_allclose((bbox_min + bbox_max) / 2.0, 0.0, atol=1e-9)
    assert result.metadata["normalization"]["scale"] > 0


def test_scalars_pass_through_unchanged(y_network_vtk):
    result = build_from_text(y_network_vtk)
    scalars = result.metadata["scalars"]
    
    np.testing.assert_allclose(scalars["radius"], [1, 1, 1, 1, 1])
    np.testing.assert_allclose(scalars["pressure"], [10, 20, 30, 40, 50])
    np.testing.assert_allclose(scalars["flux"], [-4, -2, 0, 2, 4])


def test_pressure_mode_colors_vertices(y_network_vtk):
    result = build_from_text(y_network_vtk)
    colors = result.metadata["buffers"].colors
    
    assert result.metadata["uses_vertex_colors"] is True
    assert result.metadata["color_mode"] == "pressure"
    assert len(np.unique(colors.round(6), axis=0)) > 1


def test_default_mode_is_white(y_network_vtk):
    config = VesselMeshConfig().with_mode("default")
    result = build_from_text(y_network_vtk, config)
    
    assert result.metadata["uses_vertex_colors"] is False
    np.testing.assert_allclose(result.metadata["buffers"].colors, 1.0)
    assert result.metadata["render_hints"]["display_color"] == 0xff2222


def test_missing_pressure_falls_back_to_default_colors(straight_polyline_vtk):
    result = build_from_text(straight_polyline_vtk)
    
    assert result.is_success()
    assert result.metadata["uses_vertex_colors"] is False


def test_straight_polyline_has_no_junctions(straight_polyline_vtk):
    result = build_from_text(straight_polyline_vtk)
    
    assert result.metadata["num_segments"] == 2
    assert result.metadata["num_junctions"] == 0
    assert result.metadata["buffers"].vertex_count == 40


def test_no_radius_field_gives_line_segments():
    text = "\n".join([
        "POINTS 3 float",
        "0 0 0 1 0 0 1 1 0",
        "LINES 1 4",
        "3 0 1 2",
    ])
    result = build_from_text(text)
    
    assert result.is_success()
    assert result.metadata["primitive"] == "lines"
    assert result.metadata["num_segments"] == 2
    assert result.metadata["buffers"].vertex_count == 4
    assert result.metadata["num_triangles"] == 0


def test_cylinders_disabled_gives_line_segments(y_network_vtk):
    config = VesselMeshConfig()
    config.tube.use_cylinder_geometry = False
    result = build_from_text(y_network_vtk, config)
    
    assert result.metadata["primitive"] == "lines"
    assert result.metadata["num_segments"] == 4


def test_no_cells_gives_point_cloud(points_only_vtk):
    result = build_from_text(points_only_vtk)
    
    assert result.is_success()
    assert result.metadata["is_point_cloud"] is True
    assert result.metadata["buffers"].vertex_count == 4
    assert result.metadata["render_hints"]["point_size"] == 25


def test_empty_input_fails():
    result = build_from_text("")
    
    assert result.is_failure()
    assert ErrorCode.EMPTY_DATASET.value in result.error_codes


def test_malformed_lines_become_warnings():
    text = "\n".join([
        "POINTS 4 float",
        "0 0 0 1 0 0",
        "2 0 0 not a number",
        "LINES 2 6",
        "3 0 1",
        "2 0 1",
    ])
    result = build_from_text(text)
    
    assert result.is_success()
    assert any("malformed" in w for w in result.warnings)
    assert any("declared 4" in w for w in result.warnings)


def test_preview_is_coarse_lines(y_network_vtk):
    dataset = parse_vtk_text(y_network_vtk)
    result = build_preview_mesh(dataset)
    
    assert result.metadata["detail"] == "coarse"
    assert result.metadata["primitive"] == "lines"
    assert result.metadata["buffers"].vertex_count == 8
    assert result.metadata["render_hints"]["line_width"] == 6


def test_flux_mode(y_network_vtk):
    dataset = parse_vtk_text(y_network_vtk)
    result = build_vessel_mesh(dataset, VesselMeshConfig().with_mode(ColorMode.FLUX))
    
    assert result.metadata["color_mode"] == "flux"
    assert result.metadata["uses_vertex_colors"] is True


def test_invalid_config_is_rejected():
    with pytest.raises(ValueError):
        VesselMeshConfig(model_size=0)


def test_config_mutated_into_invalid_state_fails(y_network_vtk):
    config = VesselMeshConfig()
    config.tube.radial_segments = 2
    result = build_from_text(y_network_vtk, config)
    
    assert result.is_failure()
    assert ErrorCode.INVALID_PARAMETER.value in result.error_codes


def test_missing_color_field_is_reported(straight_polyline_vtk):
    result = build_from_text(straight_polyline_vtk)
    
    assert any("No pressure field" in w for w in result.warnings)


def test_mode_assigned_as_string_after_construction(y_network_vtk):
    config = VesselMeshConfig()
    config.color.mode = "flux"
    result = build_from_text(y_network_vtk, config)
    
    assert result.is_success()
    assert result.metadata["color_mode"] == "flux"
    assert config.mode is ColorMode.FLUX


def test_unknown_mode_assigned_after_construction_fails(y_network_vtk):
    config = VesselMeshConfig()
    config.color.mode = "rainbow"
    result = build_from_text(y_network_vtk, config)
    
    assert result.is_failure()
    assert ErrorCode.INVALID_PARAMETER.value in result.error_codes
