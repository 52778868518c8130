"""
Tests for pressure and flux color ramps and the color strategies.
"""

import pytest
import numpy as np

from vessel_mesh.coloring.colormaps import (
    ColorMapper,
    ColorMode,
    FluxColorMapper,
    NEUTRAL_GRAY,
    PressureColorMapper,
    WHITE,
    flux_to_color,
    make_color_mapper,
    pressure_to_color,
)
from vessel_mesh.io.vtk_parser import parse_vtk_text


def test_pressure_endpoints():
    low = pressure_to_color(10.0, 10.0, 50.0)
    high = pressure_to_color(50.0, 10.0, 50.0)
    
    np.testing.assert_allclose(low, [0.23, 0.70, 0.27])
    np.testing.assert_allclose(high, [0.56, 0.12, 0.00], atol=1e-12)


def test_pressure_ramp_is_continuous_at_midpoint():
    # t = linear ** 0.4 == 0.5 at linear = 0.5 ** 2.5
    linear = 0.5 ** 2.5
    below = pressure_to_color(linear - 1e-9, 0.0, 1.0)
    above = pressure_to_color(linear + 1e-9, 0.0, 1.0)
    
    np.testing.assert_allclose(below, [0.98, 0.93, 0.0], atol=1e-6)
    np.testing.assert_allclose(above, [0.98, 0.93, 0.0], atol=1e-6)


def test_pressure_nonlinear_exponent_expands_low_end():
    # A quarter of the range already lands past the midpoint.
    color = pressure_to_color(0.25, 0.0, 1.0)
    t = 0.25 ** 0.4
    expected = np.array([0.98, 0.93, 0.0]) + (t - 0.5) * 2 * np.array([-0.42, -0.81, 0.0])
    
    np.testing.assert_allclose(color, expected)


def test_pressure_uniform_range_uses_midpoint():
    color = pressure_to_color(3.0, 3.0, 3.0)
    t = 0.5 ** 0.4
    expected = np.array([0.98, 0.93, 0.0]) + (t - 0.5) * 2 * np.array([-0.42, -0.81, 0.0])
    
    np.testing.assert_allclose(color, expected)


def test_pressure_out_of_range_is_clamped():
    np.testing.assert_allclose(pressure_to_color(-5.0, 0.0, 1.0), pressure_to_color(0.0, 0.0, 1.0))
    np.testing.assert_allclose(pressure_to_color(9.0, 0.0, 1.0), pressure_to_color(1.0, 0.0, 1.0))


@pytest.mark.parametrize("v", [0.5, 1.0, 5.0, 10.0])
def test_flux_direction_selects_color_family(v):
    forward = flux_to_color(v, -10.0, 10.0)
    reverse = flux_to_color(-v, -10.0, 10.0)
    
    # forward flow leans red, reverse flow leans blue
    assert forward[0] > forward[2]
    assert reverse[2] > reverse[0]


def test_flux_extremes():
    np.testing.assert_allclose(flux_to_color(10.0, -10.0, 10.0), [1.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(flux_to_color(-10.0, -10.0, 10.0), [0.0, 0.0, 0.5], atol=1e-12)


@pytest.mark.parametrize("lo, hi", [(2.0, 10.0), (-10.0, -2.0), (-1.0, 9.0)])
def test_flux_range_spans_whole_ramp(lo, hi):
    np.testing.assert_allclose(flux_to_color(lo, lo, hi), [0.0, 0.0, 0.5], atol=1e-12)
    np.testing.assert_allclose(flux_to_color(hi, lo, hi), [1.0, 0.0, 0.0], atol=1e-12)


def test_flux_one_sided_range_reaches_blue_side():
    # 2..10 is all forward flow; the low end still separates from the high end.
    low = flux_to_color(2.5, 2.0, 10.0)
    high = flux_to_color(9.5, 2.0, 10.0)
    
    assert low[2] > low[0]
    assert high[0] > high[2]


def test_flux_zero_sits_between_cyan_and_green():
    np.testing.assert_allclose(flux_to_color(0.0, -10.0, 10.0), [0.0, 1.0, 0.5])


@pytest.mark.parametrize("value", [-3.0, 0.0, 7.5])
def test_flux_degenerate_range_is_neutral_gray(value):
    np.testing.assert_allclose(flux_to_color(value, 0.0, 0.0), NEUTRAL_GRAY)


def test_flux_is_monotonic_in_red_channel_for_forward_flow():
    reds = [flux_to_color(v, -10.0, 10.0)[0] for v in (0.0, 0.1, 1.0, 3.0, 10.0)]
    
    assert reds == sorted(reds)


def test_color_mode_coerce():
    assert ColorMode.coerce("FLUX") is ColorMode.FLUX
    assert ColorMode.coerce(ColorMode.DEFAULT) is ColorMode.DEFAULT
    with pytest.raises(ValueError):
        ColorMode.coerce("rainbow")


def test_make_color_mapper_selects_strategy(y_network_vtk):
    dataset = parse_vtk_text(y_network_vtk)
    
    assert isinstance(make_color_mapper("pressure", dataset), PressureColorMapper)
    assert isinstance(make_color_mapper(ColorMode.FLUX, dataset), FluxColorMapper)
    
    default = make_color_mapper(ColorMode.DEFAULT, dataset)
    assert type(default) is ColorMapper
    assert not default.uses_vertex_colors
    np.testing.assert_allclose(default.color_at(0), WHITE)


def test_missing_field_falls_back_to_default(straight_polyline_vtk):
    dataset = parse_vtk_text(straight_polyline_vtk)
    mapper = make_color_mapper(ColorMode.PRESSURE, dataset)
    
    assert type(mapper) is ColorMapper
    np.testing.assert_allclose(mapper.color_at(1), WHITE)


def test_field_mapper_uses_dataset_range(y_network_vtk):
    dataset = parse_vtk_text(y_network_vtk)
    mapper = make_color_mapper(ColorMode.PRESSURE, dataset)
    
    np.testing.assert_allclose(mapper.color_at(0), pressure_to_color(10.0, 10.0, 50.0))
    np.testing.assert_allclose(mapper.color_at(4), pressure_to_color(50.0, 10.0, 50.0))
    
    flux_mapper = make_color_mapper(ColorMode.FLUX, dataset)
    assert flux_mapper.color_at(0)[2] > flux_mapper.color_at(0)[0]
    assert flux_mapper.color_at(4)[0] > flux_mapper.color_at(4)[2]
