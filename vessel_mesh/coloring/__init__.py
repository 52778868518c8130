"""Scalar-driven vertex coloring."""

from .colormaps import (
    ColorMode,
    ColorMapper,
    PressureColorMapper,
    FluxColorMapper,
    make_color_mapper,
    pressure_to_color,
    flux_to_color,
    NEUTRAL_GRAY,
    WHITE,
)

__all__ = [
    "ColorMode",
    "ColorMapper",
    "PressureColorMapper",
    "FluxColorMapper",
    "make_color_mapper",
    "pressure_to_color",
    "flux_to_color",
    "NEUTRAL_GRAY",
    "WHITE",
]
