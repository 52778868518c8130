"""
Scalar-to-color ramps for vessel meshes.

Two nonlinear ramps are provided:

- pressure: green (low) -> orange (medium) -> dark red (high), with a
  power-law compression that spreads out the low end.
- flux: signed flow, deep blue (strong reverse) -> blue -> cyan -> green
  -> yellow -> red (strong forward), with a signed log transform that
  boosts sensitivity near zero.

Colors are RGB float arrays with channels in [0, 1].
"""

from enum import Enum
from typing import Dict, Optional
import numpy as np

from ..core.types import ScalarFieldName, VTKDataset


WHITE = np.array([1.0, 1.0, 1.0])
NEUTRAL_GRAY = np.array([0.5, 0.5, 0.5])

PRESSURE_EXPONENT = 0.4
PRESSURE_MIDPOINT = 0.5

# Green to orange
PRESSURE_LOW_START = np.array([0.23, 0.70, 0.27])
PRESSURE_LOW_SLOPE = np.array([0.75, 0.23, -0.27])

# Orange to dark red
PRESSURE_HIGH_START = np.array([0.98, 0.93, 0.00])
PRESSURE_HIGH_SLOPE = np.array([-0.42, -0.81, 0.00])

FLUX_EPSILON_FRACTION = 0.01
FLUX_SENSITIVITY = 0.3


class ColorMode(Enum):
    """Which scalar field drives vertex colors."""
    PRESSURE = "pressure"
    FLUX = "flux"
    DEFAULT = "default"
    
    @classmethod
    def coerce(cls, value) -> "ColorMode":
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


def pressure_to_color(value: float, min_value: float, max_value: float) -> np.ndarray:
    """
    Map a pressure value to the green-orange-dark red ramp.
    
    Parameters
    ----------
    value : float
        Pressure at a point
    min_value, max_value : float
        Pressure range of the dataset
    
    Returns
    -------
    np.ndarray
        RGB color. ``min_value`` maps to (0.23, 0.70, 0.27) and
        ``max_value`` to (0.56, 0.12, 0.00); a degenerate range maps every
        value to the 0.5 midpoint before the power law is applied.
    """
    if max_value > min_value:
        linear = (value - min_value) / (max_value - min_value)
        linear = min(max(linear, 0.0), 1.0)
    else:
        linear = PRESSURE_MIDPOINT
    t = linear ** PRESSURE_EXPONENT
    
    if t < PRESSURE_MIDPOINT:
        factor = t * 2.0
        return PRESSURE_LOW_START + factor * PRESSURE_LOW_SLOPE
    factor = (t - PRESSURE_MIDPOINT) * 2.0
    return PRESSURE_HIGH_START + factor * PRESSURE_HIGH_SLOPE


def _signed_log(x: float, epsilon: float) -> float:
    # Shifted by ln(epsilon) so that zero maps to zero and the transform
    # stays monotonic for |x| + epsilon < 1.
    return float(np.sign(x) * (np.log(abs(x) + epsilon) - np.log(epsilon)))


def _flux_gradient(u: float) -> np.ndarray:
    """Six-stop gradient over u in [0, 1]."""
    if u < 0.2:
        f = u / 0.2
        return np.array([0.0, 0.0, 0.5 + 0.5 * f])   # deep blue -> blue
    if u < 0.4:
        f = (u - 0.2) / 0.2
        return np.array([0.0, f, 1.0])               # blue -> cyan
    if u < 0.6:
        f = (u - 0.4) / 0.2
        return np.array([0.0, 1.0, 1.0 - f])         # cyan -> green
    if u < 0.8:
        f = (u - 0.6) / 0.2
        return np.array([f, 1.0, 0.0])               # green -> yellow
    f = min((u - 0.8) / 0.2, 1.0)
    return np.array([1.0, 1.0 - f, 0.0])             # yellow -> red


def flux_to_color(value: float, min_value: float, max_value: float) -> np.ndarray:
    """
    Map a signed flux value to the reverse/forward flow ramp.
    
    The log-transformed range is stretched over the whole ramp: the
    dataset minimum is deep blue and the maximum red. In a range spanning
    zero symmetrically, reverse flow lands on the blue side and forward
    flow on the red side. A degenerate range returns neutral gray.
    
    Parameters
    ----------
    value : float
        Flux at a point
    min_value, max_value : float
        Flux range of the dataset
    
    Returns
    -------
    np.ndarray
        RGB color
    """
    if max_value == min_value:
        return NEUTRAL_GRAY.copy()
    
    epsilon = FLUX_EPSILON_FRACTION * max(abs(min_value), abs(max_value))
    log_value = _signed_log(value, epsilon)
    log_min = _signed_log(min_value, epsilon)
    log_max = _signed_log(max_value, epsilon)
    if log_max == log_min:
        return NEUTRAL_GRAY.copy()
    
    # min -> -1, max -> +1
    t = 2.0 * (log_value - log_min) / (log_max - log_min) - 1.0
    t = min(max(t, -1.0), 1.0)
    magnitude = abs(t) ** FLUX_SENSITIVITY
    signed = magnitude if t >= 0 else -magnitude
    u = (signed + 1.0) / 2.0
    return _flux_gradient(u)


class ColorMapper:
    """Neutral strategy: every point is white, vertex colors are not used."""
    
    mode = ColorMode.DEFAULT
    uses_vertex_colors = False
    
    def color_at(self, index: int) -> np.ndarray:
        return WHITE.copy()


class _FieldColorMapper(ColorMapper):
    field_kind: ScalarFieldName
    uses_vertex_colors = True
    
    def __init__(self, dataset: VTKDataset):
        self.dataset = dataset
        value_range = dataset.field_range(self.field_kind)
        fallback = dataset.registry.fallback(self.field_kind)
        self.min_value, self.max_value = value_range or (fallback, fallback)
        self._cache: Dict[int, np.ndarray] = {}
    
    def _ramp(self, value: float) -> np.ndarray:
        raise NotImplementedError
    
    def color_at(self, index: int) -> np.ndarray:
        color = self._cache.get(index)
        if color is None:
            color = self._ramp(self.dataset.value(self.field_kind, index))
            self._cache[index] = color
        return color.copy()


class PressureColorMapper(_FieldColorMapper):
    mode = ColorMode.PRESSURE
    field_kind = ScalarFieldName.PRESSURE
    
    def _ramp(self, value: float) -> np.ndarray:
        return pressure_to_color(value, self.min_value, self.max_value)


class FluxColorMapper(_FieldColorMapper):
    mode = ColorMode.FLUX
    field_kind = ScalarFieldName.FLUX
    
    def _ramp(self, value: float) -> np.ndarray:
        return flux_to_color(value, self.min_value, self.max_value)


_MAPPERS = {
    ColorMode.PRESSURE: PressureColorMapper,
    ColorMode.FLUX: FluxColorMapper,
}


def make_color_mapper(mode, dataset: Optional[VTKDataset]) -> ColorMapper:
    """
    Select the color strategy for a mode.
    
    A mode whose scalar field is absent from the dataset falls back to the
    neutral strategy.
    """
    mode = ColorMode.coerce(mode)
    mapper_cls = _MAPPERS.get(mode)
    if mapper_cls is None or dataset is None or not dataset.has_field(mapper_cls.field_kind):
        return ColorMapper()
    return mapper_cls(dataset)
