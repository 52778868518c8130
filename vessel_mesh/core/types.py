"""
Data types shared by the parser, the connectivity analysis and the mesh builders.

Point identity is the index into ``VTKDataset.points``; every downstream
structure (cells, scalar fields, graph nodes, branch points) refers to
points by that index.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import numpy as np


class ScalarFieldName(Enum):
    """Per-point scalar fields consumed by the mesh builders."""
    RADIUS = "radius"
    PRESSURE = "pressure"
    FLUX = "flux"


DEFAULT_FIELD_ALIASES: Dict[ScalarFieldName, Tuple[str, ...]] = {
    ScalarFieldName.RADIUS: ("radius", "radii"),
    ScalarFieldName.PRESSURE: ("pressure",),
    ScalarFieldName.FLUX: ("flux", "flow", "flow_rate"),
}

DEFAULT_FIELD_FALLBACKS: Dict[ScalarFieldName, float] = {
    ScalarFieldName.RADIUS: 0.1,
    ScalarFieldName.PRESSURE: 0.0,
    ScalarFieldName.FLUX: 0.0,
}


@dataclass
class ScalarFieldRegistry:
    """
    Maps raw ``SCALARS`` names onto typed field kinds.
    
    Matching is case-insensitive. Each kind also carries the constant used
    for points whose value is missing from the file.
    """
    
    aliases: Dict[ScalarFieldName, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_FIELD_ALIASES)
    )
    fallbacks: Dict[ScalarFieldName, float] = field(
        default_factory=lambda: dict(DEFAULT_FIELD_FALLBACKS)
    )
    
    def resolve(self, name: str) -> Optional[ScalarFieldName]:
        """Return the field kind for a raw scalar name, or None if unrecognized."""
        lowered = name.strip().lower()
        for kind, names in self.aliases.items():
            if lowered in names:
                return kind
        return None
    
    def fallback(self, kind: ScalarFieldName) -> float:
        """Fallback constant for a field kind."""
        return self.fallbacks.get(kind, 0.0)


@dataclass
class VTKDataset:
    """
    Parsed content of a legacy VTK file.
    
    Attributes
    ----------
    points : np.ndarray
        Flat float array of length ``3 * num_points``
    cells : list of tuple of int
        Index chains, one per accepted cell line (count prefix removed)
    scalar_fields : dict
        Raw per-point arrays keyed by lower-cased ``SCALARS`` name,
        including names no builder consumes
    declared_point_count : int
        Count from the ``POINTS`` header
    dropped_lines : int
        Malformed record lines discarded during parsing
    """
    
    points: np.ndarray
    cells: List[Tuple[int, ...]] = field(default_factory=list)
    scalar_fields: Dict[str, np.ndarray] = field(default_factory=dict)
    declared_point_count: int = 0
    dropped_lines: int = 0
    registry: ScalarFieldRegistry = field(default_factory=ScalarFieldRegistry)
    
    @property
    def num_points(self) -> int:
        return len(self.points) // 3
    
    @property
    def coordinates(self) -> np.ndarray:
        """Points as an (n, 3) view."""
        return self.points[: self.num_points * 3].reshape(-1, 3)
    
    def point(self, index: int) -> np.ndarray:
        return self.coordinates[index]
    
    def in_bounds(self, index: int) -> bool:
        return 0 <= index < self.num_points
    
    def field(self, kind: ScalarFieldName) -> Optional[np.ndarray]:
        """First raw scalar array whose name resolves to ``kind``."""
        for name, values in self.scalar_fields.items():
            if self.registry.resolve(name) is kind:
                return values
        return None
    
    def has_field(self, kind: ScalarFieldName) -> bool:
        values = self.field(kind)
        return values is not None and len(values) > 0
    
    def value(self, kind: ScalarFieldName, index: int) -> float:
        """
        Scalar value at a point, falling back to the registry constant.
        
        The fallback applies when the field is absent, shorter than the
        point array, or holds a non-finite value. Radii must also be
        positive.
        """
        values = self.field(kind)
        fallback = self.registry.fallback(kind)
        if values is None or index < 0 or index >= len(values):
            return fallback
        v = float(values[index])
        if not np.isfinite(v):
            return fallback
        if kind is ScalarFieldName.RADIUS and v <= 0.0:
            return fallback
        return v
    
    def field_range(self, kind: ScalarFieldName) -> Optional[Tuple[float, float]]:
        """(min, max) over the finite values of a field, or None if absent."""
        values = self.field(kind)
        if values is None or len(values) == 0:
            return None
        finite = values[np.isfinite(values)]
        if len(finite) == 0:
            return None
        return float(finite.min()), float(finite.max())
    
    def scalar_arrays(self) -> Dict[str, np.ndarray]:
        """Raw radius/pressure/flux arrays, empty where a field is absent."""
        arrays = {}
        for kind in ScalarFieldName:
            values = self.field(kind)
            arrays[kind.value] = (
                np.array(values, dtype=float) if values is not None else np.zeros(0)
            )
        return arrays


@dataclass
class BranchConnection:
    """One incident tube at a branch point."""
    
    neighbor: int
    direction: np.ndarray
    radius: float
    distance: float


@dataclass
class BranchPoint:
    """A point where three or more tubes meet."""
    
    index: int
    position: np.ndarray
    radius: float
    connections: List[BranchConnection] = field(default_factory=list)
    
    @property
    def degree(self) -> int:
        return len(self.connections)
    
    def max_connected_radius(self) -> float:
        if not self.connections:
            return 0.0
        return max(conn.radius for conn in self.connections)


@dataclass
class TubeSegment:
    """Tapered cylinder between two consecutive points of a cell."""
    
    start_index: int
    end_index: int
    start: np.ndarray
    end: np.ndarray
    radius_start: float
    radius_end: float
    color_start: np.ndarray
    color_end: np.ndarray
    start_is_branch: bool = False
    end_is_branch: bool = False
