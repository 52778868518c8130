"""
Configuration dataclasses for vessel mesh generation.

Units: ``model_size`` is in world units of the render scene; every
geometric constant below is in the units of the source file and is
applied before normalization.
"""

from dataclasses import dataclass, field, replace

from .coloring.colormaps import ColorMode
from .core.types import ScalarFieldName, ScalarFieldRegistry


@dataclass
class TubeConfig:
    """Configuration for tapered-cylinder tubes."""
    
    radial_segments: int = 10
    use_cylinder_geometry: bool = True
    
    branch_extension_factor: float = 0.08  # fraction of the endpoint radius
    branch_extension_floor: float = 0.005
    branch_radius_scale: float = 1.02


@dataclass
class JunctionConfig:
    """Configuration for blended junction caps at branch points."""
    
    resolution: int = 6
    base_radius_factor: float = 0.95
    
    influence_exponent: float = 3.0
    contribution_factor: float = 0.3
    coverage_factor: float = 1.2
    scale_factor: float = 0.2
    min_radius_factor: float = 0.9
    strong_influence_threshold: float = 0.1
    strong_radius_factor: float = 1.25
    
    normal_exponent: float = 2.5
    normal_blend: float = 0.12
    
    def radius_kwargs(self) -> dict:
        return {
            "base_radius_factor": self.base_radius_factor,
            "influence_exponent": self.influence_exponent,
            "contribution_factor": self.contribution_factor,
            "coverage_factor": self.coverage_factor,
            "scale_factor": self.scale_factor,
            "min_radius_factor": self.min_radius_factor,
            "strong_influence_threshold": self.strong_influence_threshold,
            "strong_radius_factor": self.strong_radius_factor,
            "normal_exponent": self.normal_exponent,
            "normal_blend": self.normal_blend,
        }


@dataclass
class ColorConfig:
    """Configuration for vertex coloring and display hints."""
    
    mode: ColorMode = ColorMode.PRESSURE
    display_color: int = 0xff2222  # used when vertex colors are off
    opacity: float = 0.9


@dataclass
class VesselMeshConfig:
    """Complete configuration for building a vessel mesh."""
    
    model_size: float = 420.0
    
    tube: TubeConfig = field(default_factory=TubeConfig)
    junction: JunctionConfig = field(default_factory=JunctionConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    
    use_lod: bool = False
    
    radius_fallback: float = 0.1
    verbose: bool = False
    
    def __post_init__(self):
        self.validate()
    
    def validate(self) -> None:
        """Reject settings no build can honor."""
        self.color.mode = ColorMode.coerce(self.color.mode)
        if self.model_size <= 0:
            raise ValueError(f"model_size must be positive, got {self.model_size}")
        if self.tube.radial_segments < 3:
            raise ValueError(
                f"radial_segments must be at least 3, got {self.tube.radial_segments}"
            )
        if self.junction.resolution < 2:
            raise ValueError(
                f"junction resolution must be at least 2, got {self.junction.resolution}"
            )
        if self.radius_fallback <= 0:
            raise ValueError(f"radius_fallback must be positive, got {self.radius_fallback}")
    
    @property
    def mode(self) -> ColorMode:
        return ColorMode.coerce(self.color.mode)
    
    @property
    def line_width(self) -> int:
        # 420 -> 6, 280 -> 4, 140 -> 2
        return max(2, round(self.model_size / 70))
    
    @property
    def point_size(self) -> int:
        # 420 -> 25, 280 -> 16, 140 -> 8
        return max(8, round(self.model_size / 17))
    
    def with_mode(self, mode) -> "VesselMeshConfig":
        """Copy of this config with another color mode."""
        return replace(self, color=replace(self.color, mode=ColorMode.coerce(mode)))
    
    def render_hints(self) -> dict:
        return {
            "display_color": self.color.display_color,
            "opacity": self.color.opacity,
            "line_width": self.line_width,
            "point_size": self.point_size,
        }
    
    def to_dict(self):
        """Convert config to dictionary for serialization."""
        return {
            "model_size": self.model_size,
            "use_lod": self.use_lod,
            "radius_fallback": self.radius_fallback,
            "verbose": self.verbose,
            "tube": {
                "radial_segments": self.tube.radial_segments,
                "use_cylinder_geometry": self.tube.use_cylinder_geometry,
                "branch_extension_factor": self.tube.branch_extension_factor,
                "branch_extension_floor": self.tube.branch_extension_floor,
                "branch_radius_scale": self.tube.branch_radius_scale,
            },
            "junction": {
                "resolution": self.junction.resolution,
                **self.junction.radius_kwargs(),
            },
            "color": {
                "mode": self.mode.value,
                "display_color": self.color.display_color,
                "opacity": self.color.opacity,
            },
        }
    
    def field_registry(self) -> ScalarFieldRegistry:
        """Scalar field registry carrying this config's radius fallback."""
        registry = ScalarFieldRegistry()
        registry.fallbacks[ScalarFieldName.RADIUS] = self.radius_fallback
        return registry
