"""
Vessel Mesh - Render-Ready Tube Meshes from Legacy VTK Vascular Networks

Converts a legacy ASCII VTK file (points, polyline cells, per-point radius,
pressure and flux) into a triangulated tube mesh of the branching network:
- Permissive line-driven VTK parsing
- Branch detection on the point connectivity graph
- Tapered tubes with branch-aware overlap
- Blended junction caps at branch points
- Pressure and flux color ramps
- Normalization to a fixed model size
- Cached loading with optional coarse-then-fine refinement

Example Usage:
    from vessel_mesh import VesselMeshLoader, VesselMeshConfig
    
    loader = VesselMeshLoader()
    result = loader.load("network.vtk", VesselMeshConfig(model_size=420.0))
    if result.is_success():
        buffers = result.metadata['buffers']
"""

__version__ = "0.1.0"

from .core.types import ScalarFieldName, ScalarFieldRegistry, VTKDataset, BranchPoint, TubeSegment
from .core.buffers import MeshBuffers
from .core.result import OperationResult, OperationStatus, ErrorCode
from .coloring.colormaps import ColorMode, make_color_mapper, pressure_to_color, flux_to_color
from .config import VesselMeshConfig, TubeConfig, JunctionConfig, ColorConfig
from .io.vtk_parser import parse_vtk_text, parse_vtk_file
from .io.loaders import fetch_vtk_text, TransportError
from .io.exporters import to_trimesh, export_mesh, build_summary, save_build_summary_json
from .analysis.connectivity import build_connectivity_graph, detect_branch_points, to_networkx_graph
from .pipeline import build_vessel_mesh, build_preview_mesh, build_from_text
from .cache import GeometryCache, CacheKey, CachedGeometry, VesselMeshLoader

__all__ = [
    "ScalarFieldName",
    "ScalarFieldRegistry",
    "VTKDataset",
    "BranchPoint",
    "TubeSegment",
    "MeshBuffers",
    "OperationResult",
    "OperationStatus",
    "ErrorCode",
    "ColorMode",
    "make_color_mapper",
    "pressure_to_color",
    "flux_to_color",
    "VesselMeshConfig",
    "TubeConfig",
    "JunctionConfig",
    "ColorConfig",
    "parse_vtk_text",
    "parse_vtk_file",
    "fetch_vtk_text",
    "TransportError",
    "to_trimesh",
    "export_mesh",
    "build_summary",
    "save_build_summary_json",
    "build_connectivity_graph",
    "detect_branch_points",
    "to_networkx_graph",
    "build_vessel_mesh",
    "build_preview_mesh",
    "build_from_text",
    "GeometryCache",
    "CacheKey",
    "CachedGeometry",
    "VesselMeshLoader",
]
