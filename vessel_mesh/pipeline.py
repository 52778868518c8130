"""
End-to-end build of a render-ready vessel mesh.

Stages, in order:

- parse the VTK text (points, cells, scalar fields)
- connectivity graph and branch points
- tapered tubes for every cell segment
- blended junction caps at branch points
- center and rescale the merged buffers

Datasets without a radius field, or configs with cylinder geometry turned
off, produce line segments instead of tubes; datasets whose cells give no
segment at all produce a point cloud.
"""

from typing import Optional

from .analysis.connectivity import (
    build_connectivity_graph,
    collect_branch_points,
    detect_branch_points,
)
from .coloring.colormaps import ColorMapper, make_color_mapper
from .config import VesselMeshConfig
from .core.buffers import MeshBuffers
from .core.result import ErrorCode, OperationResult
from .core.types import ScalarFieldName, VTKDataset
from .geometry.junctions import build_junction_mesh
from .geometry.normalize import normalize_buffers
from .geometry.preview import build_line_segments, build_point_cloud
from .geometry.tubes import build_tube_mesh, collect_tube_segments
from .io.vtk_parser import parse_vtk_text
from .utils import timed_stage


def _finish(
    buffers: MeshBuffers,
    dataset: VTKDataset,
    config: VesselMeshConfig,
    color_mapper: ColorMapper,
    detail: str,
    metadata: dict,
    warnings: list,
) -> OperationResult:
    with timed_stage("normalize", enabled=config.verbose):
        center, scale = normalize_buffers(buffers, config.model_size)
    
    is_point_cloud = buffers.primitive == "points"
    metadata.update({
        "buffers": buffers,
        "scalars": dataset.scalar_arrays(),
        "primitive": buffers.primitive,
        "is_point_cloud": is_point_cloud,
        "detail": detail,
        "color_mode": config.mode.value,
        "uses_vertex_colors": color_mapper.uses_vertex_colors,
        "num_vertices": buffers.vertex_count,
        "num_triangles": buffers.triangle_count,
        "normalization": {"center": center.tolist(), "scale": float(scale)},
        "render_hints": config.render_hints(),
        "config": config.to_dict(),
    })
    
    message = (
        f"Built {detail} {buffers.primitive} geometry: "
        f"{buffers.vertex_count} vertices from {dataset.num_points} points"
    )
    result = OperationResult.success(message, metadata=metadata)
    for warning in warnings:
        result.add_warning(warning)
    return result


def _check_inputs(dataset: VTKDataset, config: VesselMeshConfig) -> Optional[OperationResult]:
    try:
        config.validate()
    except ValueError as e:
        return OperationResult.failure(
            f"Invalid configuration: {e}",
            error_codes=[ErrorCode.INVALID_PARAMETER.value],
        )
    if dataset.num_points == 0:
        return OperationResult.failure(
            "Dataset contains no points",
            error_codes=[ErrorCode.EMPTY_DATASET.value],
        )
    return None


def _parse_warnings(dataset: VTKDataset) -> list:
    warnings = []
    if dataset.dropped_lines:
        warnings.append(f"Dropped {dataset.dropped_lines} malformed record line(s)")
    if dataset.declared_point_count and dataset.num_points < dataset.declared_point_count:
        warnings.append(
            f"POINTS declared {dataset.declared_point_count} points, "
            f"found {dataset.num_points}"
        )
    return warnings


def _color_mapper(dataset: VTKDataset, config: VesselMeshConfig, warnings: list) -> ColorMapper:
    color_mapper = make_color_mapper(config.mode, dataset)
    if color_mapper.mode is not config.mode:
        warnings.append(f"No {config.mode.value} field, using default coloring")
    return color_mapper


def _lines_or_points(dataset: VTKDataset, color_mapper: ColorMapper, metadata: dict) -> MeshBuffers:
    buffers, num_segments = build_line_segments(dataset, color_mapper)
    metadata["num_segments"] = num_segments
    if buffers.vertex_count == 0:
        buffers = build_point_cloud(dataset, color_mapper)
    return buffers


def build_vessel_mesh(
    dataset: VTKDataset,
    config: Optional[VesselMeshConfig] = None,
) -> OperationResult:
    """
    Build full-detail geometry for a parsed dataset.
    
    Parameters
    ----------
    dataset : VTKDataset
        Parsed VTK content
    config : VesselMeshConfig, optional
        Build settings; defaults are used when omitted
    
    Returns
    -------
    OperationResult
        On success, ``metadata`` holds:
        - 'buffers': normalized MeshBuffers
        - 'scalars': raw 'radius', 'pressure', 'flux' arrays
        - 'primitive', 'is_point_cloud', 'detail', 'color_mode',
          'uses_vertex_colors'
        - 'num_segments', 'num_junctions', 'junction_centers',
          'branch_points'
        - 'normalization': {'center', 'scale'}
        - 'render_hints'
        - 'config': the settings used, as a dict
        - 'tube_stats': segment, dangling and degenerate pair counts
          (tube builds only)
    """
    config = config or VesselMeshConfig()
    failed = _check_inputs(dataset, config)
    if failed is not None:
        return failed
    
    try:
        warnings = _parse_warnings(dataset)
        color_mapper = _color_mapper(dataset, config, warnings)
        metadata = {
            "num_segments": 0,
            "num_junctions": 0,
            "junction_centers": [],
            "branch_points": {},
        }
        
        use_tubes = (
            config.tube.use_cylinder_geometry
            and dataset.has_field(ScalarFieldName.RADIUS)
            and len(dataset.cells) > 0
        )
        buffers = MeshBuffers("triangles")
        
        if use_tubes:
            with timed_stage("connectivity", enabled=config.verbose):
                graph = build_connectivity_graph(dataset.cells, dataset.num_points)
                branch_map = detect_branch_points(graph)
                branch_points = collect_branch_points(dataset, branch_map)
            
            with timed_stage("tubes", enabled=config.verbose):
                segments, stats = collect_tube_segments(
                    dataset, set(branch_map), color_mapper,
                )
                buffers = build_tube_mesh(
                    segments,
                    radial_segments=config.tube.radial_segments,
                    extension_factor=config.tube.branch_extension_factor,
                    extension_floor=config.tube.branch_extension_floor,
                    branch_radius_scale=config.tube.branch_radius_scale,
                )
            
            with timed_stage("junctions", enabled=config.verbose):
                junction_buffers, emitted = build_junction_mesh(
                    branch_points.values(),
                    color_mapper,
                    resolution=config.junction.resolution,
                    **config.junction.radius_kwargs(),
                )
                buffers.extend(junction_buffers)
            
            if stats.dangling_pairs:
                warnings.append(
                    f"Skipped {stats.dangling_pairs} segment(s) referencing missing points"
                )
            if stats.degenerate_pairs:
                warnings.append(f"Skipped {stats.degenerate_pairs} zero-length segment(s)")
            
            metadata.update({
                "num_segments": stats.segments,
                "tube_stats": stats.to_dict(),
                "num_junctions": len(emitted),
                "junction_centers": sorted(emitted),
                "branch_points": {int(k): [int(n) for n in v] for k, v in branch_map.items()},
            })
        
        if buffers.vertex_count == 0:
            buffers = _lines_or_points(dataset, color_mapper, metadata)
        
        return _finish(buffers, dataset, config, color_mapper, "full", metadata, warnings)
    
    except Exception as e:
        return OperationResult.failure(
            f"Vessel mesh build failed: {e}",
            error_codes=[ErrorCode.BUILD_FAILED.value],
        )


def build_preview_mesh(
    dataset: VTKDataset,
    config: Optional[VesselMeshConfig] = None,
) -> OperationResult:
    """
    Build the coarse preview: colored line segments, or points if the
    cells give no segment. Metadata keys match ``build_vessel_mesh``.
    """
    config = config or VesselMeshConfig()
    failed = _check_inputs(dataset, config)
    if failed is not None:
        return failed
    
    try:
        warnings = _parse_warnings(dataset)
        color_mapper = _color_mapper(dataset, config, warnings)
        metadata = {
            "num_segments": 0,
            "num_junctions": 0,
            "junction_centers": [],
            "branch_points": {},
        }
        buffers = _lines_or_points(dataset, color_mapper, metadata)
        return _finish(buffers, dataset, config, color_mapper, "coarse", metadata, warnings)
    
    except Exception as e:
        return OperationResult.failure(
            f"Preview build failed: {e}",
            error_codes=[ErrorCode.BUILD_FAILED.value],
        )


def build_from_text(
    text: str,
    config: Optional[VesselMeshConfig] = None,
) -> OperationResult:
    """Parse VTK text and build full-detail geometry in one call."""
    config = config or VesselMeshConfig()
    with timed_stage("parse", enabled=config.verbose):
        dataset = parse_vtk_text(text, registry=config.field_registry())
    result = build_vessel_mesh(dataset, config)
    if result.is_success():
        result.metadata["dataset"] = dataset
    return result
