"""
Export of built geometry to trimesh meshes, mesh files and JSON summaries.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Union
import numpy as np
import trimesh

from ..core.buffers import MeshBuffers
from ..core.result import ErrorCode, OperationResult


def to_trimesh(buffers: MeshBuffers) -> trimesh.Trimesh:
    """
    Convert triangle buffers to a ``trimesh.Trimesh``.
    
    Vertices are not merged, so tube rings and junction caps stay separate
    pieces exactly as built. Colors become RGBA uint8 vertex colors.
    
    Raises
    ------
    ValueError
        If the buffers hold lines or points
    """
    if buffers.primitive != "triangles":
        raise ValueError(f"Cannot build a Trimesh from {buffers.primitive} buffers")
    
    rgba = np.ones((buffers.vertex_count, 4))
    rgba[:, :3] = np.clip(buffers.colors, 0.0, 1.0)
    
    return trimesh.Trimesh(
        vertices=buffers.positions,
        faces=buffers.triangles,
        vertex_normals=buffers.normals,
        vertex_colors=(rgba * 255).round().astype(np.uint8),
        process=False,
    )


def export_mesh(buffers: MeshBuffers, output_path: Union[str, Path]) -> OperationResult:
    """
    Write triangle buffers to any format trimesh can export (PLY, GLB, STL, OBJ).
    
    Returns
    -------
    OperationResult
        Result with 'output_path', 'num_vertices' and 'num_faces' in metadata
    """
    output_path = Path(output_path)
    try:
        mesh = to_trimesh(buffers)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        mesh.export(str(output_path))
    except Exception as e:
        return OperationResult.failure(
            f"Export failed: {e}",
            error_codes=[ErrorCode.EXPORT_FAILED.value],
        )
    
    return OperationResult.success(
        f"Exported to {output_path}",
        metadata={
            "output_path": str(output_path),
            "num_vertices": int(len(mesh.vertices)),
            "num_faces": int(len(mesh.faces)),
        },
    )


def build_summary(result: OperationResult) -> Dict[str, Any]:
    """
    JSON-serializable summary of a build result.
    
    Includes counts, normalization, color mode and warnings; arrays are
    left out.
    """
    metadata = result.metadata
    buffers = metadata.get("buffers")
    scalars = metadata.get("scalars", {})
    
    summary = {
        "status": result.status.value,
        "message": result.message,
        "warnings": list(result.warnings),
        "error_codes": list(result.error_codes),
    }
    if buffers is None:
        return summary
    
    bbox_min, bbox_max = buffers.bounds()
    summary.update({
        "primitive": buffers.primitive,
        "detail": metadata.get("detail"),
        "color_mode": metadata.get("color_mode"),
        "from_cache": metadata.get("from_cache", False),
        "num_vertices": buffers.vertex_count,
        "num_triangles": buffers.triangle_count,
        "num_segments": metadata.get("num_segments", 0),
        "num_junctions": metadata.get("num_junctions", 0),
        "num_branch_points": len(metadata.get("branch_points", {})),
        "normalization": metadata.get("normalization"),
        "bounds": {"min": bbox_min.tolist(), "max": bbox_max.tolist()},
        "scalar_fields": {
            name: {
                "count": int(len(values)),
                "min": float(np.min(values)) if len(values) else None,
                "max": float(np.max(values)) if len(values) else None,
            }
            for name, values in scalars.items()
        },
    })
    return summary


def save_build_summary_json(result: OperationResult, output_path: Union[str, Path]) -> None:
    """Write ``build_summary`` to a JSON file with a creation timestamp."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    
    payload = {
        "created_at": datetime.now().isoformat(),
        "summary": build_summary(result),
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    
    print(f"[save_build_summary_json] Saved summary to {output_path}")
