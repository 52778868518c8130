"""
Append-only geometry buffers.

Every batch appended to a ``MeshBuffers`` carries indices local to that
batch; they are offset by the buffer's vertex count at append time, so the
index array stays valid against the concatenated vertex array.
"""

from typing import Dict, List, Optional
import numpy as np


PRIMITIVE_VERTICES = {
    "triangles": 3,
    "lines": 2,
    "points": 1,
}


class MeshBuffers:
    """
    Flat position, normal, color and index arrays for one render primitive.
    
    Parameters
    ----------
    primitive : {"triangles", "lines", "points"}
        How ``indices`` are grouped by the renderer
    """
    
    def __init__(self, primitive: str = "triangles"):
        if primitive not in PRIMITIVE_VERTICES:
            raise ValueError(f"Unknown primitive: {primitive}")
        self.primitive = primitive
        self._positions: List[np.ndarray] = []
        self._normals: List[np.ndarray] = []
        self._colors: List[np.ndarray] = []
        self._indices: List[np.ndarray] = []
        self._vertex_count = 0
    
    @property
    def vertex_count(self) -> int:
        return self._vertex_count
    
    @property
    def has_normals(self) -> bool:
        return len(self._normals) > 0
    
    def append(
        self,
        positions: np.ndarray,
        colors: np.ndarray,
        indices: np.ndarray,
        normals: Optional[np.ndarray] = None,
    ) -> None:
        """
        Append one batch of vertices with batch-local indices.
        
        Parameters
        ----------
        positions : (k, 3) array
        colors : (k, 3) array
        indices : (m,) int array, each entry in ``[0, k)``
        normals : (k, 3) array, optional
            Required for triangle buffers
        """
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        colors = np.asarray(colors, dtype=float).reshape(-1, 3)
        indices = np.asarray(indices, dtype=np.int64).ravel()
        k = len(positions)
        
        if len(colors) != k:
            raise ValueError(f"Expected {k} colors, got {len(colors)}")
        if len(indices) % PRIMITIVE_VERTICES[self.primitive] != 0:
            raise ValueError(
                f"Index count {len(indices)} is not a multiple of "
                f"{PRIMITIVE_VERTICES[self.primitive]} for {self.primitive}"
            )
        if len(indices) and (indices.min() < 0 or indices.max() >= k):
            raise ValueError("Batch index out of range of batch vertices")
        
        if normals is not None:
            normals = np.asarray(normals, dtype=float).reshape(-1, 3)
            if len(normals) != k:
                raise ValueError(f"Expected {k} normals, got {len(normals)}")
        elif self.primitive == "triangles" and k > 0:
            raise ValueError("Triangle batches need per-vertex normals")
        
        if k == 0:
            return
        
        self._positions.append(positions)
        self._colors.append(colors)
        if normals is not None:
            self._normals.append(normals)
        self._indices.append(indices + self._vertex_count)
        self._vertex_count += k
    
    def extend(self, other: "MeshBuffers") -> None:
        """Merge another buffer of the same primitive into this one."""
        if other.primitive != self.primitive:
            raise ValueError(
                f"Cannot merge {other.primitive} buffers into {self.primitive} buffers"
            )
        if other.vertex_count == 0:
            return
        self.append(
            other.positions,
            other.colors,
            other.indices,
            normals=other.normals if other.has_normals else None,
        )
    
    def _consolidate(self) -> None:
        if len(self._positions) > 1:
            self._positions = [np.concatenate(self._positions)]
            self._colors = [np.concatenate(self._colors)]
            self._indices = [np.concatenate(self._indices)]
            if self._normals:
                self._normals = [np.concatenate(self._normals)]
    
    @property
    def positions(self) -> np.ndarray:
        self._consolidate()
        return self._positions[0] if self._positions else np.zeros((0, 3))
    
    @property
    def normals(self) -> np.ndarray:
        self._consolidate()
        return self._normals[0] if self._normals else np.zeros((0, 3))
    
    @property
    def colors(self) -> np.ndarray:
        self._consolidate()
        return self._colors[0] if self._colors else np.zeros((0, 3))
    
    @property
    def indices(self) -> np.ndarray:
        self._consolidate()
        return self._indices[0] if self._indices else np.zeros(0, dtype=np.int64)
    
    @property
    def triangles(self) -> np.ndarray:
        """Indices grouped as (m, 3) faces."""
        if self.primitive != "triangles":
            raise ValueError(f"{self.primitive} buffers have no triangles")
        return self.indices.reshape(-1, 3)
    
    @property
    def triangle_count(self) -> int:
        if self.primitive != "triangles":
            return 0
        return len(self.indices) // 3
    
    def bounds(self) -> np.ndarray:
        """Axis-aligned bounding box as a (2, 3) array [min, max]."""
        positions = self.positions
        if len(positions) == 0:
            return np.zeros((2, 3))
        return np.array([positions.min(axis=0), positions.max(axis=0)])
    
    def transform(self, translation: np.ndarray, scale: float) -> None:
        """Translate then uniformly scale all positions in place."""
        positions = self.positions
        if len(positions) == 0:
            return
        self._positions = [(positions + np.asarray(translation, dtype=float)) * scale]
    
    def as_flat_arrays(self) -> Dict[str, np.ndarray]:
        """Flat float32/uint32 arrays ready for a GPU buffer upload."""
        arrays = {
            "position": self.positions.astype(np.float32).ravel(),
            "color": self.colors.astype(np.float32).ravel(),
            "index": self.indices.astype(np.uint32),
        }
        if self.has_normals:
            arrays["normal"] = self.normals.astype(np.float32).ravel()
        return arrays
    
    def __len__(self) -> int:
        return self._vertex_count
    
    def __repr__(self) -> str:
        return (
            f"MeshBuffers(primitive={self.primitive!r}, vertices={self._vertex_count}, "
            f"indices={sum(len(i) for i in self._indices)})"
        )
