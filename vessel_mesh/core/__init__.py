"""Core data structures for vessel mesh generation."""

from .types import (
    ScalarFieldName,
    ScalarFieldRegistry,
    VTKDataset,
    BranchConnection,
    BranchPoint,
    TubeSegment,
)
from .buffers import MeshBuffers
from .result import OperationResult, OperationStatus, ErrorCode

__all__ = [
    "ScalarFieldName",
    "ScalarFieldRegistry",
    "VTKDataset",
    "BranchConnection",
    "BranchPoint",
    "TubeSegment",
    "MeshBuffers",
    "OperationResult",
    "OperationStatus",
    "ErrorCode",
]
