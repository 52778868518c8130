"""
Permissive parser for legacy ASCII VTK files.

The parser is a line-driven state machine. Section headers switch the
state; data lines are consumed according to the current state. A data
line that cannot be read is discarded and counted, parsing continues.

Recognized records::

    POINTS <n> <type>
    CELLS|POLYGONS|LINES <n> <size>
    POINT_DATA <n>
    SCALARS <name> <type> [numComp]
    LOOKUP_TABLE <name> [<n>]      (skipped)

Any other known section keyword ends the current section.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import numpy as np

from ..core.types import ScalarFieldRegistry, VTKDataset


class ParserState(Enum):
    NONE = "none"
    READING_POINTS = "reading_points"
    READING_CELLS = "reading_cells"
    READING_SCALAR = "reading_scalar"


CELL_KEYWORDS = ("CELLS", "POLYGONS", "LINES")

# Sections that are recognized only to stop reading the previous one.
OTHER_KEYWORDS = (
    "DATASET",
    "ASCII",
    "BINARY",
    "VERTICES",
    "TRIANGLE_STRIPS",
    "CELL_TYPES",
    "CELL_DATA",
    "FIELD",
    "VECTORS",
    "NORMALS",
    "TENSORS",
    "COLOR_SCALARS",
    "TEXTURE_COORDINATES",
    "METADATA",
)

SECTION_KEYWORDS = (
    ("POINTS", "POINT_DATA", "SCALARS", "LOOKUP_TABLE") + CELL_KEYWORDS + OTHER_KEYWORDS
)


def _is_section_header(line: str) -> bool:
    tokens = line.split()
    return bool(tokens) and tokens[0].upper() in SECTION_KEYWORDS


def _parse_floats(tokens: List[str]) -> Optional[List[float]]:
    try:
        return [float(t) for t in tokens]
    except ValueError:
        return None


def _parse_ints(tokens: List[str]) -> Optional[List[int]]:
    try:
        return [int(t) for t in tokens]
    except ValueError:
        return None


def _header_count(tokens: List[str]) -> int:
    if len(tokens) < 2:
        return 0
    try:
        return max(int(tokens[1]), 0)
    except ValueError:
        return 0


class _ParseSession:
    """Mutable state for one pass over a file."""
    
    def __init__(self):
        self.state = ParserState.NONE
        self.point_count = 0
        self.points: List[float] = []
        self.cells: List[Tuple[int, ...]] = []
        self.scalar_fields: Dict[str, List[float]] = {}
        self.point_data_count: Optional[int] = None
        self.scalar_name: Optional[str] = None
        self.scalar_components: Dict[str, int] = {}
        self.dropped_lines = 0
    
    def handle_header(self, keyword: str, tokens: List[str]) -> bool:
        """Switch state on a section header. Returns False for data lines."""
        if keyword == "POINTS":
            self.point_count = _header_count(tokens)
            self.state = ParserState.READING_POINTS
        elif keyword in CELL_KEYWORDS:
            self.state = ParserState.READING_CELLS
        elif keyword == "POINT_DATA":
            self.point_data_count = _header_count(tokens)
            self.state = ParserState.NONE
        elif keyword == "SCALARS":
            if len(tokens) < 2:
                self.state = ParserState.NONE
                self.dropped_lines += 1
                return True
            self.scalar_name = tokens[1].lower()
            components = 1
            if len(tokens) > 3:
                try:
                    components = max(int(tokens[3]), 1)
                except ValueError:
                    components = 1
            self.scalar_components[self.scalar_name] = components
            self.scalar_fields[self.scalar_name] = []
            self.state = ParserState.READING_SCALAR
        elif keyword == "LOOKUP_TABLE":
            # Part of the SCALARS record; the state is left unchanged.
            pass
        elif keyword in OTHER_KEYWORDS:
            self.state = ParserState.NONE
        else:
            return False
        return True
    
    def read_points(self, tokens: List[str]) -> None:
        if len(self.points) >= self.point_count * 3:
            return
        values = _parse_floats(tokens)
        if values is None:
            self.dropped_lines += 1
            return
        self.points.extend(values)
    
    def read_cell(self, tokens: List[str]) -> None:
        indices = _parse_ints(tokens)
        if indices is None or len(indices) < 2:
            self.dropped_lines += 1
            return
        size = indices[0]
        if size < 1 or len(indices) != size + 1:
            self.dropped_lines += 1
            return
        self.cells.append(tuple(indices[1:]))
    
    def read_scalar(self, tokens: List[str]) -> None:
        values = self.scalar_fields[self.scalar_name]
        count = self.point_data_count if self.point_data_count else self.point_count
        capacity = count * self.scalar_components[self.scalar_name]
        if len(values) >= capacity:
            return
        parsed = _parse_floats(tokens)
        if parsed is None:
            self.dropped_lines += 1
            return
        values.extend(parsed)
    
    def finish(self, registry: ScalarFieldRegistry) -> VTKDataset:
        n_values = min(len(self.points), self.point_count * 3)
        n_values -= n_values % 3
        points = np.array(self.points[:n_values], dtype=float)
        points.setflags(write=False)
        
        fields = {}
        for name, values in self.scalar_fields.items():
            arr = np.array(values, dtype=float)
            components = self.scalar_components.get(name, 1)
            if components > 1:
                # Keep the first component of multi-component scalars.
                usable = len(arr) - len(arr) % components
                arr = arr[:usable].reshape(-1, components)[:, 0].copy()
            count = self.point_data_count if self.point_data_count else self.point_count
            arr = arr[:count]
            arr.setflags(write=False)
            fields[name] = arr
        
        return VTKDataset(
            points=points,
            cells=list(self.cells),
            scalar_fields=fields,
            declared_point_count=self.point_count,
            dropped_lines=self.dropped_lines,
            registry=registry,
        )


def parse_vtk_text(
    text: str,
    registry: Optional[ScalarFieldRegistry] = None,
) -> VTKDataset:
    """
    Parse legacy VTK text into points, cell index chains and scalar fields.
    
    Parameters
    ----------
    text : str
        Full file content
    registry : ScalarFieldRegistry, optional
        Field-name registry attached to the dataset
    
    Returns
    -------
    VTKDataset
        Parsed dataset. Malformed lines are dropped and counted in
        ``dropped_lines``; this function does not raise on bad records.
    """
    session = _ParseSession()
    lines = text.splitlines()
    
    start = 0
    if lines and lines[0].strip().lower().startswith("# vtk"):
        start = 1
        # The line after the version header is a free-form title, unless
        # the file omits it and goes straight to a section.
        if len(lines) > 1 and not _is_section_header(lines[1]):
            start = 2
    
    for raw in lines[start:]:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        
        tokens = line.split()
        if session.handle_header(tokens[0].upper(), tokens):
            continue
        
        if session.state is ParserState.READING_POINTS:
            session.read_points(tokens)
        elif session.state is ParserState.READING_CELLS:
            session.read_cell(tokens)
        elif session.state is ParserState.READING_SCALAR:
            session.read_scalar(tokens)
    
    return session.finish(registry or ScalarFieldRegistry())


def parse_vtk_file(
    path,
    registry: Optional[ScalarFieldRegistry] = None,
) -> VTKDataset:
    """Read a legacy VTK file from disk and parse it."""
    path = Path(path)
    return parse_vtk_text(path.read_text(encoding="utf-8", errors="replace"), registry=registry)
