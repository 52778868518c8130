from .vtk_parser import parse_vtk_text, parse_vtk_file, ParserState
from .loaders import fetch_vtk_text, TransportError
from .exporters import (
    to_trimesh,
    export_mesh,
    build_summary,
    save_build_summary_json,
)

__all__ = [
    'parse_vtk_text',
    'parse_vtk_file',
    'ParserState',
    'fetch_vtk_text',
    'TransportError',
    'to_trimesh',
    'export_mesh',
    'build_summary',
    'save_build_summary_json',
]
