from .connectivity import (
    iter_cell_pairs,
    build_connectivity_graph,
    detect_branch_points,
    collect_branch_points,
    to_networkx_graph,
)

__all__ = [
    'iter_cell_pairs',
    'build_connectivity_graph',
    'detect_branch_points',
    'collect_branch_points',
    'to_networkx_graph',
]
