"""
Connectivity graph and branch-point detection.

The graph is undirected: every consecutive index pair of every cell adds
an edge, so shared points between cells join their polylines. A branch
point is a point with more than two distinct neighbors.
"""

from typing import Dict, Iterable, List, Sequence, Tuple
import networkx as nx
import numpy as np

from ..core.types import BranchConnection, BranchPoint, ScalarFieldName, VTKDataset


def iter_cell_pairs(
    cells: Iterable[Sequence[int]],
    num_points: int,
) -> Iterable[Tuple[int, int]]:
    """
    Yield consecutive (i1, i2) pairs of all cells that lie within bounds.
    
    Pairs referencing an index outside ``[0, num_points)`` are skipped.
    """
    for chain in cells:
        for i1, i2 in zip(chain[:-1], chain[1:]):
            if 0 <= i1 < num_points and 0 <= i2 < num_points:
                yield i1, i2


def build_connectivity_graph(
    cells: Iterable[Sequence[int]],
    num_points: int,
) -> nx.Graph:
    """
    Build the undirected point adjacency graph from cell index chains.
    
    Parameters
    ----------
    cells : iterable of sequences of int
        Cell index chains
    num_points : int
        Number of points; out-of-range references are dropped
    
    Returns
    -------
    nx.Graph
        Nodes are point indices that take part in at least one edge
    """
    G = nx.Graph()
    for i1, i2 in iter_cell_pairs(cells, num_points):
        if i1 == i2:
            continue
        G.add_edge(i1, i2)
    return G


def detect_branch_points(G: nx.Graph) -> Dict[int, List[int]]:
    """
    Map each branch point to its ordered list of neighbor indices.
    
    A point is a branch point iff its degree exceeds 2.
    """
    return {
        node: list(G.neighbors(node))
        for node in G.nodes
        if G.degree(node) > 2
    }


def collect_branch_points(
    dataset: VTKDataset,
    branch_map: Dict[int, List[int]],
) -> Dict[int, BranchPoint]:
    """
    Attach direction, radius and distance to every branch neighbor.
    
    Neighbors that coincide with the branch point have no direction and
    are left out of the connection list.
    """
    branch_points = {}
    for index, neighbors in branch_map.items():
        center = dataset.point(index)
        branch = BranchPoint(
            index=index,
            position=np.array(center, dtype=float),
            radius=dataset.value(ScalarFieldName.RADIUS, index),
        )
        for neighbor in neighbors:
            offset = dataset.point(neighbor) - center
            distance = float(np.linalg.norm(offset))
            if distance < 1e-12:
                continue
            branch.connections.append(
                BranchConnection(
                    neighbor=neighbor,
                    direction=offset / distance,
                    radius=dataset.value(ScalarFieldName.RADIUS, neighbor),
                    distance=distance,
                )
            )
        branch_points[index] = branch
    return branch_points


def to_networkx_graph(dataset: VTKDataset) -> nx.Graph:
    """
    Connectivity graph annotated with point data.
    
    Node attributes:
    - 'coord': [x, y, z] position as list
    - 'radius': float radius (fallback applied)
    - 'pressure', 'flux': float, only when the field is present
    
    Edge attributes:
    - 'length': float segment length
    - 'radius': float mean radius of the two endpoints
    """
    G = build_connectivity_graph(dataset.cells, dataset.num_points)
    present = [
        kind for kind in (ScalarFieldName.PRESSURE, ScalarFieldName.FLUX)
        if dataset.has_field(kind)
    ]
    
    for node in G.nodes:
        attrs = {
            "coord": dataset.point(node).tolist(),
            "radius": dataset.value(ScalarFieldName.RADIUS, node),
        }
        for kind in present:
            attrs[kind.value] = dataset.value(kind, node)
        G.nodes[node].update(attrs)
    
    for u, v in G.edges:
        G.edges[u, v]["length"] = float(np.linalg.norm(dataset.point(u) - dataset.point(v)))
        G.edges[u, v]["radius"] = (G.nodes[u]["radius"] + G.nodes[v]["radius"]) / 2.0
    
    return G
