import heapq
import itertools
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from models.lot_graph import LotGraph
from models.parking_model import RouteOption
from utils.errors import NotFound, Unreachable

# Create Logger
logger = logging.getLogger(__name__)


Distances = Dict[str, float]
Predecessors = Dict[str, Optional[str]]


def dijkstra(
    graph: LotGraph, start: str, excluded: Optional[Iterable[str]] = None
) -> Tuple[Distances, Predecessors]:
    """
    Single-source shortest paths from ``start``.

    Returns the full distance and predecessor maps. Nodes in ``excluded``
    are treated as impassable; unreachable nodes keep ``math.inf`` and
    a ``None`` predecessor.
    """
    if not graph.has_node(start):
        raise NotFound(f"Unknown node: {start}")

    blocked = set(excluded or ()) - {start}
    distances: Distances = dict.fromkeys(graph.nodes, math.inf)
    previous: Predecessors = dict.fromkeys(graph.nodes)
    distances[start] = 0.0

    # the counter keeps ties in discovery order
    counter = itertools.count()
    queue = [(0.0, next(counter), start)]
    visited = set()

    while queue:
        distance, _, current = heapq.heappop(queue)
        if current in visited:
            continue
        visited.add(current)

        for neighbor in graph.neighbors(current):
            if neighbor.node in blocked or neighbor.node in visited:
                continue
            candidate = distance + neighbor.weight
            if candidate < distances[neighbor.node]:
                distances[neighbor.node] = candidate
                previous[neighbor.node] = current
                heapq.heappush(queue, (candidate, next(counter), neighbor.node))

    return distances, previous


def build_path(previous: Predecessors, start: str, target: str) -> List[str]:
    """
    Walk predecessors back from ``target``. Empty list when unreachable.
    """
    if target == start:
        return [start]
    if previous.get(target) is None:
        return []

    path = [target]
    current = target
    while current != start:
        current = previous.get(current)
        if current is None:
            return []
        path.append(current)
    path.reverse()
    return path


def shortest_route(
    graph: LotGraph, start: str, target: str, excluded: Optional[Iterable[str]] = None
) -> RouteOption:
    if not graph.has_node(target):
        raise NotFound(f"Unknown node: {target}")

    distances, previous = dijkstra(graph, start, excluded)
    path = build_path(previous, start, target)
    if not path:
        raise Unreachable(f"No path from {start} to {target}")
    return RouteOption(path=path, weight=distances[target])


def find_k_paths(graph: LotGraph, start: str, end: str, k: int = 3) -> List[RouteOption]:
    """
    Up to ``k`` simple paths from ``start`` to ``end`` in ascending weight.

    The frontier of partial paths is always expanded from its cheapest
    entry (first discovered wins on ties), so the first accepted path is
    a shortest one. Cycles are prevented per path only. The frontier
    grows exponentially on dense graphs; this is only meant for small,
    fixed lot layouts and near-identical paths are not merged.
    """
    for node_id in (start, end):
        if not graph.has_node(node_id):
            raise NotFound(f"Unknown node: {node_id}")
    if k <= 0:
        return []

    counter = itertools.count()
    frontier = [(0.0, next(counter), [start])]
    paths: List[RouteOption] = []

    while frontier and len(paths) < k:
        weight, _, path = heapq.heappop(frontier)
        node = path[-1]

        if node == end:
            paths.append(RouteOption(path=path, weight=weight))
            continue

        for neighbor in graph.neighbors(node):
            if neighbor.node in path:
                continue
            heapq.heappush(
                frontier,
                (weight + neighbor.weight, next(counter), path + [neighbor.node]),
            )

    logger.info(f"Found {len(paths)} route(s) from {start} to {end}")
    return paths
