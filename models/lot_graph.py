import logging
import re
from typing import Dict, Iterable, List, Optional

from models.parking_model import LayoutExport, LotNode, Neighbor, NodeKind, Position

# Create Logger
logger = logging.getLogger(__name__)


_DIGITS = re.compile(r"(\d+)")


def slot_sort_key(node_id: str):
    """
    Natural ordering for slot ids so that S2 comes before S10.
    """
    return [
        (0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk)
        for chunk in _DIGITS.split(node_id)
        if chunk
    ]


class LotGraph:
    """
    Weighted undirected graph of the lot: entrance, junctions and slots.

    The topology is append-only. It is built once at startup and never
    mutated afterwards, so readers do not need any locking.
    """

    def __init__(self):
        self.nodes: Dict[str, LotNode] = {}
        self.adjacency: Dict[str, List[Neighbor]] = {}

    @classmethod
    def from_layout(cls, layout: dict) -> "LotGraph":
        graph = cls()
        for node in layout.get("nodes", []):
            graph.add_node(
                node["id"],
                kind=node.get("type", node.get("kind", NodeKind.JUNCTION)),
                name=node.get("name", ""),
                position=node.get("coordinates", node.get("position")),
            )
        edges = layout.get("edges", [])
        for edge in edges:
            graph.add_edge(edge["from"], edge["to"], edge["weight"])

        logger.info(
            f"Graph initialized with {len(graph.nodes)} nodes and {len(edges)} edges."
        )
        return graph

    def add_node(
        self,
        node_id: str,
        kind: NodeKind = NodeKind.JUNCTION,
        name: str = "",
        position: Optional[dict] = None,
    ) -> LotNode:
        if node_id in self.nodes:
            logger.error(f"Node {node_id} already exists in the lot graph")
            raise ValueError(f"Duplicate node id: {node_id}")

        node = LotNode(
            id=node_id,
            kind=NodeKind(kind),
            name=name,
            position=Position(**position) if position else Position(),
        )
        self.nodes[node_id] = node
        self.adjacency[node_id] = []
        return node

    def add_edge(self, node_a: str, node_b: str, weight: float):
        if node_a not in self.nodes or node_b not in self.nodes:
            logger.error(f"Error: Nodes {node_a} or {node_b} do not exist.")
            raise ValueError(f"Edge references unknown node: {node_a} - {node_b}")
        if weight <= 0:
            logger.error(f"Error: Edge {node_a} - {node_b} has weight {weight}")
            raise ValueError(f"Edge weight must be positive, got {weight}")

        # physical paths are walkable both ways
        self.adjacency[node_a].append(Neighbor(node=node_b, weight=weight))
        self.adjacency[node_b].append(Neighbor(node=node_a, weight=weight))

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def neighbors(self, node_id: str) -> List[Neighbor]:
        return self.adjacency.get(node_id, [])

    def slot_ids(self) -> List[str]:
        return sorted(
            (node.id for node in self.nodes.values() if node.kind == NodeKind.SLOT),
            key=slot_sort_key,
        )

    def is_slot(self, node_id: str) -> bool:
        node = self.nodes.get(node_id)
        return node is not None and node.kind == NodeKind.SLOT

    def edge_weight(self, node_a: str, node_b: str) -> Optional[float]:
        weights = [n.weight for n in self.neighbors(node_a) if n.node == node_b]
        return min(weights) if weights else None

    def path_weight(self, path: Iterable[str]) -> float:
        path = list(path)
        total = 0.0
        for node_a, node_b in zip(path, path[1:]):
            weight = self.edge_weight(node_a, node_b)
            if weight is None:
                raise ValueError(f"No edge between {node_a} and {node_b}")
            total += weight
        return total

    def export(self) -> LayoutExport:
        return LayoutExport(
            nodes=dict(self.nodes),
            adjacency={node_id: list(n) for node_id, n in self.adjacency.items()},
        )
