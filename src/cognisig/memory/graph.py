"""
Similarity Graph: incremental node/edge store over shape encodings.

Nodes live in an arena keyed by an integer handle handed out from a
monotonically increasing counter; the handle doubles as the node's
insertion order. Edges are keyed by the canonical (low handle, high handle)
pair, so a pair can never carry two edges.

Each upsert compares the new encoding against every registered node:
O(n) per insertion, O(n^2) over n insertions.
"""

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import networkx as nx

from cognisig.encoding import ShapeEncoding
from cognisig.energy import similarity
from cognisig.errors import NodeExistsError, UnknownNodeError

logger = logging.getLogger(__name__)

Scorer = Callable[[Optional[ShapeEncoding], Optional[ShapeEncoding]], float]


@dataclass
class GraphNode:
    """
    A registered node.

    Attributes:
        node_id: Caller-supplied identifier
        handle: Arena index, also the insertion order
        encoding: Most recent encoding (may be None)
        activity: Caller-maintained activity level
        updated_at: Timestamp of the last upsert
    """
    node_id: Any
    handle: int
    encoding: Optional[ShapeEncoding]
    activity: float = 1.0
    updated_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class Edge:
    """Undirected similarity edge between two handles (source < target)."""
    source: int
    target: int
    strength: float
    resonance: float
    order: int

    @property
    def key(self) -> Tuple[int, int]:
        return (self.source, self.target)


@dataclass(frozen=True)
class GraphSnapshot:
    """Consistent, detached copy of the graph at one version."""
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[Edge, ...]
    version: int

    def node_ids(self) -> List[Any]:
        return [n.node_id for n in self.nodes]


def canonical_key(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)


class SimilarityGraph:
    """
    Thread-safe similarity graph.

    All mutations and snapshots hold one lock, so readers never see a
    half-updated edge set.

    Attributes:
        edge_threshold (float): Similarity an edge must exceed
        resonance_factor (float): Same-category amplifier stored on edges
        version (int): Incremented on every mutation
    """

    def __init__(self, edge_threshold: float = 0.3, scorer: Scorer = similarity,
                 resonance_factor: float = 1.2):
        """
        Args:
            edge_threshold: Similarity an edge must exceed (default 0.3)
            scorer: Pairwise similarity function
            resonance_factor: Amplifier for same-category pairs
        """
        self.edge_threshold = edge_threshold
        self.scorer = scorer
        self.resonance_factor = resonance_factor

        self._nodes: Dict[int, GraphNode] = {}
        self._handles: Dict[Any, int] = {}
        self._edges: Dict[Tuple[int, int], Edge] = {}
        self._adjacency: Dict[int, Set[int]] = {}
        self._next_handle = 0
        self._next_edge_order = 0
        self._lock = threading.RLock()
        self.version = 0

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def upsert_node(self, node_id: Any, encoding: Optional[ShapeEncoding],
                    activity: Optional[float] = None) -> int:
        """
        Insert a node or replace its encoding, then recompute its edges.

        A replaced node keeps its handle (and so its insertion order) and
        its activity unless a new one is given.

        Args:
            node_id: Caller-supplied identifier
            encoding: Shape encoding (None registers the node without edges)
            activity: Activity level (default 1.0 for new nodes)

        Returns:
            int: The node's handle
        """
        with self._lock:
            handle = self._handles.get(node_id)
            previous_orders: Dict[Tuple[int, int], int] = {}

            if handle is None:
                handle = self._next_handle
                self._next_handle += 1
                self._handles[node_id] = handle
                self._adjacency[handle] = set()
                self._nodes[handle] = GraphNode(
                    node_id=node_id,
                    handle=handle,
                    encoding=encoding,
                    activity=1.0 if activity is None else float(activity),
                )
            else:
                node = self._nodes[handle]
                node.encoding = encoding
                node.updated_at = time.time()
                if activity is not None:
                    node.activity = float(activity)
                for edge in self._drop_edges(handle):
                    previous_orders[edge.key] = edge.order

            self._connect(handle, previous_orders)
            self.version += 1
            return handle

    def add_node(self, node_id: Any, encoding: Optional[ShapeEncoding],
                 activity: float = 1.0) -> int:
        """
        Insert a node under a fresh id.

        Raises:
            NodeExistsError: If node_id is already registered
        """
        with self._lock:
            if node_id in self._handles:
                raise NodeExistsError(node_id)
            return self.upsert_node(node_id, encoding, activity)

    def remove_node(self, node_id: Any) -> bool:
        """
        Remove a node and all its edges.

        Returns:
            bool: False if the node was not registered
        """
        with self._lock:
            handle = self._handles.pop(node_id, None)
            if handle is None:
                return False
            self._drop_edges(handle)
            del self._adjacency[handle]
            del self._nodes[handle]
            self.version += 1
            logger.debug("Removed node %r", node_id)
            return True

    def set_activity(self, node_id: Any, activity: float):
        """
        Update a node's activity level.

        Raises:
            UnknownNodeError: If node_id is not registered
        """
        with self._lock:
            handle = self._handles.get(node_id)
            if handle is None:
                raise UnknownNodeError(node_id)
            self._nodes[handle].activity = float(activity)
            self.version += 1

    def clear(self):
        """Remove every node and edge. Handles are not reused."""
        with self._lock:
            self._nodes = {}
            self._handles = {}
            self._edges = {}
            self._adjacency = {}
            self.version += 1

    def _connect(self, handle: int, previous_orders: Dict[Tuple[int, int], int]):
        encoding = self._nodes[handle].encoding
        if encoding is None:
            return

        for other_handle, other in self._nodes.items():
            if other_handle == handle or other.encoding is None:
                continue
            strength = self.scorer(encoding, other.encoding)
            if strength <= self.edge_threshold:
                continue

            key = canonical_key(handle, other_handle)
            order = previous_orders.get(key)
            if order is None:
                order = self._next_edge_order
                self._next_edge_order += 1

            res = strength
            if encoding.category == other.encoding.category:
                res *= self.resonance_factor

            self._edges[key] = Edge(key[0], key[1], strength, res, order)
            self._adjacency[handle].add(other_handle)
            self._adjacency[other_handle].add(handle)
            logger.debug("Edge %r <-> %r strength=%.4f",
                         self._nodes[handle].node_id, other.node_id, strength)

    def _drop_edges(self, handle: int) -> List[Edge]:
        dropped = []
        for other in self._adjacency[handle]:
            dropped.append(self._edges.pop(canonical_key(handle, other)))
            self._adjacency[other].discard(handle)
        self._adjacency[handle] = set()
        return dropped

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> GraphSnapshot:
        """Detached copy of nodes (insertion order) and edges (creation order)."""
        with self._lock:
            nodes = tuple(replace(n) for n in self._nodes.values())
            edges = tuple(sorted(self._edges.values(), key=lambda e: e.order))
            return GraphSnapshot(nodes=nodes, edges=edges, version=self.version)

    def get_node(self, node_id: Any) -> Optional[GraphNode]:
        with self._lock:
            handle = self._handles.get(node_id)
            return None if handle is None else replace(self._nodes[handle])

    def get_encoding(self, node_id: Any) -> Optional[ShapeEncoding]:
        node = self.get_node(node_id)
        return None if node is None else node.encoding

    def handle_of(self, node_id: Any) -> Optional[int]:
        with self._lock:
            return self._handles.get(node_id)

    def node_ids(self) -> List[Any]:
        """Registered ids in insertion order."""
        with self._lock:
            return [n.node_id for n in self._nodes.values()]

    def edge_list(self) -> List[Tuple[Any, Any, float]]:
        """(id_a, id_b, strength) in creation order, id_a inserted first."""
        snap = self.snapshot()
        ids = {n.handle: n.node_id for n in snap.nodes}
        return [(ids[e.source], ids[e.target], e.strength) for e in snap.edges]

    def edge_strength(self, a: Any, b: Any) -> Optional[float]:
        with self._lock:
            ha, hb = self._handles.get(a), self._handles.get(b)
            if ha is None or hb is None:
                return None
            edge = self._edges.get(canonical_key(ha, hb))
            return None if edge is None else edge.strength

    def neighbors(self, node_id: Any) -> List[Tuple[Any, float]]:
        """Adjacent ids with edge strength, strongest first."""
        with self._lock:
            handle = self._handles.get(node_id)
            if handle is None:
                return []
            result = [
                (self._nodes[other], self._edges[canonical_key(handle, other)].strength)
                for other in self._adjacency[handle]
            ]
        result.sort(key=lambda item: (-item[1], item[0].handle))
        return [(node.node_id, strength) for node, strength in result]

    def incident_strength(self, node_id: Any) -> float:
        return float(sum(s for _, s in self.neighbors(node_id)))

    @property
    def num_edges(self) -> int:
        with self._lock:
            return len(self._edges)

    def to_networkx(self) -> nx.Graph:
        """
        Export the current topology.

        Returns:
            networkx.Graph keyed by node id, with category, signature and
            activity on nodes and strength/resonance on edges
        """
        snap = self.snapshot()
        G = nx.Graph()
        ids = {}
        for node in snap.nodes:
            ids[node.handle] = node.node_id
            encoding = node.encoding
            G.add_node(
                node.node_id,
                category=encoding.category if encoding else None,
                signature=encoding.signature if encoding else None,
                activity=node.activity,
                order=node.handle,
            )
        for edge in snap.edges:
            G.add_edge(ids[edge.source], ids[edge.target],
                       weight=edge.strength, resonance=edge.resonance)
        return G

    def __contains__(self, node_id) -> bool:
        with self._lock:
            return node_id in self._handles

    def __len__(self):
        with self._lock:
            return len(self._nodes)

    def __repr__(self):
        return f"SimilarityGraph(nodes={len(self)}, edges={self.num_edges}, threshold={self.edge_threshold})"
