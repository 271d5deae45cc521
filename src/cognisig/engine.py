"""
Cognitive Kernel: main facade over the signature engine.

Owns a factorization cache, a signature encoder, a similarity graph and a
cluster engine. All state lives on the instance; several kernels can run
side by side, and a cache or graph can be injected to share it.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from cognisig.config import KernelConfig
from cognisig.encoding import ShapeEncoding, SignatureEncoder
from cognisig.energy import (
    GestaltField,
    resonance,
    signature_distance,
    similarity,
    similarity_matrix,
    synthesize_field,
)
from cognisig.factorization import FactorizationCache
from cognisig.memory import Cluster, ClusterEngine, SimilarityGraph
from cognisig.utils import compute_metrics

logger = logging.getLogger(__name__)


class CognitiveKernel:
    """
    Cognitive signature kernel.

    Turns tensor shapes into signatures, maintains the similarity graph of
    registered nodes, and derives clusters and gestalt fields from it.

    Attributes:
        config: Kernel configuration
        cache: Factorization cache
        encoder: Signature encoder (holds the grammar rules)
        graph: Similarity graph
        cluster_engine: Cluster computation
    """

    def __init__(self, config: Optional[KernelConfig] = None,
                 cache: Optional[FactorizationCache] = None,
                 graph: Optional[SimilarityGraph] = None):
        """
        Initialize the kernel.

        Args:
            config: Configuration (defaults to KernelConfig())
            cache: Optional cache to share; built from config if None
            graph: Optional graph to share; built from config if None

        Raises:
            AssertionError: If the graph's edge threshold is not below the
                configured cluster threshold
        """
        self.config = config if config is not None else KernelConfig()

        if cache is None:
            cache = FactorizationCache(
                capacity=self.config.cache_capacity,
                large_number_threshold=self.config.large_number_threshold,
                strategy=self.config.factorization_strategy,
                use_precomputed=self.config.use_precomputed,
                strict=self.config.strict,
            )
        if graph is None:
            graph = SimilarityGraph(
                edge_threshold=self.config.edge_threshold,
                resonance_factor=self.config.resonance_factor,
            )

        self.cache = cache
        self.graph = graph
        self.encoder = SignatureEncoder(cache, strict=self.config.strict)
        assert self.graph.edge_threshold < self.config.cluster_threshold, \
            "Cluster threshold must be strictly greater than the graph's edge threshold"
        self.cluster_engine = ClusterEngine(
            cluster_threshold=self.config.cluster_threshold,
            scorer=self.graph.scorer,
        )

        self._clusters: List[Cluster] = []
        self._clusters_version: Optional[int] = None

    # ------------------------------------------------------------------
    # Factorization
    # ------------------------------------------------------------------

    def factorize(self, n: int) -> List[int]:
        return self.cache.factorize(n)

    def batch_factorize(self, numbers: Iterable[int]) -> List[List[int]]:
        return self.cache.batch_factorize(numbers)

    def cache_stats(self) -> Dict:
        return self.cache.stats()

    def clear_cache(self):
        self.cache.clear()

    # ------------------------------------------------------------------
    # Encoding and similarity
    # ------------------------------------------------------------------

    def encode_shape(self, shape: Sequence[int], node_id: Any = None) -> Optional[ShapeEncoding]:
        return self.encoder.encode(shape, node_id)

    def add_grammar_rule(self, name: str, rule) -> bool:
        """
        Register a grammar rule; see SignatureEncoder.add_grammar_rule.

        Existing encodings keep the category they were built with.
        """
        return self.encoder.add_grammar_rule(name, rule)

    def similarity(self, a: Optional[ShapeEncoding], b: Optional[ShapeEncoding]) -> float:
        return similarity(a, b)

    def resonance(self, a: Optional[ShapeEncoding], b: Optional[ShapeEncoding]) -> float:
        return resonance(a, b, self.config.resonance_factor)

    def signature_distance(self, a: Optional[ShapeEncoding], b: Optional[ShapeEncoding]) -> float:
        return signature_distance(a, b)

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def upsert_node(self, node_id: Any, encoding: Optional[ShapeEncoding],
                    activity: Optional[float] = None) -> int:
        return self.graph.upsert_node(node_id, encoding, activity)

    def add_node(self, node_id: Any, encoding: Optional[ShapeEncoding],
                 activity: float = 1.0) -> int:
        return self.graph.add_node(node_id, encoding, activity)

    def register_shape(self, node_id: Any, shape: Sequence[int],
                       activity: Optional[float] = None) -> Optional[ShapeEncoding]:
        """
        Encode a shape and upsert it under node_id.

        Returns:
            The encoding, or None if the shape was invalid (nothing is registered)
        """
        encoding = self.encoder.encode(shape, node_id)
        if encoding is None:
            return None
        self.graph.upsert_node(node_id, encoding, activity)
        return encoding

    def remove_node(self, node_id: Any) -> bool:
        return self.graph.remove_node(node_id)

    def set_activity(self, node_id: Any, activity: float):
        self.graph.set_activity(node_id, activity)

    def get_clusters(self) -> List[Cluster]:
        """
        Clusters of the current graph.

        Recomputed wholesale whenever the graph changed since the last call.
        """
        snapshot = self.graph.snapshot()
        if snapshot.version != self._clusters_version:
            self._clusters = self.cluster_engine.compute(snapshot)
            self._clusters_version = snapshot.version
        return list(self._clusters)

    def find_similar(self, node_id: Any, threshold: float = 0.5) -> List[Tuple[Any, float]]:
        """
        Nodes whose signature lies within ``threshold`` edit distance.

        Args:
            node_id: Reference node
            threshold: Maximum normalized signature distance

        Returns:
            (node_id, 1 - distance) pairs, most similar first
        """
        snapshot = self.graph.snapshot()
        target = next((n for n in snapshot.nodes if n.node_id == node_id), None)
        if target is None or target.encoding is None:
            return []

        found = []
        for node in snapshot.nodes:
            if node.handle == target.handle or node.encoding is None:
                continue
            distance = signature_distance(target.encoding, node.encoding)
            if distance <= threshold:
                found.append((node.handle, node.node_id, 1.0 - distance))

        found.sort(key=lambda item: (-item[2], item[0]))
        return [(nid, score) for _, nid, score in found]

    def query_by_category(self, category: str) -> List[ShapeEncoding]:
        """Encodings of registered nodes with the given category label."""
        return [
            n.encoding for n in self.graph.snapshot().nodes
            if n.encoding is not None and n.encoding.category == category
        ]

    def similarity_matrix(self) -> Tuple[List[Any], np.ndarray]:
        """Node ids in insertion order and their pairwise similarity matrix."""
        snapshot = self.graph.snapshot()
        return snapshot.node_ids(), similarity_matrix([n.encoding for n in snapshot.nodes])

    def get_topology(self) -> Dict:
        """
        Nodes, edges and a topology hash.

        The hash joins the sorted node signatures with "|", so it changes
        whenever the set of registered shapes does.
        """
        snapshot = self.graph.snapshot()
        ids = {n.handle: n.node_id for n in snapshot.nodes}
        nodes = [
            {
                'id': n.node_id,
                'order': n.handle,
                'category': n.encoding.category if n.encoding else None,
                'signature': n.encoding.signature if n.encoding else None,
                'activity': n.activity,
            }
            for n in snapshot.nodes
        ]
        edges = [
            {
                'nodes': (ids[e.source], ids[e.target]),
                'strength': e.strength,
                'resonance': e.resonance,
                'order': e.order,
            }
            for e in snapshot.edges
        ]
        signatures = sorted(n['signature'] for n in nodes if n['signature'] is not None)
        return {
            'nodes': nodes,
            'edges': edges,
            'topology_hash': "|".join(signatures),
            'version': snapshot.version,
        }

    def compute_metrics(self) -> Dict[str, float]:
        return compute_metrics(self.graph.snapshot())

    def to_networkx(self) -> nx.Graph:
        return self.graph.to_networkx()

    # ------------------------------------------------------------------
    # Gestalt
    # ------------------------------------------------------------------

    def synthesize_field(self, activity_map: Optional[Mapping[Any, float]] = None) -> Optional[GestaltField]:
        """
        Synthesize the gestalt field.

        Args:
            activity_map: node id -> activity. Only registered ids in the map
                take part; without a map every node takes part with its stored
                activity.

        Returns:
            GestaltField, or None if no participating node has an encoding
        """
        snapshot = self.graph.snapshot()
        if activity_map is None:
            nodes = [(n.node_id, n.encoding, n.activity) for n in snapshot.nodes]
        else:
            nodes = [
                (n.node_id, n.encoding, activity_map[n.node_id])
                for n in snapshot.nodes if n.node_id in activity_map
            ]
            unknown = len(activity_map) - len(nodes)
            if unknown:
                logger.debug("Ignoring %d unregistered ids in activity map", unknown)

        return synthesize_field(nodes, self.config.dominant_signature_share)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def get_state(self) -> Dict:
        """
        Get current kernel state as plain data.

        Returns:
            dict: grammar rules, cache stats, topology, clusters and config
        """
        return {
            'grammar_rules': {
                name: {
                    'pattern': rule.pattern,
                    'cognitive_weight': rule.cognitive_weight,
                    'interaction_range': rule.interaction_range,
                    'has_classifier': rule.classifier is not None,
                }
                for name, rule in self.encoder.grammar_rules.items()
            },
            'cache': self.cache_stats(),
            'topology': self.get_topology(),
            'clusters': [
                {
                    'members': list(c.members),
                    'center': c.center,
                    'coherence': c.coherence,
                    'dominant_category': c.dominant_category,
                }
                for c in self.get_clusters()
            ],
            'config': self.config.to_dict(),
        }

    def __repr__(self):
        return (f"CognitiveKernel(nodes={len(self.graph)}, "
                f"edges={self.graph.num_edges}, "
                f"cache={len(self.cache)}/{self.cache.capacity})")
