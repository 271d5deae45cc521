"""
Cluster Engine: connected components over strong similarity edges.

Only edges with strength above the cluster threshold link nodes; every
node lands in exactly one cluster, isolated nodes in a singleton. For
each component:

- center: member with the largest sum of incident edge strengths over the
  full edge set, ties to the earliest inserted member
- coherence: mean pairwise similarity of members, recomputed from their
  encodings (1.0 for a singleton)
- dominant_category: most frequent category, ties to the first seen
"""

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from cognisig.energy import similarity
from cognisig.memory.graph import GraphSnapshot, Scorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cluster:
    """
    A derived cluster view.

    Attributes:
        cluster_id: 1-based position in the cluster list
        members: Member ids in insertion order
        center: Representative member id
        coherence: Mean pairwise similarity of members
        dominant_category: Most frequent member category
    """
    cluster_id: int
    members: Tuple[Any, ...]
    center: Any
    coherence: float
    dominant_category: str

    @property
    def size(self) -> int:
        return len(self.members)

    def __contains__(self, node_id) -> bool:
        return node_id in self.members

    def __len__(self):
        return len(self.members)


class ClusterEngine:
    """Computes clusters from graph snapshots."""

    def __init__(self, cluster_threshold: float = 0.7, scorer: Scorer = similarity):
        """
        Args:
            cluster_threshold: Edge strength a link must exceed (default 0.7)
            scorer: Pairwise similarity used for coherence
        """
        self.cluster_threshold = cluster_threshold
        self.scorer = scorer

    def components(self, snapshot: GraphSnapshot) -> List[List[int]]:
        """
        Connected components of the restricted subgraph.

        Uses an explicit stack. Components are returned as sorted handle
        lists, ordered by their earliest member.
        """
        restricted: Dict[int, List[int]] = defaultdict(list)
        for edge in snapshot.edges:
            if edge.strength > self.cluster_threshold:
                restricted[edge.source].append(edge.target)
                restricted[edge.target].append(edge.source)

        visited = set()
        components = []
        for node in snapshot.nodes:
            if node.handle in visited:
                continue
            component = []
            stack = [node.handle]
            while stack:
                current = stack.pop()
                if current in visited:
                    continue
                visited.add(current)
                component.append(current)
                stack.extend(n for n in restricted[current] if n not in visited)
            components.append(sorted(component))

        return components

    def compute(self, snapshot: GraphSnapshot) -> List[Cluster]:
        """
        Clusters of a graph snapshot.

        Args:
            snapshot: Consistent copy of the graph

        Returns:
            List[Cluster]: Ordered by earliest member; empty for an empty graph
        """
        nodes = {n.handle: n for n in snapshot.nodes}

        connectivity: Dict[int, float] = defaultdict(float)
        for edge in snapshot.edges:
            connectivity[edge.source] += edge.strength
            connectivity[edge.target] += edge.strength

        clusters = []
        for cluster_id, handles in enumerate(self.components(snapshot), start=1):
            center = max(handles, key=lambda h: (connectivity[h], -h))
            encodings = [nodes[h].encoding for h in handles]
            clusters.append(Cluster(
                cluster_id=cluster_id,
                members=tuple(nodes[h].node_id for h in handles),
                center=nodes[center].node_id,
                coherence=self._coherence(encodings),
                dominant_category=self._dominant_category(encodings),
            ))

        logger.debug("Computed %d clusters at graph version %d", len(clusters), snapshot.version)
        return clusters

    def _coherence(self, encodings) -> float:
        if len(encodings) <= 1:
            return 1.0
        present = [e for e in encodings if e is not None]
        scores = [
            self.scorer(present[i], present[j])
            for i in range(len(present))
            for j in range(i + 1, len(present))
        ]
        return float(np.mean(scores)) if scores else 0.0

    @staticmethod
    def _dominant_category(encodings) -> str:
        counts = Counter(e.category for e in encodings if e is not None)
        if not counts:
            return "unknown"
        # max() keeps the first of equal counts, i.e. the first seen
        return max(counts.items(), key=lambda item: item[1])[0]
