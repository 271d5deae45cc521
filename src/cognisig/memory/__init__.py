"""Similarity graph and clustering."""

from cognisig.memory.clusters import Cluster, ClusterEngine
from cognisig.memory.graph import Edge, GraphNode, GraphSnapshot, SimilarityGraph

__all__ = ["Cluster", "ClusterEngine", "Edge", "GraphNode", "GraphSnapshot", "SimilarityGraph"]
