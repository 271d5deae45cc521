"""
Utility functions for the signature kernel.

Graph metrics and edge-strength statistics for monitoring and analysis.
"""

from typing import Dict

import numpy as np

from cognisig.memory.graph import GraphSnapshot


def compute_metrics(snapshot: GraphSnapshot) -> Dict[str, float]:
    """
    Compute graph metrics.

    Metrics include:
    - Density: edges present over possible edges
    - Mean degree: average number of neighbours
    - Mean strength: average edge strength
    - Mean connectivity: average sum of incident strengths

    Args:
        snapshot: Graph snapshot

    Returns:
        dict: Computed metrics
    """
    N = len(snapshot.nodes)
    E = len(snapshot.edges)

    max_edges = N * (N - 1) / 2
    density = E / max_edges if max_edges > 0 else 0.0

    strengths = np.array([e.strength for e in snapshot.edges], dtype=float)
    index = {node.handle: i for i, node in enumerate(snapshot.nodes)}
    degrees = np.zeros(N)
    connectivity = np.zeros(N)
    for edge in snapshot.edges:
        for handle in (edge.source, edge.target):
            degrees[index[handle]] += 1
            connectivity[index[handle]] += edge.strength

    return {
        'num_nodes': N,
        'num_edges': E,
        'density': density,
        'mean_degree': float(np.mean(degrees)) if N > 0 else 0.0,
        'mean_strength': float(np.mean(strengths)) if E > 0 else 0.0,
        'max_strength': float(np.max(strengths)) if E > 0 else 0.0,
        'mean_connectivity': float(np.mean(connectivity)) if N > 0 else 0.0,
    }


def analyze_edge_distribution(snapshot: GraphSnapshot, num_bins: int = 10) -> Dict:
    """
    Histogram and statistics of edge strengths over [0, 1].

    Args:
        snapshot: Graph snapshot
        num_bins: Number of histogram bins

    Returns:
        dict: hist, mean, std, max, num_edges
    """
    strengths = np.array([e.strength for e in snapshot.edges], dtype=float)

    if len(strengths) == 0:
        return {
            'hist': (np.zeros(num_bins, dtype=int), np.linspace(0.0, 1.0, num_bins + 1)),
            'mean': 0.0,
            'std': 0.0,
            'max': 0.0,
            'num_edges': 0
        }

    hist, bin_edges = np.histogram(strengths, bins=num_bins, range=(0.0, 1.0))

    return {
        'hist': (hist, bin_edges),
        'mean': float(np.mean(strengths)),
        'std': float(np.std(strengths)),
        'max': float(np.max(strengths)),
        'num_edges': len(strengths)
    }
