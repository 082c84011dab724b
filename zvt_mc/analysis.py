import csv
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
from scipy.spatial import cKDTree

from .config_io import read_cnf_atoms


def find_clusters(positions, box, cutoff=1.5):
    """
    Sizes of clusters of atoms joined by pair distances below cutoff,
    minimum image in a cubic box. positions are in absolute units.
    """
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    if len(positions) == 0:
        return []
    # cKDTree periodic boxes need coordinates in [0, box)
    wrapped = np.mod(positions, box)
    wrapped[wrapped >= box] = 0.0
    tree = cKDTree(wrapped, boxsize=box)

    G = nx.Graph()
    G.add_nodes_from(range(len(positions)))
    G.add_edges_from(tree.query_pairs(cutoff))
    return sorted((len(c) for c in nx.connected_components(G)), reverse=True)


def analyze_configurations(filenames: Sequence[str], cutoff: float = 1.5) -> Dict[str, List[float]]:
    """Per-file particle count, density, largest cluster size and number of clusters."""
    summary = {"n": [], "density": [], "largest_cluster": [], "n_clusters": []}
    for filename in filenames:
        n, box, positions = read_cnf_atoms(filename)
        sizes = find_clusters(positions, box, cutoff=cutoff)
        summary["n"].append(n)
        summary["density"].append(n / box**3)
        summary["largest_cluster"].append(sizes[0] if sizes else 0)
        summary["n_clusters"].append(len(sizes))
    return summary


def plot_block_averages(blocks_csv: str, outfile: Optional[str] = None, names: Optional[Sequence[str]] = None):
    """Plot block means written by BlockAverager; saves to outfile or shows the figure."""
    with open(blocks_csv, newline="") as f:
        rows = list(csv.reader(f))
    header, data = rows[0], np.array(rows[1:], dtype=float).reshape(-1, len(rows[0]))
    columns = [c for c in header[1:] if names is None or c in names]

    fig, axes = plt.subplots(len(columns), 1, figsize=(8, 2.2 * len(columns)), sharex=True, squeeze=False)
    for ax, name in zip(axes[:, 0], columns):
        ax.plot(data[:, 0], data[:, header.index(name)], marker="o")
        ax.set_ylabel(name)
    axes[-1, 0].set_xlabel("Block")
    fig.tight_layout()
    if outfile is not None:
        fig.savefig(outfile)
        plt.close(fig)
    else:
        plt.show()
    return fig
