"""
Coexistence statistics
======================
Pairwise species co-occurrence over the landscape, computed from the
|sites| x |species| population matrix. All statistics are species x species
arrays; the diagonal is meaningless and ignored by the network export.

  overlap           sites where both species live
  weighted_sum      overlap * (total_i + total_j)
  weighted_product  overlap * total_i * total_j
  mean_weight       per-site share of the pair among local individuals,
                    averaged over all sites (0 where they do not coexist)
  xor_fraction      individuals living where the partner is absent,
                    over total_i + total_j
  asymmetric        overlap / sites occupied by i  (row species)
  expected          null model: fraction of sites occupied by j
  significant       asymmetric where it exceeds ``expected``
  individuals       individuals of i at sites shared with j,
                    over total_i + total_j
  p_value           P(overlap >= observed) under random placement
                    (hypergeometric)
"""

import numpy as np
from scipy.stats import hypergeom

NETWORKS = (
    ("overlap", False),
    ("weighted_sum", False),
    ("weighted_product", False),
    ("mean_weight", False),
    ("xor_fraction", False),
    ("asymmetric", True),
    ("significant", True),
    ("individuals", True),
)


def _ratio(num, den):
    num = np.asarray(num, dtype=np.float64)
    den = np.broadcast_to(np.asarray(den, dtype=np.float64), num.shape)
    out = np.zeros_like(num)
    np.divide(num, den, out=out, where=den > 0)
    return out


def coexistence_statistics(matrix):
    counts = np.asarray(matrix, dtype=np.int64)
    n_sites, n_species = counts.shape
    present = (counts > 0).astype(np.int64)
    absent = 1 - present

    totals = counts.sum(axis=0)
    occupied = present.sum(axis=0)
    pair_totals = totals[:, None] + totals[None, :]

    overlap = present.T @ present
    share = _ratio(counts, counts.sum(axis=1)[:, None])
    mean_weight = (share.T @ present + present.T @ share) / max(n_sites, 1)
    xor = counts.T @ absent + absent.T @ counts

    asymmetric = _ratio(overlap, occupied[:, None])
    expected = np.broadcast_to(occupied[None, :] / max(n_sites, 1),
                               (n_species, n_species)).copy()
    significant = np.where((asymmetric > 0) & (asymmetric > expected), asymmetric, 0.0)

    if n_sites > 0:
        p_value = hypergeom.sf(overlap - 1, n_sites, occupied[:, None], occupied[None, :])
    else:
        p_value = np.ones((n_species, n_species))

    return {
        "totals": totals,
        "occupied": occupied,
        "overlap": overlap,
        "weighted_sum": overlap * pair_totals,
        "weighted_product": overlap * np.outer(totals, totals),
        "mean_weight": mean_weight,
        "xor_fraction": _ratio(xor, pair_totals),
        "asymmetric": asymmetric,
        "expected": expected,
        "significant": significant,
        "individuals": _ratio(counts.T @ present, pair_totals),
        "p_value": np.asarray(p_value, dtype=np.float64),
    }


def network_edges(stats, name, directed):
    """Non-zero entries of one statistic as (i, j, value) edges.

    Undirected networks list each pair once (i < j); directed ones list
    i -> j and j -> i right after each other.
    """
    values = stats[name]
    n = values.shape[0]
    edges = []
    for i in range(n - 1):
        for j in range(i + 1, n):
            if directed:
                for a, b in ((i, j), (j, i)):
                    if values[a, b]:
                        edges.append((a, b, float(values[a, b])))
            elif values[i, j]:
                edges.append((i, j, float(values[i, j])))
    return edges


def coexistence_networks(matrix):
    stats = coexistence_statistics(matrix)
    return {name: (directed, network_edges(stats, name, directed))
            for name, directed in NETWORKS}
