"""
Report writers
==============
Everything a run leaves on disk. File names carry the seed and the
realization index so realizations can share one output directory.
"""

import json
import os

import numpy as np

from .coexistence import NETWORKS, coexistence_statistics, network_edges
from .pajek import write_food_web, write_network


class Reporter:
    def __init__(self, output_dir, seed, realization=0):
        self.output_dir = output_dir
        self.seed = seed
        self.realization = realization
        os.makedirs(output_dir, exist_ok=True)

    def path(self, stem, ext="dat"):
        return os.path.join(self.output_dir,
                            f"{stem}_seed_{self.seed}_real_{self.realization}.{ext}")

    # ── Periodic outputs ──

    def write_populations(self, timestep, matrix):
        """Append one row of per-site counts to each species' file."""
        matrix = np.asarray(matrix)
        for k in range(matrix.shape[1]):
            with open(self.path(f"populations_sp{k + 1:03d}"), "a") as f:
                f.write(f"{timestep} " + " ".join(str(int(v)) for v in matrix[:, k]) + "\n")

    def write_time_series(self, times, species):
        """Rewrite the landscape totals of every species per sampled time."""
        with open(self.path("time_series"), "w") as f:
            for epoch, t in enumerate(times):
                row = [sp.trajectory[epoch] if epoch < len(sp.trajectory) else 0
                       for sp in species]
                f.write(f"{t} " + " ".join(str(v) for v in row) + "\n")

    def write_migration(self, timestep, report, sites):
        with open(self.path("realized_migration"), "a") as f:
            cells = " ".join(f"{sites[st].id}:{n}" for st, n in zip(report.site_order, report.realized))
            f.write(f"{timestep} {cells}\n")

    def write_networks(self, timestep, matrix, species):
        stats = coexistence_statistics(matrix)
        labels = [sp.name for sp in species]
        stem = f"coexistence_{timestep + 1:05d}_seed_{self.seed}_real_{self.realization}"
        for number, (name, directed) in enumerate(NETWORKS, start=1):
            path = os.path.join(self.output_dir, f"{stem}_{number}_{name}.net")
            write_network(path, labels, network_edges(stats, name, directed), directed=directed)
        self.write_p_values(os.path.join(self.output_dir, f"{stem}_p_values.dat"), stats, species)
        return stats

    def write_p_values(self, path, stats, species):
        """``id_i id_j overlap p`` for every species pair, i < j."""
        overlap, p_value = stats["overlap"], stats["p_value"]
        with open(path, "w") as f:
            for i in range(len(species) - 1):
                for j in range(i + 1, len(species)):
                    f.write(f"{species[i].id} {species[j].id} {int(overlap[i, j])} "
                            f"{p_value[i, j]:.6g}\n")

    # ── End-of-run outputs ──

    def write_soc_parameters(self, averages, sites):
        """One file per species: ``{bp,dp,mp,ndp,n}`` per site, one line per dump."""
        n_species = len(averages[0]) if averages else 0
        for k in range(n_species):
            with open(self.path(f"soc_parameters_sp{k + 1:03d}"), "a") as f:
                cells = []
                for st, per_site in enumerate(averages):
                    a = per_site[k]
                    cells.append(f"{sites[st].id}:{{{a['birth']:.6g},{a['death']:.6g},"
                                 f"{a['migration']:.6g},{a['natural_death']:.6g},{a['population']}}}")
                f.write(" ".join(cells) + "\n")

    def write_stability(self, last_all_alive):
        with open(os.path.join(self.output_dir, f"stability_seed_{self.seed}.dat"), "a") as f:
            f.write(f"{self.realization} {last_all_alive}\n")

    def write_food_web(self, species):
        write_food_web(os.path.join(self.output_dir, f"food_web_seed_{self.seed}.net"), species)

    def save_snapshot(self, timestep, state, stats):
        with open(self.path(f"snapshot_{timestep:06d}", "json"), "w") as f:
            json.dump({
                "timestep": timestep,
                "species": [sp.name for sp in state.species],
                "sites": [st.name for st in state.sites],
                "population": state.population_matrix().tolist(),
                "stats": stats,
            }, f)

    def write_summary(self, cfg, stats_history, last_all_alive):
        with open(self.path("run_summary", "json"), "w") as f:
            json.dump({"config": cfg.as_dict(),
                       "last_all_alive": last_all_alive,
                       "stats_history": stats_history}, f, indent=2)
