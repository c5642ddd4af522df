"""
Species, sites and the simulation state that owns them
======================================================
Species and sites live in arenas (plain lists). Everything downstream of
the loaders refers to them by arena index; declared ids are translated
once, through ``EcoState.species_index`` / ``EcoState.site_index``.

Each site carries one population vector per counter over the full species
set, so the joint state is the |sites| x |species| matrix returned by
``EcoState.population_matrix``.
"""

import numpy as np

from .stream import RandomStream

# Columns of Site.soc_sums
SOC_BIRTH = 0
SOC_DEATH = 1
SOC_MIGRATION = 2
SOC_NATURAL_DEATH = 3
SOC_COLUMNS = ("birth", "death", "migration", "natural_death")


# ─────────────────────────────────────────────────────
# Species
# ─────────────────────────────────────────────────────

class Species:
    """Static identity plus the vital rates of the most recent refresh."""

    def __init__(self, sid, name, birth_prob, death_prob, natural_death_prob,
                 migration_prob, initial_count):
        self.id = sid
        self.name = name
        self.initial_count = initial_count
        # Declared rates, kept for the food-web export.
        self.declared = (birth_prob, death_prob, natural_death_prob, migration_prob)

        self.birth_prob = birth_prob
        self.death_prob = death_prob
        self.natural_death_prob = natural_death_prob
        self.migration_prob = migration_prob
        self.carrying_capacity = 0

        self.prey = []        # arena indices, declaration order
        self.predators = []

        # Landscape totals sampled every show_each steps, by epoch.
        self.trajectory = []
        self.alive = []

    def __repr__(self):
        return f"Species({self.id}, {self.name!r}, prey={self.prey}, predators={self.predators})"

    @property
    def is_predator(self):
        return len(self.prey) > 0

    @property
    def is_basal(self):
        return not self.prey

    def set_rates(self, birth_prob, death_prob, natural_death_prob, migration_prob,
                  carrying_capacity):
        self.birth_prob = birth_prob
        self.death_prob = death_prob
        self.natural_death_prob = natural_death_prob
        self.migration_prob = migration_prob
        self.carrying_capacity = carrying_capacity

    def record(self, epoch, count):
        while len(self.trajectory) <= epoch:
            self.trajectory.append(0)
            self.alive.append(False)
        self.trajectory[epoch] = int(count)
        self.alive[epoch] = count > 0


# ─────────────────────────────────────────────────────
# Site
# ─────────────────────────────────────────────────────

class Site:
    """One habitat patch.

    Counters, per species:
      old      individuals available to trials this timestep
      new      arrivals (births and migrants) merged at the next timestep
      newborn  births this timestep, for reproductive exitus
      old_ini  ``old`` right after the merge, i.e. at timestep start
    """

    def __init__(self, sid, name, carrying_capacity, n_species):
        self.id = sid
        self.name = name
        self.carrying_capacity = carrying_capacity
        self.neighbors = []   # (site arena index, weight), declaration order

        self.old = np.zeros(n_species, dtype=np.int64)
        self.new = np.zeros(n_species, dtype=np.int64)
        self.newborn = np.zeros(n_species, dtype=np.int64)
        self.old_ini = np.zeros(n_species, dtype=np.int64)
        self.exitus = np.zeros(n_species, dtype=np.float64)
        self.preference = np.zeros(n_species, dtype=np.int64)
        self.species_order = list(range(n_species))

        self.soc_sums = np.zeros((n_species, len(SOC_COLUMNS)), dtype=np.float64)
        self.soc_counts = np.zeros(n_species, dtype=np.int64)

    def __repr__(self):
        return f"Site({self.id}, {self.name!r}, cc={self.carrying_capacity})"

    @property
    def n_species(self):
        return len(self.old)

    @property
    def total_population(self):
        return int(self.old.sum())

    def density(self, k):
        total = self.total_population
        if total == 0:
            return 0.0
        return int(self.old[k]) / total

    def densities(self):
        total = self.total_population
        if total == 0:
            return np.zeros(self.n_species)
        return self.old / total

    def present_species(self):
        """Species with living individuals, in the site's shuffled order."""
        return [k for k in self.species_order if self.old[k] > 0]

    def add_neighbor(self, index, weight):
        self.neighbors.append((index, weight))

    # ── Counter updates ──

    def die(self, k):
        if self.old[k] > 0:
            self.old[k] -= 1

    def give_birth(self, k):
        self.new[k] += 1
        self.newborn[k] += 1

    def begin_timestep(self):
        """Close the previous timestep: exitus, merge arrivals, snapshot."""
        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = self.newborn / self.old_ini
        self.exitus = np.where(self.old_ini > 0, ratio, 1.0)
        self.old += self.new
        self.old_ini = self.old.copy()
        self.new[:] = 0
        self.newborn[:] = 0

    # ── SOC accumulators ──

    def reset_accumulators(self):
        self.soc_sums[:] = 0.0
        self.soc_counts[:] = 0

    def accumulate(self, k, birth_prob, death_prob, migration_prob, natural_death_prob):
        self.soc_sums[k] += (birth_prob, death_prob, migration_prob, natural_death_prob)
        self.soc_counts[k] += 1

    def soc_averages(self):
        """Per species: mean refreshed rates since the last reset, plus ``old``."""
        counts = self.soc_counts[:, None]
        means = np.where(counts > 0, self.soc_sums / np.maximum(counts, 1), 0.0)
        return [
            dict(zip(SOC_COLUMNS, (float(v) for v in means[k])),
                 chosen=int(self.soc_counts[k]), population=int(self.old[k]))
            for k in range(self.n_species)
        ]


# ─────────────────────────────────────────────────────
# Simulation state
# ─────────────────────────────────────────────────────

class EcoState:
    """Owner of the species and site arenas, the config and the stream."""

    def __init__(self, cfg, species, sites, stream=None):
        self.cfg = cfg
        self.species = list(species)
        self.sites = list(sites)
        self.stream = stream if stream is not None else RandomStream(cfg.random_seed)
        self.timestep = 0
        self._species_by_id = {sp.id: i for i, sp in enumerate(self.species)}
        self._sites_by_id = {st.id: i for i, st in enumerate(self.sites)}
        for st in self.sites:
            assert st.n_species == len(self.species), "site vectors must cover every species"
            for target, _ in st.neighbors:
                assert 0 <= target < len(self.sites), f"neighbor index {target} out of range"
        for sp in self.species:
            for k in sp.prey + sp.predators:
                assert 0 <= k < len(self.species), f"species index {k} out of range"

    @property
    def n_species(self):
        return len(self.species)

    @property
    def n_sites(self):
        return len(self.sites)

    def species_index(self, sid):
        return self._species_by_id[sid]

    def site_index(self, sid):
        return self._sites_by_id[sid]

    def seed_individuals(self):
        """Initial ``old`` = floor(initial_count * u), one draw per (site, species)."""
        for site in self.sites:
            for k, sp in enumerate(self.species):
                n = int(np.floor(sp.initial_count * self.stream.fraction()))
                site.old[k] = n
                site.old_ini[k] = n
                site.new[k] = 0
                site.newborn[k] = 0

    def population_matrix(self):
        return np.vstack([st.old for st in self.sites]) if self.sites else \
            np.zeros((0, self.n_species), dtype=np.int64)

    def species_totals(self):
        return self.population_matrix().sum(axis=0)

    def individuals_of(self, st, group):
        """Individuals at site ``st`` belonging to the species in ``group``."""
        old = self.sites[st].old
        return int(sum(old[k] for k in group))
