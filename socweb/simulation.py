"""
Monte Carlo scheduler
=====================
One ``update()`` is one MC timestep:

  per site, in arena order
    1. rate accounting: exitus from last timestep, merge ``new`` into
       ``old``, snapshot ``old_ini``, reset ``new`` / ``newborn``
    2. trials: while trials < floor(k * ln(sumOld)), sumOld re-read after
       every trial
  3. migration when t > 0 and t % migration_interval == 0
  4. reports: totals every show_each, time series every save_each (t > 0),
     coexistence networks every network_interval (t > 0)
  t == total_timesteps - 1 also dumps the SOC averages, taken after the
  trial phase and before migration.
"""

import logging
import math
import time

from .config import Config
from .events import EventEngine
from .migration import migrate
from .model import EcoState
from .pajek import read_food_web, read_neighborhood
from .reporting import Reporter
from .stream import RandomStream

logger = logging.getLogger(__name__)


def trial_budget(sum_old, per_log=10.0):
    if sum_old <= 0:
        return 0
    return int(math.floor(per_log * math.log(sum_old)))


class Simulation:
    def __init__(self, cfg, species, sites, realization=0, stream=None, reporter=None,
                 seed_individuals=True):
        self.cfg = cfg
        self.realization = realization
        if stream is None:
            stream = RandomStream(cfg.random_seed + realization)
        self.state = EcoState(cfg, species, sites, stream)
        self.engine = EventEngine(self.state)
        self.reporter = reporter
        if seed_individuals:
            self.state.seed_individuals()

        self.timestep = 0
        self.sample_times = []
        self.stats_history = []
        self.migration_history = []
        self.soc_dump = None
        self.last_network_stats = None

    @classmethod
    def from_files(cls, cfg, realization=0, reporter=None):
        species = read_food_web(cfg.food_web_file)
        sites = read_neighborhood(cfg.neighborhood_file, len(species))
        return cls(cfg, species, sites, realization=realization, reporter=reporter)

    @property
    def done(self):
        return self.timestep >= self.cfg.total_timesteps

    # ── Phases ──

    def _site_phase(self, st):
        site = self.state.sites[st]
        site.begin_timestep()
        site.reset_accumulators()
        per_log = self.cfg.trials_per_log_population
        trials = 0
        while trials < trial_budget(site.total_population, per_log):
            self.engine.trial(st)
            trials += 1
        return trials

    def _sample_totals(self):
        epoch = len(self.sample_times)
        totals = self.state.species_totals()
        for sp, total in zip(self.state.species, totals):
            sp.record(epoch, total)
        self.sample_times.append(self.timestep)

    def last_all_alive(self):
        """Last sampled time (plus one) with every species alive, else 0."""
        last = 0
        for epoch, t in enumerate(self.sample_times):
            if all(sp.alive[epoch] for sp in self.state.species):
                last = t + 1
        return last

    def update(self):
        cfg = self.cfg
        t = self.timestep
        self.state.timestep = t
        births, deaths, kills = (self.engine.total_births, self.engine.total_natural_deaths,
                                 self.engine.total_kills)

        trials = 0
        for st in range(self.state.n_sites):
            trials += self._site_phase(st)

        if t == cfg.total_timesteps - 1:
            self.soc_dump = [site.soc_averages() for site in self.state.sites]

        migrants = 0
        if t > 0 and t % cfg.migration_interval == 0:
            report = migrate(self.state, self.engine)
            migrants = sum(report.realized)
            self.migration_history.append((t, report))
            if self.reporter is not None:
                self.reporter.write_migration(t, report, self.state.sites)

        self._record_stats(trials, self.engine.total_births - births,
                           self.engine.total_natural_deaths - deaths,
                           self.engine.total_kills - kills, migrants)

        if t % cfg.show_each == 0:
            self._sample_totals()
            if self.reporter is not None:
                self.reporter.write_populations(t, self.state.population_matrix())
                self.reporter.save_snapshot(t, self.state, self.stats_history[-1])
        if t > 0 and t % cfg.save_each == 0 and self.reporter is not None:
            self.reporter.write_time_series(self.sample_times, self.state.species)
        if t > 0 and t % cfg.network_interval == 0 and self.reporter is not None:
            self.last_network_stats = self.reporter.write_networks(
                t, self.state.population_matrix(), self.state.species)
        if t == cfg.total_timesteps - 1 and self.reporter is not None:
            self.reporter.write_soc_parameters(self.soc_dump, self.state.sites)

        self.timestep += 1

    # ── Stats ──

    def _record_stats(self, trials, births, deaths, kills, migrants):
        matrix = self.state.population_matrix()
        totals = matrix.sum(axis=0)
        self.stats_history.append({
            "t": self.timestep,
            "pop": int(matrix.sum()),
            "species_alive": int((totals > 0).sum()),
            "sites_occupied": int((matrix.sum(axis=1) > 0).sum()),
            "trials": trials,
            "births": births,
            "natural_deaths": deaths,
            "kills": kills,
            "migrants": migrants,
        })


# ─────────────────────────────────────────────────────
# Run
# ─────────────────────────────────────────────────────

def run_simulation(cfg=None, realization=0, quiet=False, sim=None):
    cfg = cfg or Config()
    cfg.validate()
    reporter = Reporter(cfg.output_dir, cfg.random_seed, realization)
    if sim is None:
        sim = Simulation.from_files(cfg, realization=realization, reporter=reporter)
    else:
        sim.reporter = reporter
    state = sim.state
    if realization == 0:
        reporter.write_food_web(state.species)

    if not quiet:
        print(f"SOC food web — realization {realization}  |  seed {cfg.random_seed + realization}")
        print(f"Species: {state.n_species}  |  Sites: {state.n_sites}  |  "
              f"Steps: {cfg.total_timesteps}  |  tm={cfg.migration_interval}  tcn={cfg.network_interval}")
        print(f"{'─' * 100}")
    logger.info("realization %d started", realization)

    start = time.time()
    while not sim.done:
        sim.update()
        s = sim.stats_history[-1]
        if not quiet and s["t"] % cfg.show_each == 0:
            el = time.time() - start
            print(f"  t={s['t']:6d}  |  pop={s['pop']:7d}  |  species={s['species_alive']:3d}/{state.n_species}"
                  f"  |  sites={s['sites_occupied']:4d}/{state.n_sites}  |  births={s['births']:5d}"
                  f"  deaths={s['natural_deaths']:5d}  kills={s['kills']:5d}  |  mig={s['migrants']:5d}"
                  f"  |  {el:.1f}s")

    last = sim.last_all_alive()
    reporter.write_time_series(sim.sample_times, state.species)
    reporter.write_stability(last)
    reporter.write_summary(cfg, sim.stats_history, last)

    if not quiet:
        el = time.time() - start
        print(f"{'─' * 100}")
        print(f"Done in {el:.1f}s  |  Pop: {int(state.population_matrix().sum())}  |  "
              f"Last step with every species alive: {last}")
    logger.info("realization %d finished, last all-alive step %d", realization, last)
    return sim


def run_realizations(cfg=None, quiet=False):
    cfg = cfg or Config()
    cfg.validate()
    return [run_simulation(cfg, realization=r, quiet=quiet) for r in range(cfg.realizations)]
