"""
Migration
=========
Density-driven dispersal between neighboring sites, run every
``migration_interval`` timesteps.

Draw order: one permutation of the sites, then one permutation of the
species of each site (in the permuted site order). Neighbors are visited in
declaration order. Migrants are added to the target's ``new`` counter and
subtracted from the source's ``old`` once per (site, species), so an
individual moves at most once per pass.
"""

import logging
from collections import namedtuple

from . import rates

logger = logging.getLogger(__name__)

MigrationReport = namedtuple("MigrationReport", ["site_order", "realized", "moves"])


def update_preferences(state, site_order):
    """Reshuffle each site's species order and store prey-minus-predator counts."""
    for st in site_order:
        site = state.sites[st]
        site.species_order = state.stream.permutation(range(state.n_species))
        for sp in site.species_order:
            species = state.species[sp]
            site.preference[sp] = (state.individuals_of(st, species.prey)
                                   - state.individuals_of(st, species.predators))


def vacancy(state, sp, target):
    return rates.carrying_capacity(state, sp, target) - int(state.sites[target].old[sp])


def migrate(state, engine=None):
    """Run one migration pass.

    Returns a MigrationReport: the site processing order, realized migrants
    per site in that order, and every (source, target, species, count) move.
    """
    cfg = state.cfg
    site_order = state.stream.permutation(range(state.n_sites))
    update_preferences(state, site_order)

    realized = []
    moves = []
    for st in site_order:
        site = state.sites[st]
        site_total = 0
        for sp in site.species_order:
            if site.old[sp] == 0:
                continue
            moved_out = 0
            for target, _weight in site.neighbors:
                remaining = int(site.old[sp]) - moved_out
                n_mig = int(remaining * site.density(sp) * cfg.migration_fraction)
                n_mig = min(n_mig, remaining)
                if n_mig <= 0:
                    continue
                room = vacancy(state, sp, target)
                if room <= 0:
                    if room == 0 and cfg.predation_on_arrival and engine is not None:
                        _predation_on_arrival(state, engine, sp, target, n_mig)
                    continue
                count = min(n_mig, room)
                state.sites[target].new[sp] += count
                moved_out += count
                moves.append((st, target, sp, count))
                logger.debug("t=%d: %d of species %d moved %d -> %d",
                             state.timestep, count, sp, st, target)
            site.old[sp] -= moved_out
            site_total += moved_out
        realized.append(site_total)

    return MigrationReport(site_order, realized, moves)


def _predation_on_arrival(state, engine, sp, target, n_mig):
    """Migrants hunt in a full target site instead of settling there.

    They stay transient: only their offspring land in the target's ``new``.
    """
    for _ in range(n_mig):
        rates.refresh(state, sp, target)
        engine.feed(target, sp, state.cfg.arrival_feeding_attempts)
