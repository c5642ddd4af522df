"""
Event engine
============
Per-individual stochastic trials within one site. Draw order per trial:

  1. species choice (uniform among species present, in the site's order)
  2. u1: natural death
  3. predator: per feeding attempt, prey choice weighted by prey ``old``,
     then u2 (prey death) and, only after a kill, u3 (predator birth)
     basal: u4 (birth), only while below carrying capacity

Births land in ``new`` / ``newborn``; deaths leave ``old`` immediately.
"""

import logging
from collections import namedtuple

from . import rates

logger = logging.getLogger(__name__)

TrialResult = namedtuple("TrialResult", ["species", "natural_death", "kills", "births"])


class EventEngine:
    def __init__(self, state):
        self.state = state
        self.cfg = state.cfg
        self.stream = state.stream
        self.total_births = 0
        self.total_natural_deaths = 0
        self.total_kills = 0

    # ── Sampling ──

    def pick_species(self, st):
        """Uniform choice among species alive at the site, or None."""
        present = self.state.sites[st].present_species()
        if not present:
            return None
        return present[self.stream.index(len(present))]

    def pick_prey(self, st, sp):
        """Prey of ``sp`` alive at the site, chosen by abundance, or None."""
        site = self.state.sites[st]
        candidates = [p for p in self.state.species[sp].prey if site.old[p] > 0]
        if not candidates:
            return None
        i = self.stream.weighted_index([int(site.old[p]) for p in candidates])
        return None if i is None else candidates[i]

    # ── Trials ──

    def trial(self, st):
        """One sampled individual at site ``st``; None when the site is empty."""
        sp = self.pick_species(st)
        if sp is None:
            return None
        rates.refresh(self.state, sp, st)
        result = self.individual_trial(st, sp)
        species = self.state.species[sp]
        self.state.sites[st].accumulate(
            sp, species.birth_prob, species.death_prob,
            species.migration_prob, species.natural_death_prob)
        return result

    def individual_trial(self, st, sp):
        """Apply one trial outcome; rates of ``sp`` must be fresh."""
        site = self.state.sites[st]
        species = self.state.species[sp]

        if self.stream.fraction() < species.natural_death_prob:
            site.die(sp)
            self.total_natural_deaths += 1
            return TrialResult(sp, True, 0, 0)

        if species.is_predator:
            kills, births = self.feed(st, sp, self.cfg.feeding_attempts)
        else:
            kills, births = 0, self.basal_birth(st, sp)
        return TrialResult(sp, False, kills, births)

    def feed(self, st, sp, attempts):
        """Feeding attempts of one predator individual.

        At most one birth per call; each attempt sees the counts left by
        the previous one.
        """
        site = self.state.sites[st]
        predator = self.state.species[sp]
        kills = 0
        born = False
        for _ in range(attempts):
            prey = self.pick_prey(st, sp)
            if prey is None:
                break
            rates.refresh(self.state, prey, st)
            if self.stream.fraction() >= self.state.species[prey].death_prob:
                continue
            site.die(prey)
            kills += 1

            u = self.stream.fraction()
            capacity = rates.carrying_capacity(self.state, sp, st)
            if u < predator.birth_prob and site.old[sp] < capacity and not born:
                site.give_birth(sp)
                born = True
                logger.debug("t=%d site=%d: species %d born after eating %d",
                             self.state.timestep, st, sp, prey)

        self.total_kills += kills
        self.total_births += int(born)
        return kills, int(born)

    def basal_birth(self, st, sp):
        site = self.state.sites[st]
        species = self.state.species[sp]
        if site.old[sp] >= species.carrying_capacity:
            return 0
        if self.stream.fraction() < species.birth_prob:
            site.give_birth(sp)
            self.total_births += 1
            return 1
        return 0
