"""
SOC rate model
==============
Vital rates of a species at a site recomputed from current densities
(self-organized criticality, Rozenfeld & Albano 2004). Each function reads
only the ``old`` counters of one site and the trophic lists of the species;
none of them caches anything, so callers refresh right before every trial.

Terms shared by several rates, for species ``sp`` at site ``st``:
  density(k)      old[k] / total site population (0 on an empty site)
  pressure(prey)  individuals of every predator of ``prey`` / total
  dx              sum over prey of pressure(prey) * (1 - density(prey))
  dy              sum of predator densities
"""

import math


def predation_pressure(state, st, prey):
    """Fraction of the site's individuals that feed on ``prey``."""
    site = state.sites[st]
    total = site.total_population
    if total == 0:
        return 0.0
    return state.individuals_of(st, state.species[prey].predators) / total


def _resource_term(state, sp, st):
    site = state.sites[st]
    dx = 0.0
    for prey in state.species[sp].prey:
        dx += predation_pressure(state, st, prey) * (1.0 - site.density(prey))
    return dx


def _predator_density(state, sp, st):
    site = state.sites[st]
    return sum(site.density(pred) for pred in state.species[sp].predators)


def migration_probability(state, sp, st):
    """Lower mobility after recent reproductive success."""
    return 0.5 * (1.0 - float(state.sites[st].exitus[sp]))


def natural_death_probability(state, sp, st):
    species = state.species[sp]
    own = state.sites[st].density(sp)
    p = own * _resource_term(state, sp, st)
    # A predator-free species monopolizing the site dies for sure.
    if not species.predators and own == 1.0:
        p = 1.0
    return p


def death_probability(state, sp, st):
    """Death by predation: own density, surprise effect and resources."""
    species = state.species[sp]
    p = state.sites[st].density(sp)
    if species.predators:
        p *= 1.0 - _predator_density(state, sp, st)
    if species.prey:
        p *= _resource_term(state, sp, st)
    else:
        p = 1.0
    return p


def carrying_capacity(state, sp, st):
    site = state.sites[st]
    species = state.species[sp]
    if species.is_basal:
        return int(site.carrying_capacity)

    prey_density = 0.0
    pressure = 0.0
    for prey in species.prey:
        prey_density += site.density(prey)
        pressure += predation_pressure(state, st, prey)

    if pressure == 0.0:
        total = site.total_population
        if total == 0:
            return 0
        pressure = 1.0 / total
    return int(math.floor(prey_density / pressure))


def birth_probability(state, sp, st):
    species = state.species[sp]
    site = state.sites[st]
    p = 1.0 - site.density(sp)
    if species.prey:
        bx = 0.0
        for prey in species.prey:
            bx += site.density(prey) * (1.0 - predation_pressure(state, st, prey))
        p *= bx
    by = _predator_density(state, sp, st)
    if species.predators and by > 0:
        p *= 1.0 - by
    return p


def refresh(state, sp, st):
    """Recompute and store every rate of ``sp`` for site ``st``."""
    bp = birth_probability(state, sp, st)
    dp = death_probability(state, sp, st)
    mp = migration_probability(state, sp, st)
    ndp = natural_death_probability(state, sp, st)
    cc = carrying_capacity(state, sp, st)
    state.species[sp].set_rates(bp, dp, ndp, mp, cc)
    return bp, dp, ndp, mp, cc
