"""Tests for per-individual trials."""

from socweb import rates
from socweb.config import Config
from socweb.events import EventEngine
from conftest import ONE_SITE, PREDATOR_PREY, THREE_LEVEL, ScriptedStream, build_state

GRASS, RABBIT = 0, 1


def scripted(populations, fractions, **cfg):
    stream = ScriptedStream(fractions)
    state = build_state(PREDATOR_PREY, ONE_SITE, populations, Config(**cfg), stream)
    return state, EventEngine(state), stream


class TestNaturalDeath:
    def test_death_skips_feeding(self):
        state, engine, stream = scripted([[6, 2]], [0.0])
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        assert result.natural_death
        assert state.sites[0].old.tolist() == [6, 1]
        assert stream.used == 1

    def test_survivor_goes_on_to_feed(self):
        state, engine, stream = scripted([[12, 2]], [0.9, 0.1, 0.0, 0.0], feeding_attempts=1)
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        assert not result.natural_death
        assert result.kills == 1


class TestPredation:
    def test_kill_then_birth(self):
        state, engine, _ = scripted([[12, 2]], [0.9, 0.1, 0.0, 0.0], feeding_attempts=1)
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        site = state.sites[0]
        assert result.births == 1
        assert site.old.tolist() == [11, 2]
        # newborns wait in ``new`` until the next timestep
        assert site.new[RABBIT] == 1
        assert site.newborn[RABBIT] == 1

    def test_at_most_one_birth_per_trial(self):
        fractions = [0.9] + [0.1, 0.0, 0.0] * 5
        state, engine, stream = scripted([[12, 2]], fractions, feeding_attempts=5)
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        assert result.kills == 5
        assert result.births == 1
        assert state.sites[0].old[GRASS] == 7
        assert stream.used == len(fractions)

    def test_no_birth_at_capacity(self):
        # After the kill: 5 grass, 2 rabbits, capacity floor(5/2) = 2.
        state, engine, _ = scripted([[6, 2]], [0.9, 0.1, 0.0, 0.0], feeding_attempts=1)
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        assert result.kills == 1
        assert result.births == 0
        assert state.sites[0].newborn[RABBIT] == 0

    def test_prey_survives(self):
        stream = ScriptedStream([0.9, 0.1, 0.99])
        state = build_state(THREE_LEVEL, ONE_SITE, [[10, 4, 2]], Config(feeding_attempts=1), stream)
        engine = EventEngine(state)
        rates.refresh(state, 2, 0)
        result = engine.individual_trial(0, 2)
        assert result.kills == 0
        assert state.sites[0].old.tolist() == [10, 4, 2]
        assert stream.used == 3

    def test_no_prey_no_birth(self):
        stream = ScriptedStream([0.9])
        state = build_state(THREE_LEVEL, ONE_SITE, [[0, 3, 1]], Config(), stream)
        engine = EventEngine(state)
        rates.refresh(state, RABBIT, 0)
        result = engine.individual_trial(0, RABBIT)
        assert result == (RABBIT, False, 0, 0)
        assert state.sites[0].new[RABBIT] == 0
        assert stream.used == 1


class TestBasalBirth:
    def test_birth_below_capacity(self):
        state, engine, _ = scripted([[6, 2]], [0.5, 0.1])
        rates.refresh(state, GRASS, 0)
        result = engine.individual_trial(0, GRASS)
        assert result.births == 1
        assert state.sites[0].new[GRASS] == 1

    def test_no_draw_at_capacity(self):
        state, engine, stream = scripted([[10, 2]], [0.5])
        rates.refresh(state, GRASS, 0)
        result = engine.individual_trial(0, GRASS)
        assert result.births == 0
        assert stream.used == 1

    def test_failed_draw(self):
        state, engine, _ = scripted([[6, 2]], [0.5, 0.99])
        rates.refresh(state, GRASS, 0)
        assert engine.individual_trial(0, GRASS).births == 0


class TestSampling:
    def test_empty_site_is_skipped(self):
        state, engine, stream = scripted([[0, 0]], [])
        assert engine.trial(0) is None
        assert stream.used == 0

    def test_only_living_species_are_picked(self):
        state, engine, _ = scripted([[0, 4]], [0.0, 0.0])
        result = engine.trial(0)
        assert result.species == RABBIT

    def test_prey_choice_weighted_by_abundance(self):
        state, engine, _ = scripted([[6, 2]], [0.99])
        assert engine.pick_prey(0, RABBIT) == GRASS

    def test_trial_feeds_accumulators(self):
        state, engine, _ = scripted([[6, 2]], [0.0, 0.5, 0.9])
        result = engine.trial(0)
        assert result.species == GRASS
        site = state.sites[0]
        assert site.soc_counts[result.species] == 1
        assert site.soc_counts.sum() == 1
