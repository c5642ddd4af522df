"""Tests for the Monte Carlo scheduler."""

import json

import pytest

from socweb.config import Config
from socweb.pajek import parse_food_web, parse_neighborhood
from socweb.simulation import Simulation, run_realizations, run_simulation, trial_budget
from conftest import ONE_SITE, PREDATOR_PREY, RING, THREE_LEVEL, TWO_SITES


def make_sim(food_web=THREE_LEVEL, landscape=RING, seed_individuals=True, **overrides):
    cfg = Config(**{"total_timesteps": 20, "migration_interval": 3, "show_each": 2,
                    "save_each": 5, "network_interval": 5, **overrides})
    species = parse_food_web(food_web.splitlines())
    sites = parse_neighborhood(landscape.splitlines(), len(species))
    return Simulation(cfg, species, sites, seed_individuals=seed_individuals)


def run_steps(sim, n):
    for _ in range(n):
        sim.update()


@pytest.mark.parametrize("sum_old, expected", [(0, 0), (1, 0), (5, 16), (100, 46)])
def test_trial_budget(sum_old, expected):
    assert trial_budget(sum_old) == expected


def test_determinism():
    a, b = make_sim(random_seed=9), make_sim(random_seed=9)
    for _ in range(20):
        a.update()
        b.update()
        assert (a.state.population_matrix() == b.state.population_matrix()).all()
        for sa, sb in zip(a.state.sites, b.state.sites):
            assert (sa.new == sb.new).all()
    assert a.stats_history == b.stats_history


def test_seeds_differ():
    a, b = make_sim(random_seed=1), make_sim(random_seed=2)
    assert not (a.state.population_matrix() == b.state.population_matrix()).all()


def test_populations_stay_non_negative():
    sim = make_sim(random_seed=4)
    while not sim.done:
        sim.update()
        assert (sim.state.population_matrix() >= 0).all()
    assert sim.timestep == 20


def test_migration_schedule():
    sim = make_sim()
    run_steps(sim, 20)
    assert [t for t, _ in sim.migration_history] == [3, 6, 9, 12, 15, 18]


def test_sampling_schedule():
    sim = make_sim()
    run_steps(sim, 7)
    assert sim.sample_times == [0, 2, 4, 6]
    for sp in sim.state.species:
        assert len(sp.trajectory) == 4


def test_soc_dump_on_last_step():
    sim = make_sim(total_timesteps=4)
    run_steps(sim, 3)
    assert sim.soc_dump is None
    sim.update()
    assert len(sim.soc_dump) == 3
    assert all(len(per_site) == 3 for per_site in sim.soc_dump)


def test_last_all_alive():
    sim = make_sim()
    sim.sample_times = [0, 2, 4]
    for sp in sim.state.species:
        sp.record(0, 5)
        sp.record(1, 3)
        sp.record(2, 0 if sp.is_predator else 1)
    assert sim.last_all_alive() == 3


def test_single_site_scenario():
    sim = make_sim(PREDATOR_PREY, ONE_SITE, total_timesteps=1, random_seed=3)
    start = sim.state.population_matrix().copy()
    sim.update()
    grass, rabbits = sim.state.sites[0].old
    assert 0 <= grass <= sim.state.sites[0].carrying_capacity
    assert grass <= start[0, 0]
    if start[0, 0] == 0:
        assert sim.state.sites[0].newborn[1] == 0


def test_predator_without_prey_never_breeds():
    sim = make_sim(PREDATOR_PREY, ONE_SITE, random_seed=5, seed_individuals=False)
    site = sim.state.sites[0]
    site.old[:] = [0, 30]
    for _ in range(5):
        sim.update()
        assert site.newborn[1] == 0
        assert site.new[1] == 0


def test_stats_history():
    sim = make_sim()
    run_steps(sim, 4)
    s = sim.stats_history[-1]
    assert s["t"] == 3
    assert s["pop"] == int(sim.state.population_matrix().sum())
    assert s["migrants"] == sum(sim.migration_history[-1][1].realized)


def write_inputs(tmp_path):
    fw = tmp_path / "food_web.net"
    sn = tmp_path / "neighborhood.net"
    fw.write_text(THREE_LEVEL)
    sn.write_text(TWO_SITES)
    return str(fw), str(sn)


def test_run_simulation_writes_reports(tmp_path, capsys):
    fw, sn = write_inputs(tmp_path)
    out = tmp_path / "out"
    cfg = Config(total_timesteps=11, migration_interval=2, network_interval=5, show_each=2,
                 save_each=4, random_seed=7, food_web_file=fw, neighborhood_file=sn,
                 output_dir=str(out))
    sim = run_simulation(cfg)

    assert sim.done
    assert "Done in" in capsys.readouterr().out
    names = {p.name for p in out.iterdir()}
    assert "time_series_seed_7_real_0.dat" in names
    assert "stability_seed_7.dat" in names
    assert "food_web_seed_7.net" in names
    assert "populations_sp001_seed_7_real_0.dat" in names
    assert "soc_parameters_sp003_seed_7_real_0.dat" in names
    assert sum(1 for n in names if n.startswith("coexistence_00006") and n.endswith(".net")) == 8
    assert sum(1 for n in names if n.startswith("coexistence_00011") and n.endswith(".net")) == 8
    assert "coexistence_00006_seed_7_real_0_p_values.dat" in names

    series = (out / "time_series_seed_7_real_0.dat").read_text().splitlines()
    assert [int(line.split()[0]) for line in series] == [0, 2, 4, 6, 8, 10]
    migration = (out / "realized_migration_seed_7_real_0.dat").read_text().splitlines()
    assert len(migration) == 5
    summary = json.loads((out / "run_summary_seed_7_real_0.json").read_text())
    assert len(summary["stats_history"]) == 11
    assert summary["config"]["random_seed"] == 7


def test_realizations_are_independent(tmp_path):
    fw, sn = write_inputs(tmp_path)
    cfg = Config(total_timesteps=6, realizations=2, random_seed=3, food_web_file=fw,
                 neighborhood_file=sn, output_dir=str(tmp_path / "out"))
    first, second = run_realizations(cfg, quiet=True)
    again = run_simulation(cfg, realization=1, quiet=True)
    assert (second.state.population_matrix() == again.state.population_matrix()).all()
    stability = (tmp_path / "out" / "stability_seed_3.dat").read_text().splitlines()
    assert [line.split()[0] for line in stability] == ["0", "1", "1"]
    assert first.state.population_matrix().shape == (2, 3)
