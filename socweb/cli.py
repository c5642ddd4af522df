"""Command-line entry point.

    socweb NITER TM TCN SEED FOOD_WEB NEIGHBORHOOD SHOW_EACH SAVE_EACH [options]
"""

import argparse
import logging
import sys

from .config import Config
from .errors import SocwebError
from .simulation import run_realizations


def build_parser():
    p = argparse.ArgumentParser(
        prog="socweb",
        description="Spatially explicit SOC Monte Carlo simulation of a food web.")
    p.add_argument("niter", type=int, help="total number of MC timesteps")
    p.add_argument("tm", type=int, help="timesteps between migration passes")
    p.add_argument("tcn", type=int, help="timesteps between coexistence network exports")
    p.add_argument("seed", type=int, help="random seed")
    p.add_argument("food_web", help="food web network (Pajek)")
    p.add_argument("neighborhood", help="spatial neighborhood network (Pajek)")
    p.add_argument("show_each", type=int, help="interval of population samples")
    p.add_argument("save_each", type=int, help="interval of time series rewrites")
    p.add_argument("--realizations", type=int, default=Config.realizations)
    p.add_argument("--output-dir", default=Config.output_dir)
    p.add_argument("--feeding-attempts", type=int, default=Config.feeding_attempts)
    p.add_argument("--quiet", action="store_true", help="no progress lines")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p


def config_from_args(args):
    return Config(
        total_timesteps=args.niter,
        migration_interval=args.tm,
        network_interval=args.tcn,
        random_seed=args.seed,
        food_web_file=args.food_web,
        neighborhood_file=args.neighborhood,
        show_each=args.show_each,
        save_each=args.save_each,
        realizations=args.realizations,
        output_dir=args.output_dir,
        feeding_attempts=args.feeding_attempts,
    )


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s")
    try:
        cfg = config_from_args(args).validate()
        run_realizations(cfg, quiet=args.quiet)
    except SocwebError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0
