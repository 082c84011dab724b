"""Command-line entry point: zvt-mc."""

import argparse
import logging
import os
import sys
from datetime import datetime

from .averages import BlockAverager
from .base import SimulationError
from .config_io import ConfigurationWriter
from .zvt import ZVTMC

logger = logging.getLogger("zvt")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zvt-mc",
        description="Monte Carlo, constant-zVT ensemble, for atoms in a cubic periodic box.",
    )
    parser.add_argument("--nblock", type=int, default=10, help="number of blocks")
    parser.add_argument("--nstep", type=int, default=1000, help="number of steps per block")
    parser.add_argument("--temperature", type=float, default=0.7, help="reduced temperature")
    parser.add_argument("--activity", type=float, default=1.0, help="activity z")
    parser.add_argument("--prob-move", type=float, default=0.34, help="probability of a translation try")
    parser.add_argument("--r-cut", type=float, default=2.5, help="potential cutoff distance")
    parser.add_argument("--dr-max", type=float, default=0.15, help="maximum displacement")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("-w", "--workdir", default=".", help="directory holding cnf.* files")
    parser.add_argument("-i", "--input", default=None, help="input configuration (default: <workdir>/cnf.inp)")
    parser.add_argument("--traj", default=None, help="ASE trajectory for block-end snapshots")
    parser.add_argument("--blocks-csv", default=None, help="CSV file for block averages")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every rejected move")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    logger.info("zvt-mc")
    logger.info("Monte Carlo, constant-zVT ensemble")
    logger.info(f"Started {datetime.now().isoformat(timespec='seconds')}")

    prefix = os.path.join(args.workdir, "cnf.")
    input_file = args.input if args.input is not None else prefix + "inp"
    try:
        mc = ZVTMC.from_file(
            input_file,
            temperature=args.temperature,
            activity=args.activity,
            prob_move=args.prob_move,
            r_cut=args.r_cut,
            dr_max=args.dr_max,
            seed=args.seed,
            averager=BlockAverager(blocks_csv=args.blocks_csv),
            writer=ConfigurationWriter(prefix=prefix, traj_file=args.traj),
        )
        mc.run(nblock=args.nblock, nstep=args.nstep)
    except SimulationError as err:
        logger.error(f"Error in zvt-mc: {err}")
        return 1

    logger.info(f"Finished {datetime.now().isoformat(timespec='seconds')}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
