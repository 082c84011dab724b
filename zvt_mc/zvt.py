# -*- coding: utf-8 -*-
"""
zvt.py - Grand canonical (constant zVT) Monte Carlo for atoms in a cubic periodic box.

Positions are held in box-relative units; input and output configurations,
energies and all reported results are in the reduced units of the
interaction model (sigma = epsilon = 1 for Lennard-Jones).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional

import numpy as np

from .averages import BlockAverager
from .base import ConfigurationError, InvariantViolation
from .config_io import ConfigurationWriter, read_cnf_atoms
from .moves import MoveCounters, MoveSampler
from .potential import LennardJones, PotentialEvaluator
from .store import ParticleStore, SimulationTotals

logger = logging.getLogger("zvt")

OBSERVABLE_NAMES = (
    "Move ratio",
    "Create ratio",
    "Destroy ratio",
    "Density",
    "E/N (cut)",
    "P (cut)",
    "E/N (full)",
    "P (full)",
)


@dataclass(frozen=True)
class RunParameters:
    """Immutable run parameters. prob_create defaults to (1 - prob_move) / 2."""

    box_length: float
    temperature: float = 0.7
    activity: float = 1.0
    cutoff_radius: float = 2.5
    max_displacement: float = 0.15
    prob_move: float = 0.34
    prob_create: Optional[float] = None

    def __post_init__(self):
        if self.prob_create is None:
            object.__setattr__(self, "prob_create", (1.0 - self.prob_move) / 2.0)

    @property
    def prob_destroy(self) -> float:
        return 1.0 - self.prob_move - self.prob_create

    def validate(self) -> None:
        """Raise ConfigurationError on any malformed value."""
        if not self.box_length > 0.0:
            raise ConfigurationError(f"box_length must be positive, got {self.box_length}")
        if not self.temperature > 0.0:
            raise ConfigurationError(f"temperature must be positive, got {self.temperature}")
        if not self.activity >= 0.0:
            raise ConfigurationError(f"activity must be non-negative, got {self.activity}")
        if not self.cutoff_radius > 0.0:
            raise ConfigurationError(f"cutoff_radius must be positive, got {self.cutoff_radius}")
        if self.cutoff_radius / self.box_length >= 0.5:
            raise ConfigurationError(
                f"r_cut too large for box: {self.cutoff_radius} >= {0.5 * self.box_length}"
            )
        if not self.max_displacement >= 0.0:
            raise ConfigurationError(f"max_displacement must be non-negative, got {self.max_displacement}")
        for name in ("prob_move", "prob_create"):
            p = getattr(self, name)
            if not 0.0 <= p <= 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1], got {p}")
        if self.prob_move + self.prob_create > 1.0 + 1e-12:
            raise ConfigurationError(
                f"prob_move + prob_create exceeds 1: {self.prob_move + self.prob_create}"
            )


class Observables(NamedTuple):
    """Per-step observable vector, in the order of OBSERVABLE_NAMES."""

    move_ratio: float
    create_ratio: float
    destroy_ratio: float
    density: float
    energy_per_particle_cut: float
    pressure_cut: float
    energy_per_particle_full: float
    pressure_full: float


class ZVTMC:
    """
    Grand Canonical Monte Carlo driver: blocks of steps, each step a fixed
    number of tries of translation, creation or destruction.

    Parameters:
    -----------
    positions: (N, 3) initial positions in absolute units
    box: Box length
    temperature: Reduced temperature
    activity: Activity z = exp(mu / T)
    prob_move: Probability of a translation try (creation and destruction share the rest)
    r_cut: Potential cutoff distance
    dr_max: Maximum displacement per component
    model: PotentialEvaluator (default: LennardJones(box, r_cut))
    capacity: Particle store capacity (default: twice the initial count)
    seed: Seed for np.random.default_rng
    rng: Random stream to use instead of a seeded generator
    averager: Statistics sink (default: BlockAverager())
    writer: Configuration writer (default: ConfigurationWriter())
    """

    def __init__(
        self,
        positions: np.ndarray,
        box: float,
        temperature: float = 0.7,
        activity: float = 1.0,
        prob_move: float = 0.34,
        r_cut: float = 2.5,
        dr_max: float = 0.15,
        model: Optional[PotentialEvaluator] = None,
        capacity: Optional[int] = None,
        seed: Optional[int] = None,
        rng: Any = None,
        averager: Optional[BlockAverager] = None,
        writer: Optional[ConfigurationWriter] = None,
    ) -> None:
        self.params = RunParameters(
            box_length=box,
            temperature=temperature,
            activity=activity,
            cutoff_radius=r_cut,
            max_displacement=dr_max,
            prob_move=prob_move,
        )
        self.params.validate()
        self.box: float = float(box)
        self.model: PotentialEvaluator = model if model is not None else LennardJones(box, r_cut)
        if not (np.isclose(self.model.box, box) and np.isclose(self.model.r_cut, r_cut)):
            raise ConfigurationError(
                f"Model geometry (box {self.model.box}, r_cut {self.model.r_cut}) "
                f"does not match run parameters (box {box}, r_cut {r_cut})"
            )
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.averager: BlockAverager = averager if averager is not None else BlockAverager()
        self.writer: ConfigurationWriter = writer if writer is not None else ConfigurationWriter()

        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        self.store = ParticleStore(positions / self.box, capacity=capacity)

        system = self.model.potential(self.store)
        if system.overlap:
            raise InvariantViolation("Overlap in initial configuration")
        self.totals = SimulationTotals(system.energy, system.virial)

        self.sampler = MoveSampler(
            self.store,
            self.totals,
            self.model,
            temperature=temperature,
            activity=activity,
            max_displacement=dr_max,
            rng=self.rng,
        )
        self.counters = MoveCounters()

    @classmethod
    def from_file(cls, filename: str, **kwargs) -> "ZVTMC":
        """Instantiate from a configuration file (see config_io.read_cnf_atoms)."""
        n, box, positions = read_cnf_atoms(filename)
        logger.info("{:<40s}{:15d}".format("Number of particles", n))
        logger.info("{:<40s}{:15.5f}".format("Simulation box length", box))
        return cls(positions=positions, box=box, **kwargs)

    @property
    def n(self) -> int:
        return self.store.n

    def log_parameters(self, nblock: int, nstep: int) -> None:
        p = self.params
        logger.info("{:<40s}{:15d}".format("Number of blocks", nblock))
        logger.info("{:<40s}{:15d}".format("Number of steps per block", nstep))
        for label, value in (
            ("Temperature", p.temperature),
            ("Activity", p.activity),
            ("Probability of move", p.prob_move),
            ("Probability of create/destroy", p.prob_create),
            ("Potential cutoff distance", p.cutoff_radius),
            ("Maximum displacement", p.max_displacement),
        ):
            logger.info("{:<40s}{:15.5f}".format(label, value))

    def calculate(self, label: Optional[str] = None) -> Observables:
        """Derived observables from the current totals, logged under label if given."""
        p = self.params
        n = self.store.n
        volume = self.box**3
        density = n / volume
        en_cut = (self.totals.potential / n if n > 0 else 0.0) + 1.5 * p.temperature
        en_full = en_cut + self.model.potential_lrc(density)
        p_cut = self.totals.virial / volume + density * p.temperature
        p_full = p_cut + self.model.pressure_lrc(density)
        p_cut = p_cut + self.model.pressure_delta(density)

        obs = Observables(
            self.counters.move_ratio,
            self.counters.create_ratio,
            self.counters.destroy_ratio,
            density,
            en_cut,
            p_cut,
            en_full,
            p_full,
        )
        if label is not None:
            logger.info(label)
            for name, value in (
                ("Density", density),
                ("E/N (cut)", en_cut),
                ("P (cut)", p_cut),
                ("E/N (full)", en_full),
                ("P (full)", p_full),
            ):
                logger.info("{:<40s}{:15.5f}".format(name, value))
        return obs

    def try_move(self) -> str:
        """One try: pick a move kind by a uniform draw and apply it. Returns the kind."""
        p = self.params
        c = self.counters
        zeta = self.rng.random()
        if zeta < p.prob_move:
            c.m_tries += 1
            if self.sampler.translate():
                c.m_moves += 1
            return "move"
        elif zeta < p.prob_move + p.prob_create:
            c.c_tries += 1
            if self.sampler.create():
                c.c_moves += 1
            return "create"
        else:
            c.d_tries += 1
            if self.sampler.destroy():
                c.d_moves += 1
            return "destroy"

    def step(self, ntry: int) -> Observables:
        """Run ntry tries with fresh counters and return the step observables."""
        self.counters = MoveCounters()
        for _ in range(ntry):
            self.try_move()
        return self.calculate()

    def run(self, nblock: int = 10, nstep: int = 1000) -> Dict[str, Dict[str, float]]:
        """
        Run nblock blocks of nstep steps. The number of tries per step is the
        particle count at the start of the run.

        Returns:
            Run averages and errors per observable name.
        """
        if nblock < 0 or nstep < 0:
            raise ConfigurationError(f"nblock and nstep must be non-negative, got {nblock}, {nstep}")
        self.log_parameters(nblock, nstep)
        self.calculate("Initial values")

        self.averager.run_begin(OBSERVABLE_NAMES)
        ntry = self.store.n
        sav_tag = "sav"
        try:
            for blk in range(1, nblock + 1):
                self.averager.blk_begin()
                for stp in range(nstep):
                    obs = self.step(ntry)
                    self.averager.blk_add(obs)
                self.averager.blk_end(blk)

                if nblock < 1000:
                    sav_tag = f"{blk:03d}"
                snapshot = self.store.snapshot()
                self.writer.write(sav_tag, self.box, snapshot)
                self.writer.append_frame(self.box, snapshot, block=blk, n=len(snapshot))
        finally:
            self.writer.close()

        results = self.averager.run_end()
        self.calculate("Final values")
        self.final_check()
        self.calculate("Final check")
        self.writer.write("out", self.box, self.store.snapshot())
        logger.info("zVT MC completed.")
        return results

    def final_check(self, rtol: float = 1e-6, atol: float = 1e-6) -> None:
        """
        Recompute energy and virial from scratch. Overlap, or disagreement with
        the running totals, raises InvariantViolation; otherwise the totals are
        reset to the recomputed values.
        """
        system = self.model.potential(self.store)
        if system.overlap:
            raise InvariantViolation("Overlap in final configuration")
        recomputed = SimulationTotals(system.energy, system.virial)
        if not self.totals.matches(recomputed, rtol=rtol, atol=atol):
            message = (
                f"Running totals drifted: pot {self.totals.potential:.10g} vs {recomputed.potential:.10g}, "
                f"vir {self.totals.virial:.10g} vs {recomputed.virial:.10g}"
            )
            raise InvariantViolation(message)
        self.totals.potential = recomputed.potential
        self.totals.virial = recomputed.virial
