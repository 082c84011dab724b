# -*- coding: utf-8 -*-
"""
moves.py - Translation, insertion and deletion kernels for zVT Monte Carlo.

Each kernel returns True on acceptance. Rejection (overlap of the trial state
or a failed Metropolis draw) is the normal outcome and only logged at DEBUG;
an overlapping *live* particle or a full store raises.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from .base import CapacityExhausted, InvariantViolation, metropolis, periodic_wrap
from .potential import PotentialEvaluator
from .store import ParticleStore, SimulationTotals

logger = logging.getLogger("zvt")


@dataclass
class MoveCounters:
    """Per-kind try/accept counters for one step."""

    m_tries: int = 0
    m_moves: int = 0
    c_tries: int = 0
    c_moves: int = 0
    d_tries: int = 0
    d_moves: int = 0

    @staticmethod
    def _ratio(moves: int, tries: int) -> float:
        return moves / tries if tries > 0 else 0.0

    @property
    def move_ratio(self) -> float:
        return self._ratio(self.m_moves, self.m_tries)

    @property
    def create_ratio(self) -> float:
        return self._ratio(self.c_moves, self.c_tries)

    @property
    def destroy_ratio(self) -> float:
        return self._ratio(self.d_moves, self.d_tries)


def insertion_bias(n: int, activity: float) -> float:
    """Reduced chemical-potential term of inserting particle n+1: -ln(z / (n+1))."""
    if activity <= 0.0:
        return math.inf
    return -math.log(activity / (n + 1))


def deletion_bias(n: int, activity: float) -> float:
    """Reduced chemical-potential term of removing one of n particles: -ln(n / z)."""
    if activity <= 0.0:
        return -math.inf
    return -math.log(n / activity)


class MoveSampler:
    """
    Move kernels acting on an explicit simulation state.

    Long-range corrections are deliberately left out of the insertion and
    deletion acceptance; they only enter the reported averages.

    Args:
        store: Particle store (mutated on acceptance).
        totals: Running potential/virial (mutated on acceptance).
        model: Interaction evaluator.
        temperature: Reduced temperature.
        activity: Activity z = exp(mu / T).
        max_displacement: Maximum translation per component (absolute units).
        rng: Random stream with random(), uniform(low, high, size) and integers(high).
    """

    def __init__(
        self,
        store: ParticleStore,
        totals: SimulationTotals,
        model: PotentialEvaluator,
        temperature: float,
        activity: float,
        max_displacement: float,
        rng: Any,
    ):
        self.store = store
        self.totals = totals
        self.model = model
        self.temperature = temperature
        self.activity = activity
        self.dr_max = max_displacement / model.box
        self.rng = rng

    def _live_interaction(self, i: int, message: str):
        atom = self.model.potential_1(self.store, self.store.get(i), i)
        if atom.overlap:
            raise InvariantViolation(f"{message} (particle {i})")
        return atom

    def translate(self) -> bool:
        """Displace a random particle by up to dr_max in each direction."""
        n = self.store.n
        if n == 0:
            logger.debug("Translation: no particles to move.")
            return False
        i = int(self.rng.integers(n))
        atom_old = self._live_interaction(i, "Overlap in current configuration")

        ri = self.store.get(i) + self.rng.uniform(-self.dr_max, self.dr_max, size=3)
        ri = periodic_wrap(ri)
        atom_new = self.model.potential_1(self.store, ri, i)
        if atom_new.overlap:
            logger.debug(f"Translation of {i} rejected: overlap.")
            return False

        delta = (atom_new.energy - atom_old.energy) / self.temperature
        if not metropolis(delta, self.rng):
            return False
        self.totals.add(atom_new.energy - atom_old.energy, atom_new.virial - atom_old.virial)
        self.store.move(i, ri)
        return True

    def create(self) -> bool:
        """Insert a particle at a uniformly random position in the box."""
        n = self.store.n
        if self.store.is_full:
            message = f"n has grown too large: {n + 1} > capacity {self.store.capacity}"
            raise CapacityExhausted(message)

        ri = self.rng.random(3) - 0.5
        atom_new = self.model.potential_1(self.store, ri, n)
        if atom_new.overlap:
            logger.debug("Insertion rejected: overlap.")
            return False

        delta = atom_new.energy / self.temperature + insertion_bias(n, self.activity)
        if not metropolis(delta, self.rng):
            return False
        self.store.create(ri)
        self.totals.add(atom_new.energy, atom_new.virial)
        return True

    def destroy(self) -> bool:
        """Remove a randomly chosen particle."""
        n = self.store.n
        if n == 0:
            logger.debug("Deletion: no particles to remove.")
            return False
        i = int(self.rng.integers(n))
        atom_old = self._live_interaction(i, "Overlap found on particle removal")

        delta = -atom_old.energy / self.temperature + deletion_bias(n, self.activity)
        if not metropolis(delta, self.rng):
            return False
        self.store.destroy(i)
        self.totals.subtract(atom_old.energy, atom_old.virial)
        return True
