# -*- coding: utf-8 -*-
"""
store.py - Bounded particle store and running totals for a variable-N simulation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .base import CapacityExhausted, periodic_wrap

logger = logging.getLogger("zvt")


@dataclass
class SimulationTotals:
    """Running potential energy and virial, updated on every accepted move."""

    potential: float = 0.0
    virial: float = 0.0

    def add(self, energy: float, virial: float) -> None:
        self.potential += energy
        self.virial += virial

    def subtract(self, energy: float, virial: float) -> None:
        self.potential -= energy
        self.virial -= virial

    def matches(self, other: "SimulationTotals", rtol: float = 1e-6, atol: float = 1e-8) -> bool:
        """True if both totals agree with other within tolerance."""
        return bool(
            np.isclose(self.potential, other.potential, rtol=rtol, atol=atol)
            and np.isclose(self.virial, other.virial, rtol=rtol, atol=atol)
        )


class ParticleStore:
    """
    Fixed-capacity arena of box-relative positions plus a live count.

    Slots at index >= n are stale and never handed out. Insertion writes at
    slot n; deletion moves the last live slot into the freed one.

    Args:
        positions: (N, 3) initial box-relative positions (wrapped on entry).
        capacity: Buffer size (default: twice the initial count, at least 1).
    """

    def __init__(self, positions: np.ndarray, capacity: Optional[int] = None):
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        n = len(positions)
        if capacity is None:
            capacity = max(2 * n, 1)
        if capacity < n:
            raise ValueError(f"capacity {capacity} is smaller than the initial count {n}.")
        self._r = np.zeros((capacity, 3))
        self._r[:n] = periodic_wrap(positions)
        self._n = n

    @property
    def n(self) -> int:
        return self._n

    @property
    def capacity(self) -> int:
        return len(self._r)

    @property
    def is_full(self) -> bool:
        return self._n >= len(self._r)

    def __len__(self) -> int:
        return self._n

    @property
    def positions(self) -> np.ndarray:
        """Read-only view of the live positions."""
        view = self._r[: self._n]
        view.flags.writeable = False
        return view

    def snapshot(self) -> np.ndarray:
        """Independent copy of the live positions."""
        return self._r[: self._n].copy()

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise IndexError(f"particle index {i} outside live range [0, {self._n}).")

    def get(self, i: int) -> np.ndarray:
        self._check_index(i)
        return self._r[i].copy()

    def move(self, i: int, ri: np.ndarray) -> None:
        """Replace the position of live particle i."""
        self._check_index(i)
        self._r[i] = ri

    def create(self, ri: np.ndarray) -> int:
        """Append a particle; returns its index."""
        if self.is_full:
            raise CapacityExhausted(
                f"n has grown too large: {self._n + 1} > capacity {self.capacity}"
            )
        self._r[self._n] = ri
        self._n += 1
        return self._n - 1

    def destroy(self, i: int) -> None:
        """Remove live particle i by moving the last live particle into its slot."""
        self._check_index(i)
        last = self._n - 1
        if i != last:
            self._r[i] = self._r[last]
        self._n = last
