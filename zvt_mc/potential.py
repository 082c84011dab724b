# -*- coding: utf-8 -*-
"""
potential.py - Pluggable pair-interaction evaluators.

The engine only talks to the PotentialEvaluator interface: single-particle
interaction, whole-system interaction, and the long-range / delta corrections
applied to reported averages. LennardJones is the shipped model
(cut but not shifted, reduced units sigma = epsilon = 1).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from .base import ConfigurationError, periodic_wrap
from .store import ParticleStore

logger = logging.getLogger("zvt")


@dataclass(frozen=True)
class InteractionResult:
    """Energy, virial and overlap flag of an evaluation. Energy/virial are meaningless on overlap."""

    energy: float = 0.0
    virial: float = 0.0
    overlap: bool = False

    def __add__(self, other: "InteractionResult") -> "InteractionResult":
        return InteractionResult(
            energy=self.energy + other.energy,
            virial=self.virial + other.virial,
            overlap=self.overlap or other.overlap,
        )


class PotentialEvaluator(ABC):
    """Interaction model interface consumed by the move kernels."""

    def __init__(self, box: float, r_cut: float):
        if box <= 0.0:
            raise ConfigurationError(f"Box length must be positive, got {box}.")
        if r_cut <= 0.0:
            raise ConfigurationError(f"Cutoff must be positive, got {r_cut}.")
        if r_cut / box >= 0.5:
            raise ConfigurationError(f"r_cut too large for box: r_cut/box = {r_cut / box:.5f} >= 0.5")
        self.box = float(box)
        self.r_cut = float(r_cut)

    @abstractmethod
    def potential_1(self, store: ParticleStore, ri: np.ndarray, i: int) -> InteractionResult:
        """
        Interaction of a particle at box-relative position ri with every live
        particle except index i. Pass i = store.n for an insertion trial.
        """

    @abstractmethod
    def potential(self, store: ParticleStore) -> InteractionResult:
        """Whole-system interaction, computed from scratch."""

    @abstractmethod
    def potential_lrc(self, density: float) -> float:
        """Long-range correction to the potential energy per particle."""

    @abstractmethod
    def pressure_lrc(self, density: float) -> float:
        """Long-range correction to the pressure."""

    @abstractmethod
    def pressure_delta(self, density: float) -> float:
        """Delta correction to the pressure of the cut (not shifted) potential."""


class LennardJones(PotentialEvaluator):
    """
    Lennard-Jones pair potential, cut but not shifted at r_cut.

    A pair closer than sigma / sqrt(SR2_OVERLAP) counts as an overlap, which
    keeps the energies finite and makes such trial moves an automatic reject.
    """

    SR2_OVERLAP = 1.77

    def _pair_terms(self, rij: np.ndarray) -> InteractionResult:
        rij = periodic_wrap(rij)
        rij_sq = np.sum(rij**2, axis=1) * self.box**2
        rij_sq = rij_sq[rij_sq < self.r_cut**2]
        if rij_sq.size == 0:
            return InteractionResult()
        with np.errstate(divide="ignore"):
            sr2 = 1.0 / rij_sq
        if np.any(sr2 > self.SR2_OVERLAP):
            return InteractionResult(overlap=True)
        sr6 = sr2**3
        sr12 = sr6**2
        # 4 epsilon for the energy, 24/3 for the virial
        return InteractionResult(
            energy=4.0 * float(np.sum(sr12 - sr6)),
            virial=8.0 * float(np.sum(2.0 * sr12 - sr6)),
        )

    def potential_1(self, store: ParticleStore, ri: np.ndarray, i: int) -> InteractionResult:
        r = store.positions
        mask = np.ones(len(r), dtype=bool)
        if 0 <= i < len(r):
            mask[i] = False
        return self._pair_terms(np.asarray(ri, dtype=float) - r[mask])

    def potential(self, store: ParticleStore) -> InteractionResult:
        r = store.positions
        if len(r) < 2:
            return InteractionResult()
        i, j = np.triu_indices(len(r), k=1)
        return self._pair_terms(r[i] - r[j])

    def potential_lrc(self, density: float) -> float:
        sr3 = 1.0 / self.r_cut**3
        return np.pi * ((8.0 / 9.0) * sr3**3 - (8.0 / 3.0) * sr3) * density

    def pressure_lrc(self, density: float) -> float:
        sr3 = 1.0 / self.r_cut**3
        return np.pi * ((32.0 / 9.0) * sr3**3 - (16.0 / 3.0) * sr3) * density**2

    def pressure_delta(self, density: float) -> float:
        sr3 = 1.0 / self.r_cut**3
        return np.pi * (8.0 / 3.0) * (sr3**3 - sr3) * density**2
