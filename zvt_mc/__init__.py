# -*- coding: utf-8 -*-
"""
zvt_mc package: grand canonical (zVT) Monte Carlo for atoms in a cubic periodic box.

Exports:
- ZVTMC: Block/step/try driver
- MoveSampler: Translation, creation and destruction kernels
- ParticleStore, SimulationTotals: Variable-N state
- PotentialEvaluator, LennardJones, InteractionResult: Interaction models
- BlockAverager: Block and run averages
- config_io: Configuration files and ASE conversion
"""

from .base import (
    CapacityExhausted,
    ConfigurationError,
    InvariantViolation,
    SimulationError,
    metropolis,
    periodic_wrap,
)
from .store import ParticleStore, SimulationTotals
from .potential import InteractionResult, LennardJones, PotentialEvaluator
from .moves import MoveCounters, MoveSampler
from .averages import BlockAverager
from .zvt import OBSERVABLE_NAMES, Observables, RunParameters, ZVTMC
from . import config_io

__all__ = [
    "ZVTMC",
    "RunParameters",
    "Observables",
    "OBSERVABLE_NAMES",
    "MoveSampler",
    "MoveCounters",
    "ParticleStore",
    "SimulationTotals",
    "PotentialEvaluator",
    "LennardJones",
    "InteractionResult",
    "BlockAverager",
    "SimulationError",
    "ConfigurationError",
    "InvariantViolation",
    "CapacityExhausted",
    "metropolis",
    "periodic_wrap",
    "config_io",
]
