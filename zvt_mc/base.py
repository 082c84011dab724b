# -*- coding: utf-8 -*-
"""
Shared primitives for zVT Monte Carlo.

Provides:
- Package logger setup
- Error taxonomy (fatal conditions, distinct from ordinary move rejection)
- Periodic wrap in box-relative units
- Metropolis acceptance test
"""

import logging
import math
from typing import Any

import numpy as np

logger = logging.getLogger("zvt")
logger.setLevel(logging.INFO)
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(handler)
logger.propagate = False

# exp(-75) ~ 2.7e-33, below the resolution of any uniform draw
EXPONENT_GUARD = 75.0


class SimulationError(Exception):
    """Base class for fatal simulation conditions."""


class ConfigurationError(SimulationError, ValueError):
    """Malformed run parameters or configuration file."""


class InvariantViolation(SimulationError, RuntimeError):
    """Internal state is inconsistent (overlap of a live particle, totals drift)."""


class CapacityExhausted(SimulationError, RuntimeError):
    """Insertion would exceed the pre-allocated particle store."""


def periodic_wrap(r: np.ndarray) -> np.ndarray:
    """
    Map box-relative coordinates onto the nearest periodic image in [-0.5, 0.5).

    Idempotent: wrapping an already wrapped position returns it unchanged.
    """
    r = np.asarray(r, dtype=float)
    return r - np.floor(r + 0.5)


def metropolis(delta: float, rng: Any) -> bool:
    """
    Metropolis test for a reduced energy change delta (already divided by T,
    including any chemical potential bias).

    Accepts unconditionally when delta <= 0 without touching the random stream,
    otherwise accepts iff a uniform draw falls below exp(-delta).
    """
    if delta <= 0.0:
        return True
    zeta = rng.random()
    if delta > EXPONENT_GUARD:
        return False
    return zeta < math.exp(-delta)
