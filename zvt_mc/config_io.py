# -*- coding: utf-8 -*-
"""
config_io.py

Configuration file I/O for atomic simulations in a cubic periodic box.

Text format (absolute units):
    line 1: number of particles
    line 2: box length
    then one "x y z" line per particle

Files with a structure extension ASE understands (.traj, .xyz, ...) are read
through ase.io instead and must carry a cubic cell.
"""

import logging
import os
from typing import Optional, Tuple

import numpy as np
from ase import Atoms
from ase.io import read
from ase.io.trajectory import Trajectory

from .base import ConfigurationError

logger = logging.getLogger("zvt")

ASE_EXTENSIONS = (".traj", ".xyz", ".extxyz", ".cif", ".vasp")


def read_cnf_atoms(filename: str) -> Tuple[int, float, np.ndarray]:
    """
    Read a configuration.

    Returns:
        (n, box, positions) with positions as an (n, 3) array in absolute units.
    """
    if not os.path.exists(filename):
        raise ConfigurationError(f"Configuration file not found: {filename}")
    if filename.lower().endswith(ASE_EXTENSIONS):
        return _read_ase(filename)

    with open(filename) as f:
        lines = [line.split() for line in f if line.strip()]
    try:
        n = int(lines[0][0])
        box = float(lines[1][0])
    except (IndexError, ValueError) as err:
        raise ConfigurationError(f"Malformed configuration file {filename}: {err}") from err
    if n < 0 or box <= 0.0:
        raise ConfigurationError(f"Malformed configuration file {filename}: n={n}, box={box}")

    rows = lines[2 : 2 + n]
    if len(rows) != n or any(len(row) < 3 for row in rows):
        raise ConfigurationError(
            f"Malformed configuration file {filename}: expected {n} rows of 3 coordinates"
        )
    try:
        positions = np.array([[float(x) for x in row[:3]] for row in rows]).reshape(-1, 3)
    except ValueError as err:
        raise ConfigurationError(f"Malformed configuration file {filename}: {err}") from err
    return n, box, positions


def _read_ase(filename: str) -> Tuple[int, float, np.ndarray]:
    atoms = read(filename)
    cell = atoms.cell.array
    box = float(cell[0, 0])
    if box <= 0.0 or not np.allclose(cell, box * np.eye(3)):
        raise ConfigurationError(f"Cell of {filename} is not cubic: {cell.tolist()}")
    return len(atoms), box, atoms.get_positions()


def write_cnf_atoms(filename: str, n: int, box: float, positions: np.ndarray) -> None:
    """Write a configuration in absolute units."""
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    if len(positions) != n:
        raise ValueError(f"Got {len(positions)} positions for n = {n}.")
    with open(filename, "w") as f:
        f.write(f"{n:15d}\n")
        f.write(f"{box:15.8f}\n")
        np.savetxt(f, positions, fmt="%15.10f", delimiter=" ")
    logger.debug(f"Configuration with {n} atoms written to {filename}.")


def to_atoms(positions: np.ndarray, box: float, symbol: str = "Ar") -> Atoms:
    """Build a periodic ASE Atoms object from absolute positions."""
    positions = np.asarray(positions, dtype=float).reshape(-1, 3)
    return Atoms(
        symbols=[symbol] * len(positions),
        positions=positions,
        cell=[box, box, box],
        pbc=True,
    )


class ConfigurationWriter:
    """
    Persists configurations for the engine: cnf.<tag> text files and,
    optionally, an appended ASE trajectory of block-end snapshots.

    Args:
        prefix: Path prefix of configuration files (e.g. "cnf.").
        traj_file: ASE trajectory to append snapshots to (None to disable).
        symbol: Chemical symbol used for ASE output.
    """

    def __init__(self, prefix: str = "cnf.", traj_file: Optional[str] = None, symbol: str = "Ar"):
        self.prefix = prefix
        self.traj_file = traj_file
        self.symbol = symbol
        self._traj: Optional[Trajectory] = None

    def write(self, tag: str, box: float, positions: np.ndarray) -> str:
        """Write box-relative positions (converted to absolute units) under tag."""
        filename = f"{self.prefix}{tag}"
        write_cnf_atoms(filename, len(positions), box, np.asarray(positions) * box)
        return filename

    def append_frame(self, box: float, positions: np.ndarray, **info) -> None:
        """Append box-relative positions to the trajectory, if one is configured."""
        if self.traj_file is None:
            return
        if self._traj is None:
            mode = "a" if os.path.exists(self.traj_file) and os.path.getsize(self.traj_file) > 0 else "w"
            self._traj = Trajectory(self.traj_file, mode)
        atoms = to_atoms(np.asarray(positions) * box, box, self.symbol)
        atoms.info.update(info)
        self._traj.write(atoms)

    def close(self) -> None:
        if self._traj is not None:
            self._traj.close()
            self._traj = None
