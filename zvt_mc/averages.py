# -*- coding: utf-8 -*-
"""
averages.py - Block and run averages of per-step observables.
"""

import csv
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
from scipy.stats import sem

logger = logging.getLogger("zvt")


class BlockAverager:
    """
    Accumulates a fixed set of named observables.

    Each step pushes one value per observable with blk_add; blk_end closes the
    block and logs its means; run_end logs and returns the run averages with
    standard errors estimated from the block means.

    Args:
        blocks_csv: Optional CSV file receiving one row of block means per block.
    """

    def __init__(self, blocks_csv: Optional[str] = None):
        self.blocks_csv = blocks_csv
        self.names: List[str] = []
        self.block_means: List[np.ndarray] = []
        self._blk_sum: Optional[np.ndarray] = None
        self._blk_norm = 0

    def run_begin(self, names: Sequence[str]) -> None:
        self.names = list(names)
        self.block_means = []
        self._blk_sum = np.zeros(len(self.names))
        self._blk_norm = 0
        if self.blocks_csv is not None:
            with open(self.blocks_csv, "w", newline="") as f:
                csv.writer(f).writerow(["block"] + self.names)
        logger.info(" ".join(["{:>7s}".format("Block")] + ["{:>15s}".format(s) for s in self.names]))

    def blk_begin(self) -> None:
        self._blk_sum = np.zeros(len(self.names))
        self._blk_norm = 0

    def blk_add(self, values: Sequence[float]) -> None:
        values = np.asarray(values, dtype=float)
        if values.shape != (len(self.names),):
            raise ValueError(f"Expected {len(self.names)} values, got shape {values.shape}.")
        self._blk_sum += values
        self._blk_norm += 1

    def blk_end(self, blk: int) -> Optional[np.ndarray]:
        """Close block blk; returns its means, or None if it received no samples."""
        if self._blk_norm == 0:
            logger.warning(f"Block {blk} has no samples; excluded from run averages.")
            return None
        means = self._blk_sum / self._blk_norm
        self.block_means.append(means)
        logger.info(" ".join(["{:7d}".format(blk)] + ["{:15.6f}".format(v) for v in means]))
        if self.blocks_csv is not None:
            with open(self.blocks_csv, "a", newline="") as f:
                csv.writer(f).writerow([blk] + [f"{v:.8f}" for v in means])
        return means

    def run_end(self) -> Dict[str, Dict[str, float]]:
        """Run averages and standard errors of the block means, keyed by observable name."""
        nblk = len(self.block_means)
        if nblk == 0:
            logger.warning("No completed blocks; run averages are undefined.")
            return {name: {"mean": float("nan"), "error": float("nan")} for name in self.names}
        data = np.vstack(self.block_means)
        mean = data.mean(axis=0)
        err = sem(data, axis=0) if nblk > 1 else np.full(len(self.names), np.nan)
        logger.info("Run averages ({} blocks)".format(nblk))
        results = {}
        for name, m, e in zip(self.names, mean, err):
            logger.info("{:<15s} {:15.6f} +/- {:12.6f}".format(name, m, e))
            results[name] = {"mean": float(m), "error": float(e)}
        return results
