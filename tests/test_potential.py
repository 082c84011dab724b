import unittest

import numpy as np

from zvt_mc.base import ConfigurationError
from zvt_mc.potential import InteractionResult, LennardJones
from zvt_mc.store import ParticleStore


def lj_pair(r):
    sr6 = r**-6
    return 4.0 * (sr6**2 - sr6), 8.0 * (2.0 * sr6**2 - sr6)


class LennardJonesTests(unittest.TestCase):
    box = 10.0

    def setUp(self):
        self.model = LennardJones(self.box, 2.5)

    def _store(self, absolute):
        return ParticleStore(np.asarray(absolute, dtype=float) / self.box)

    def test_pair_energy_and_virial(self):
        store = self._store([[0.0, 0.0, 0.0], [1.5, 0.0, 0.0]])
        e, w = lj_pair(1.5)
        result = self.model.potential_1(store, store.get(0), 0)
        self.assertFalse(result.overlap)
        self.assertAlmostEqual(result.energy, e, places=12)
        self.assertAlmostEqual(result.virial, w, places=12)

    def test_minimum_at_two_to_the_sixth(self):
        r_min = 2.0 ** (1.0 / 6.0)
        store = self._store([[0.0, 0.0, 0.0], [0.0, r_min, 0.0]])
        result = self.model.potential(store)
        self.assertAlmostEqual(result.energy, -1.0, places=12)
        self.assertAlmostEqual(result.virial, 0.0, places=12)

    def test_pair_beyond_cutoff_does_not_interact(self):
        store = self._store([[0.0, 0.0, 0.0], [2.6, 0.0, 0.0]])
        self.assertEqual(self.model.potential(store), InteractionResult())

    def test_minimum_image_across_boundary(self):
        store = self._store([[-4.5, 0.0, 0.0], [4.5, 0.0, 0.0]])
        result = self.model.potential(store)
        e, w = lj_pair(1.0)
        self.assertAlmostEqual(result.energy, e, places=12)
        self.assertAlmostEqual(result.virial, w, places=12)

    def test_overlap_flagged(self):
        store = self._store([[0.0, 0.0, 0.0], [0.7, 0.0, 0.0]])
        self.assertTrue(self.model.potential(store).overlap)
        self.assertTrue(self.model.potential_1(store, store.get(1), 1).overlap)

    def test_coincident_particles_overlap(self):
        store = self._store([[1.0, 1.0, 1.0], [1.0, 1.0, 1.0]])
        self.assertTrue(self.model.potential(store).overlap)

    def test_insertion_index_sees_every_live_particle(self):
        store = self._store([[0.0, 0.0, 0.0], [1.5, 0.0, 0.0]])
        trial = np.array([0.0, 0.15, 0.0])
        result = self.model.potential_1(store, trial, store.n)
        e1, w1 = lj_pair(1.5)
        e2, w2 = lj_pair(np.hypot(1.5, 1.5))
        self.assertAlmostEqual(result.energy, e1 + e2, places=12)
        self.assertAlmostEqual(result.virial, w1 + w2, places=12)

    def test_system_energy_is_half_sum_of_single_particle_energies(self):
        rng = np.random.default_rng(7)
        grid = np.array([[x, y, z] for x in range(-4, 5, 2) for y in range(-4, 5, 2) for z in range(-4, 5, 2)], dtype=float)
        grid += rng.uniform(-0.1, 0.1, size=grid.shape)
        store = self._store(grid)
        system = self.model.potential(store)
        singles = [self.model.potential_1(store, store.get(i), i) for i in range(store.n)]
        self.assertFalse(system.overlap)
        self.assertAlmostEqual(system.energy, 0.5 * sum(s.energy for s in singles), places=9)
        self.assertAlmostEqual(system.virial, 0.5 * sum(s.virial for s in singles), places=9)

    def test_empty_and_single_particle_systems(self):
        self.assertEqual(self.model.potential(self._store(np.zeros((0, 3)))), InteractionResult())
        self.assertEqual(self.model.potential(self._store([[0.0, 0.0, 0.0]])), InteractionResult())

    def test_long_range_corrections(self):
        sr3 = 1.0 / 2.5**3
        density = 0.5
        self.assertAlmostEqual(
            self.model.potential_lrc(density), np.pi * ((8 / 9) * sr3**3 - (8 / 3) * sr3) * density
        )
        self.assertAlmostEqual(
            self.model.pressure_lrc(density), np.pi * ((32 / 9) * sr3**3 - (16 / 3) * sr3) * density**2
        )
        self.assertAlmostEqual(self.model.pressure_delta(density), np.pi * (8 / 3) * (sr3**3 - sr3) * density**2)
        self.assertLess(self.model.potential_lrc(density), 0.0)
        self.assertEqual(self.model.potential_lrc(0.0), 0.0)

    def test_cutoff_must_fit_in_half_box(self):
        with self.assertRaises(ConfigurationError):
            LennardJones(4.0, 2.5)
        with self.assertRaises(ConfigurationError):
            LennardJones(10.0, 0.0)

    def test_interaction_results_add(self):
        total = InteractionResult(1.0, 2.0) + InteractionResult(0.5, -1.0, overlap=True)
        self.assertEqual(total, InteractionResult(1.5, 1.0, True))


if __name__ == "__main__":
    unittest.main()
