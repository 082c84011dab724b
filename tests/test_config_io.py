import os
import tempfile
import unittest

import numpy as np
from ase.io import read, write

from zvt_mc.base import ConfigurationError
from zvt_mc.config_io import ConfigurationWriter, read_cnf_atoms, to_atoms, write_cnf_atoms


class ConfigIOTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.positions = np.array([[0.5, -1.25, 2.0], [-3.0, 0.0, 1.123456789], [4.0, 4.0, -4.0]])

    def tearDown(self):
        self.tmp.cleanup()

    def path(self, name):
        return os.path.join(self.tmp.name, name)

    def test_write_then_read(self):
        write_cnf_atoms(self.path("cnf.inp"), 3, 9.5, self.positions)
        with open(self.path("cnf.inp")) as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0].strip(), "3")
        self.assertEqual(lines[1].strip(), "9.50000000")
        n, box, positions = read_cnf_atoms(self.path("cnf.inp"))
        self.assertEqual(n, 3)
        self.assertEqual(box, 9.5)
        np.testing.assert_allclose(positions, self.positions, atol=1e-10)

    def test_empty_configuration(self):
        write_cnf_atoms(self.path("cnf.empty"), 0, 5.0, np.zeros((0, 3)))
        n, box, positions = read_cnf_atoms(self.path("cnf.empty"))
        self.assertEqual((n, box, positions.shape), (0, 5.0, (0, 3)))

    def test_malformed_files(self):
        cases = {
            "cnf.header": "abc\n5.0\n",
            "cnf.short": "3\n5.0\n0.0 0.0 0.0\n",
            "cnf.columns": "1\n5.0\n0.0 0.0\n",
            "cnf.box": "1\n-5.0\n0.0 0.0 0.0\n",
        }
        for name, text in cases.items():
            with open(self.path(name), "w") as f:
                f.write(text)
            with self.assertRaises(ConfigurationError, msg=name):
                read_cnf_atoms(self.path(name))

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            read_cnf_atoms(self.path("cnf.nothere"))

    def test_mismatched_count_on_write(self):
        with self.assertRaises(ValueError):
            write_cnf_atoms(self.path("cnf.bad"), 4, 5.0, self.positions)

    def test_ase_formats(self):
        atoms = to_atoms(self.positions, 10.0)
        self.assertEqual(len(atoms), 3)
        self.assertTrue(all(atoms.pbc))
        np.testing.assert_allclose(atoms.cell.array, 10.0 * np.eye(3))

        write(self.path("start.extxyz"), atoms)
        n, box, positions = read_cnf_atoms(self.path("start.extxyz"))
        self.assertEqual((n, box), (3, 10.0))
        np.testing.assert_allclose(positions, self.positions)

        atoms.set_cell([10.0, 10.0, 12.0])
        write(self.path("slab.extxyz"), atoms)
        with self.assertRaises(ConfigurationError):
            read_cnf_atoms(self.path("slab.extxyz"))

    def test_writer_converts_to_absolute_units(self):
        writer = ConfigurationWriter(prefix=self.path("cnf."), traj_file=self.path("run.traj"))
        relative = self.positions / 10.0
        filename = writer.write("001", 10.0, relative)
        writer.append_frame(10.0, relative, block=1)
        writer.append_frame(10.0, relative[:2], block=2)
        writer.close()

        self.assertEqual(filename, self.path("cnf.001"))
        _, _, positions = read_cnf_atoms(filename)
        np.testing.assert_allclose(positions, self.positions, atol=1e-10)
        frames = read(self.path("run.traj"), index=":")
        self.assertEqual([len(f) for f in frames], [3, 2])

    def test_writer_without_trajectory(self):
        writer = ConfigurationWriter(prefix=self.path("cnf."))
        writer.append_frame(10.0, self.positions / 10.0)
        writer.close()
        self.assertFalse(os.path.exists(self.path("run.traj")))


if __name__ == "__main__":
    unittest.main()
