import numpy as np
import matplotlib
matplotlib.use("Agg")

from zvt_mc import ZVTMC, BlockAverager
from zvt_mc.analysis import analyze_configurations, plot_block_averages
from zvt_mc.config_io import ConfigurationWriter, write_cnf_atoms

# Simple cubic starting lattice, 216 atoms, density ~0.42
box = 8.0
ticks = (np.arange(6) + 0.5) * box / 6 - box / 2
positions = np.array([[x, y, z] for x in ticks for y in ticks for z in ticks])
write_cnf_atoms('cnf.inp', len(positions), box, positions)

# Run zVT MC
print("Starting zVT MC...")
mc = ZVTMC.from_file(
    'cnf.inp',
    temperature=1.0,
    activity=0.1,
    prob_move=0.34,
    r_cut=2.5,
    dr_max=0.15,
    seed=81,
    averager=BlockAverager(blocks_csv='blocks.csv'),
    writer=ConfigurationWriter(prefix='cnf.', traj_file='zvt.traj'),
)
results = mc.run(nblock=10, nstep=200)

# Cluster sizes per saved block
summary = analyze_configurations([f'cnf.{blk:03d}' for blk in range(1, 11)], cutoff=1.5)
print(summary["n"], summary["largest_cluster"])
plot_block_averages('blocks.csv', 'blocks.png', names=["Density", "E/N (full)", "P (full)"])
