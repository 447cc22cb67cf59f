import logging

import numpy as np
from tqdm import tqdm

from .config import BhConfig
from .spatial import Cube, Tree
from .interaction import accelerations, inverse_square
from .integration import leapfrogStep

logger = logging.getLogger(__name__)


class Simulation:
    def __init__(self, config=None, force_fn=None, pad=0.0, workers=None):
        """
        Example caller of the tree code: rebuilds the cube and tree at every
        step and integrates with leapfrog.

        Parameters
        ----------
        config : BhConfig, optional
            Tree settings. Default is BhConfig().
        force_fn : callable, optional
            Acceleration law `(direction, mass_src, distance) -> (3,)`.
            Default is inverse_square() with G = 1.
        pad : float, optional
            Padding applied to the bounding cube each step.
        workers : int, optional
            Threads used to evaluate bodies concurrently.
        """
        self.config = config or BhConfig()
        self.force_fn = force_fn or inverse_square()
        self.pad = pad
        self.workers = workers
        self.tree = None
        self.positions = None
        self.velocities = None
        self.masses = None
        self.nParticles = 0

    def run(self, positions, velocities, masses, ts, progress=True):
        '''
        Run the simulation. Integrates bodies forward in time.

        Parameters
        ----------
        positions : array_like
            Initial positions, shape (N, 3) or (N, 2).
        velocities : array_like
            Initial velocities, same shape as positions.
        masses : array_like
            Masses, shape (N,).
        ts : array_like
            Equally spaced times at which to return the state; ts[0] is the
            initial time.
        progress : bool, optional
            Show a tqdm progress bar. Default is True.

        Returns
        -------
        qs : ndarray
            Positions at each time in ts, shape (len(ts), N, D).
        vs : ndarray
            Velocities at each time in ts, shape (len(ts), N, D).
        '''
        q0 = np.asarray(positions, dtype=np.float64)
        v0 = np.asarray(velocities, dtype=np.float64)
        masses = np.asarray(masses, dtype=np.float64)
        ts = np.asarray(ts, dtype=np.float64)
        if q0.shape != v0.shape:
            raise ValueError(f"positions {q0.shape} and velocities {v0.shape} differ in shape")
        if q0.ndim != 2 or q0.shape[1] not in (2, 3):
            raise ValueError(f"positions must have shape (N, 2) or (N, 3), got {q0.shape}")
        if len(ts) < 2:
            raise ValueError("ts needs at least two times")

        self.masses = masses
        self.nParticles = len(masses)
        # Track original dimensionality for 2D simulations
        original_ndim = q0.shape[1]

        qs, vs = np.zeros((*ts.shape, *q0.shape)), np.zeros((*ts.shape, *v0.shape))
        qs[0], vs[0] = q0, v0
        dt = ts[1] - ts[0]

        def accel(q):
            # The tree needs 3D - pad 2D positions onto the z = 0 plane
            if original_ndim == 2:
                q_3d = np.column_stack([q, np.zeros(len(q))])
                cube = Cube.from_positions(q_3d, pad=self.pad, degenerate_axis=2)
            else:
                q_3d = q
                cube = Cube.from_positions(q_3d, pad=self.pad)
            self.tree = Tree().build(q_3d, masses, cube, self.config)  # rebuild tree at HALF-STEP positions
            acc = accelerations(q_3d, self.tree, self.config, self.force_fn, workers=self.workers)
            return acc[:, :original_ndim]

        for i in tqdm(range(1, len(ts)), disable=not progress):
            qs[i], vs[i] = leapfrogStep(qs[i-1], vs[i-1], dt, accel)

        logger.debug("Integrated %d bodies over %d steps", self.nParticles, len(ts) - 1)
        self.positions, self.velocities = qs, vs
        return qs, vs

    def x(self, t_index):
        return self.positions[t_index, :, 0]

    def y(self, t_index):
        return self.positions[t_index, :, 1]

    def z(self, t_index):
        return self.positions[t_index, :, 2]

    def vx(self, t_index):
        return self.velocities[t_index, :, 0]

    def vy(self, t_index):
        return self.velocities[t_index, :, 1]

    def vz(self, t_index):
        return self.velocities[t_index, :, 2]
