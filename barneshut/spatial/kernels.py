"""
Numba-compiled numeric kernels for tree construction.

Array-in, array-out helpers for the hot loops of the octree: bounds,
octant assignment and mass aggregation, plus an exact inverse-square
direct summation used as a reference for the tree approximation.
"""

import numpy as np
from numba import njit, prange

_EPS = np.finfo(np.float64).eps


@njit(fastmath=True)
def compute_bounds(positions):
    """Compute per-axis min and max for positions of shape (N, 3)."""
    mins = np.empty(3, dtype=np.float64)
    maxs = np.empty(3, dtype=np.float64)

    for d in range(3):
        mins[d] = positions[0, d]
        maxs[d] = positions[0, d]
        for i in range(1, positions.shape[0]):
            if positions[i, d] < mins[d]:
                mins[d] = positions[i, d]
            if positions[i, d] > maxs[d]:
                maxs[d] = positions[i, d]

    return mins, maxs


@njit
def get_octant(x, y, z, xmid, ymid, zmid):
    """
    Determine which octant a point belongs to.

    Bit 0 is set iff x > xmid, bit 1 iff y > ymid, bit 2 iff z > zmid.
    A point on a dividing plane falls to the lower side.
    """
    octant = 0
    if x > xmid:
        octant |= 1
    if y > ymid:
        octant |= 2
    if z > zmid:
        octant |= 4
    return octant


@njit
def octant_indices(positions, center):
    """
    Octant index (0-7) for every row of positions.

    Parameters
    ----------
    positions : ndarray
        Shape (N, 3)
    center : ndarray
        Shape (3,), the dividing point

    Returns
    -------
    octants : ndarray
        Shape (N,), int64
    """
    n = positions.shape[0]
    octants = np.empty(n, dtype=np.int64)
    for i in range(n):
        octants[i] = get_octant(
            positions[i, 0], positions[i, 1], positions[i, 2],
            center[0], center[1], center[2],
        )
    return octants


@njit(fastmath=True)
def center_of_mass(positions, masses):
    """
    Total mass and mass-weighted centroid of a set of bodies.

    When the total mass is numerically zero the unweighted centroid is
    returned instead, so the result is always finite.

    Returns
    -------
    com : ndarray
        Shape (3,)
    total_mass : float
    """
    n = positions.shape[0]
    com = np.zeros(3, dtype=np.float64)
    plain = np.zeros(3, dtype=np.float64)
    total_mass = 0.0

    for i in range(n):
        m = masses[i]
        total_mass += m
        for d in range(3):
            com[d] += positions[i, d] * m
            plain[d] += positions[i, d]

    if abs(total_mass) > _EPS:
        for d in range(3):
            com[d] /= total_mass
    elif n > 0:
        for d in range(3):
            com[d] = plain[d] / n

    return com, total_mass


@njit(parallel=True, fastmath=True)
def direct_accelerations(positions, masses, g=1.0, softening=0.0):
    """
    Exact inverse-square accelerations by direct summation.

    This is O(N^2) with a parallel loop over targets. Coincident pairs
    without softening are skipped.

    Parameters
    ----------
    positions : ndarray
        Body positions, shape (N, 3)
    masses : ndarray
        Body masses (or charges), shape (N,)
    g : float
        Coupling constant
    softening : float
        Plummer softening length

    Returns
    -------
    accs : ndarray
        Acceleration on each body, shape (N, 3)
    """
    N = positions.shape[0]
    accs = np.zeros((N, 3), dtype=np.float64)
    eps2 = softening * softening

    for i in prange(N):
        ax, ay, az = 0.0, 0.0, 0.0
        xi, yi, zi = positions[i, 0], positions[i, 1], positions[i, 2]

        for j in range(N):
            if i != j:
                dx = positions[j, 0] - xi
                dy = positions[j, 1] - yi
                dz = positions[j, 2] - zi

                r2 = dx*dx + dy*dy + dz*dz + eps2
                if r2 > 0.0:
                    r_inv3 = 1.0 / (r2 * np.sqrt(r2))
                    prefactor = g * masses[j] * r_inv3
                    ax += prefactor * dx
                    ay += prefactor * dy
                    az += prefactor * dz

        accs[i, 0] = ax
        accs[i, 1] = ay
        accs[i, 2] = az

    return accs
