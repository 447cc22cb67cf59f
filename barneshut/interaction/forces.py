"""
Stock force laws for `run_bh`.

Each factory returns a function `(direction, weight, distance) -> ndarray`
where `direction` is the unit vector from the target toward the source.
"""

import numpy as np

__all__ = ["G", "COULOMB_K", "inverse_square", "softened_inverse_square", "coulomb"]

G = 1.0  # Gravitational constant, internal units
COULOMB_K = 8.9875517923e9  # N m^2 / C^2


def inverse_square(g=G):
    '''Attractive acceleration g * m / r^2 toward the source.'''
    def force_fn(direction, mass, dist):
        return direction * (g * mass / (dist * dist))
    return force_fn


def softened_inverse_square(softening, g=G):
    '''
    Plummer-softened attraction g * m * r / (r^2 + eps^2)^(3/2).

    Parameters
    ----------
    softening : float
        Softening length eps, >= 0.
    g : float
        Coupling constant.
    '''
    if softening < 0:
        raise ValueError(f"softening must be non-negative, got {softening}")
    eps2 = softening * softening

    def force_fn(direction, mass, dist):
        r2 = dist * dist + eps2
        return direction * (g * mass * dist / (r2 * np.sqrt(r2)))
    return force_fn


def coulomb(k=COULOMB_K, charge=1.0):
    '''
    Electrostatic force on a target of charge `charge` from a source charge.

    Like charges repel, so the result points away from the source.
    '''
    def force_fn(direction, q_src, dist):
        return -direction * (k * charge * q_src / (dist * dist))
    return force_fn
