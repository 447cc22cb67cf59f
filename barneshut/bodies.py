"""
Body capability contract.

The tree only ever reads a position and a scalar weight from caller-owned
bodies. Anything exposing `position` and `mass` works; `mass` may just as
well be a charge.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class BodyModel(Protocol):
    """Minimal body interface needed to build a tree."""

    @property
    def position(self): ...

    @property
    def mass(self) -> float: ...


@dataclass
class Body:
    """A point body with position and mass (or charge)."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    mass: float = 1.0

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)


def snapshot(bodies):
    '''
    Capture positions and weights of bodies into contiguous arrays.

    Parameters
    ----------
    bodies : sequence of BodyModel
        Caller-owned bodies. Identity of each body is its index here.

    Returns
    -------
    positions : ndarray
        Shape (N, 3), float64.
    masses : ndarray
        Shape (N,), float64.
    '''
    n = len(bodies)
    positions = np.empty((n, 3), dtype=np.float64)
    masses = np.empty(n, dtype=np.float64)
    for i, body in enumerate(bodies):
        positions[i] = np.asarray(body.position, dtype=np.float64).reshape(3)
        masses[i] = body.mass
    return check_arrays(positions, masses)


def check_arrays(positions, masses):
    '''Validate and coerce position/mass arrays. Raises ValueError.'''
    positions = np.ascontiguousarray(positions, dtype=np.float64)
    masses = np.ascontiguousarray(masses, dtype=np.float64)
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(f"positions must have shape (N, 3), got {positions.shape}")
    if masses.shape != (positions.shape[0],):
        raise ValueError(f"masses must have shape ({positions.shape[0]},), got {masses.shape}")
    if not np.all(np.isfinite(positions)):
        raise ValueError("positions must be finite")
    if not np.all(np.isfinite(masses)) or np.any(masses < 0):
        raise ValueError("masses must be finite and non-negative")
    return positions, masses
