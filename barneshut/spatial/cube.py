"""
Cubical bounding volume used as the extent of the octree and its nodes.
"""

import numpy as np

from ..bodies import snapshot
from .kernels import compute_bounds, get_octant

# Added to the max bound of a degenerate axis so the dividing plane does not
# pass through every body.
DEGENERATE_AXIS_OFFSET = 1e-5

_CUBE_DTYPE = np.dtype([('center', '<f8', (3,)), ('width', '<f8')])

# Every combination of - and + for the child center offset. Row k is the
# sign vector of octant k: bit 0 is x, bit 1 is y, bit 2 is z.
_OCTANT_SIGNS = np.array(
    [[1 if k & 1 else -1, 1 if k & 2 else -1, 1 if k & 4 else -1] for k in range(8)],
    dtype=np.float64,
)


class Cube:
    '''
    A cubical region: length = width = depth.

    Parameters
    ----------
    center : array_like
        Center point, shape (3,).
    width : float
        Edge length.
    '''

    def __init__(self, center, width):
        self.center = np.asarray(center, dtype=np.float64).reshape(3)
        self.width = float(width)

    def __repr__(self):
        c = self.center
        return f"Cube(center=({c[0]:.4g}, {c[1]:.4g}, {c[2]:.4g}), width={self.width:.4g})"

    def __eq__(self, other):
        if not isinstance(other, Cube):
            return NotImplemented
        return self.width == other.width and np.array_equal(self.center, other.center)

    @classmethod
    def from_bodies(cls, bodies, pad=0.0, degenerate_axis=None):
        '''
        Smallest cube enclosing all bodies, see `from_positions`.

        Returns None when `bodies` is empty.
        '''
        if len(bodies) == 0:
            return None
        positions, _ = snapshot(bodies)
        return cls.from_positions(positions, pad=pad, degenerate_axis=degenerate_axis)

    @classmethod
    def from_positions(cls, positions, pad=0.0, degenerate_axis=None):
        '''
        Construct a cube that encompasses all positions.

        Run this each time the bodies move, or use a pad and rebuild at a
        coarser interval: the pad lets one cube stay valid for several
        timesteps while bodies drift.

        Parameters
        ----------
        positions : array_like
            Shape (N, 3).
        pad : float, optional
            Distance added on every side. Default is 0.
        degenerate_axis : int, optional
            Axis (0, 1 or 2) along which all bodies share one coordinate,
            e.g. 2 for planar simulations with z = 0. Its max bound is raised
            by DEGENERATE_AXIS_OFFSET so bodies do not sit on the dividing
            plane.

        Returns
        -------
        Cube or None
            None when there are no positions.
        '''
        if pad < 0:
            raise ValueError(f"pad must be non-negative, got {pad}")
        if degenerate_axis is not None and degenerate_axis not in (0, 1, 2):
            raise ValueError(f"degenerate_axis must be 0, 1, 2 or None, got {degenerate_axis}")
        positions = np.ascontiguousarray(positions, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"positions must have shape (N, 3), got {positions.shape}")
        if positions.shape[0] == 0:
            return None

        mins, maxs = compute_bounds(positions)
        mins = mins - pad
        maxs = maxs + pad
        if degenerate_axis is not None:
            maxs[degenerate_axis] += DEGENERATE_AXIS_OFFSET

        # Coerce to a cube.
        width = max(maxs - mins)
        center = (mins + maxs) / 2
        return cls(center, width)

    def divide_into_octants(self):
        '''
        Split into 8 equal child cubes.

        The order matches `octant_index`, so child k holds the bodies whose
        octant index is k.
        '''
        quarter = self.width / 4
        return [Cube(self.center + quarter * signs, self.width / 2) for signs in _OCTANT_SIGNS]

    def octant_index(self, point):
        '''3-bit octant index of a point relative to the center.'''
        x, y, z = point
        c = self.center
        return get_octant(float(x), float(y), float(z), c[0], c[1], c[2])

    def bounds(self):
        '''Return (mins, maxs) corner arrays.'''
        half = self.width / 2
        return self.center - half, self.center + half

    def contains(self, point):
        '''True if the point lies inside or on the boundary.'''
        return bool(np.all(np.abs(np.asarray(point, dtype=np.float64) - self.center) <= self.width / 2))

    def to_bytes(self):
        '''Encode as 32 little-endian bytes (3 x float64 center, float64 width).'''
        record = np.zeros(1, dtype=_CUBE_DTYPE)
        record['center'][0] = self.center
        record['width'][0] = self.width
        return record.tobytes()

    @classmethod
    def from_bytes(cls, data):
        '''Decode a cube written by `to_bytes`.'''
        if len(data) != _CUBE_DTYPE.itemsize:
            raise ValueError(f"expected {_CUBE_DTYPE.itemsize} bytes, got {len(data)}")
        record = np.frombuffer(data, dtype=_CUBE_DTYPE)[0]
        return cls(np.array(record['center']), float(record['width']))
