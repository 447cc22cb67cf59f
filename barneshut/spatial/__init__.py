from .cube import Cube, DEGENERATE_AXIS_OFFSET
from .tree import Node, Tree, build_tree, MIN_DISTANCE
from .kernels import (
    compute_bounds,
    octant_indices,
    center_of_mass,
    direct_accelerations,
)
