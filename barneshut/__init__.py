"""
Barnes-Hut tree code for approximating pairwise inverse-distance forces
(gravity, electrostatics) among point bodies in O(N log N).
"""

from .config import BhConfig
from .bodies import Body, BodyModel, snapshot
from .spatial import Cube, Node, Tree, build_tree
from .interaction import (
    run_bh,
    accelerations,
    direct_sum,
    inverse_square,
    softened_inverse_square,
    coulomb,
)
from .simulation import Simulation

__version__ = "1.0.0"
