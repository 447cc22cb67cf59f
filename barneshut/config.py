"""
Configuration for Barnes-Hut tree construction and traversal.
"""

import math
from dataclasses import dataclass

import numpy as np

_CONFIG_DTYPE = np.dtype([
    ('theta', '<f8'),
    ('max_bodies_per_node', '<u8'),
    ('max_tree_depth', '<u8'),
])


@dataclass(frozen=True)
class BhConfig:
    '''
    Accuracy and termination settings shared by tree building and evaluation.

    Parameters
    ----------
    theta : float
        Opening criterion. 0 disables grouping (exact all-pairs); larger
        values accept coarser aggregates. Default is 0.5.
    max_bodies_per_node : int
        A node holding this many bodies or fewer is not subdivided. Default is 1.
    max_tree_depth : int
        Hard limit on subdivision depth, for coincident or tightly
        clustered bodies. Default is 15.
    '''
    theta: float = 0.5
    max_bodies_per_node: int = 1
    max_tree_depth: int = 15

    def __post_init__(self):
        if not math.isfinite(self.theta) or self.theta < 0:
            raise ValueError(f"theta must be finite and >= 0, got {self.theta}")
        if int(self.max_bodies_per_node) != self.max_bodies_per_node or self.max_bodies_per_node < 0:
            raise ValueError(f"max_bodies_per_node must be a non-negative integer, got {self.max_bodies_per_node}")
        if int(self.max_tree_depth) != self.max_tree_depth or self.max_tree_depth < 0:
            raise ValueError(f"max_tree_depth must be a non-negative integer, got {self.max_tree_depth}")

    def to_bytes(self):
        '''Encode as 24 little-endian bytes (float64, uint64, uint64).'''
        record = np.array(
            [(self.theta, self.max_bodies_per_node, self.max_tree_depth)],
            dtype=_CONFIG_DTYPE,
        )
        return record.tobytes()

    @classmethod
    def from_bytes(cls, data):
        '''Decode a config written by `to_bytes`.'''
        if len(data) != _CONFIG_DTYPE.itemsize:
            raise ValueError(f"expected {_CONFIG_DTYPE.itemsize} bytes, got {len(data)}")
        record = np.frombuffer(data, dtype=_CONFIG_DTYPE)[0]
        return cls(
            theta=float(record['theta']),
            max_bodies_per_node=int(record['max_bodies_per_node']),
            max_tree_depth=int(record['max_tree_depth']),
        )
