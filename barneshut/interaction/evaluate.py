"""
Force and acceleration accumulation over a built tree.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from tqdm import tqdm

from ..config import BhConfig
from ..spatial.tree import MIN_DISTANCE

logger = logging.getLogger(__name__)

_ZERO_VEC = np.zeros(3)


def _contribution(node, posit_target, force_fn):
    '''Force from one accepted node, or the zero vector when coincident.'''
    diff = node.center_of_mass - posit_target
    dist = np.sqrt(np.dot(diff, diff))
    if dist <= MIN_DISTANCE:
        return _ZERO_VEC
    return np.asarray(force_fn(diff / dist, node.mass, dist), dtype=np.float64)


def run_bh(posit_target, id_target, tree, config, force_fn, executor=None):
    '''
    Calculate force using the Barnes-Hut algorithm.

    Parameters
    ----------
    posit_target : array_like
        Query position, shape (3,).
    id_target : int or None
        Index of the target body in the array the tree was built from; nodes
        containing it are never used, which prevents self-interaction. Pass
        None for an arbitrary query point.
    tree : Tree
    config : BhConfig
    force_fn : callable
        `force_fn(direction, mass_src, distance) -> (3,)`, where direction is
        the unit vector from the target toward the source. Handle the
        target's own mass or charge inside force_fn, not here.
    executor : concurrent.futures.Executor, optional
        When given, force_fn calls are fanned out with `executor.map` and
        summed. Summation order is then not fixed.

    Returns
    -------
    ndarray
        Resultant vector, shape (3,).
    '''
    config = config or BhConfig()
    target = np.asarray(posit_target, dtype=np.float64).reshape(3)
    leaves = tree.leaves(target, config, exclude_id=id_target)

    if executor is None:
        contributions = (_contribution(leaf, target, force_fn) for leaf in leaves)
    else:
        contributions = executor.map(lambda leaf: _contribution(leaf, target, force_fn), leaves)

    total = np.zeros(3)
    for vec in contributions:
        total += vec
    return total


def accelerations(positions, tree, config, force_fn, workers=None, progress=False):
    '''
    Evaluate `run_bh` for every body the tree was built from.

    Parameters
    ----------
    positions : array_like
        Positions used to build the tree, shape (N, 3). Row i is body i.
    tree : Tree
    config : BhConfig
    force_fn : callable
        See `run_bh`.
    workers : int, optional
        Number of threads evaluating bodies concurrently. None or 1 runs
        serially.
    progress : bool, optional
        Show a tqdm progress bar. Default is False.

    Returns
    -------
    ndarray
        Shape (N, 3).
    '''
    positions = np.asarray(positions, dtype=np.float64)
    n = positions.shape[0]
    result = np.zeros((n, 3))

    def _one(i):
        return run_bh(positions[i], i, tree, config, force_fn)

    if workers is None or workers <= 1:
        for i in tqdm(range(n), disable=not progress):
            result[i] = _one(i)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for i, vec in enumerate(tqdm(pool.map(_one, range(n)), total=n, disable=not progress)):
                result[i] = vec

    logger.debug("Evaluated %d targets against %d nodes", n, len(tree))
    return result


def direct_sum(positions, masses, force_fn):
    '''
    Exact all-pairs summation with the same force_fn contract as `run_bh`.

    O(N^2). Coincident pairs contribute nothing.

    Parameters
    ----------
    positions : array_like
        Shape (N, 3).
    masses : array_like
        Shape (N,).
    force_fn : callable
        See `run_bh`.

    Returns
    -------
    ndarray
        Shape (N, 3).
    '''
    positions = np.asarray(positions, dtype=np.float64)
    masses = np.asarray(masses, dtype=np.float64)
    n = positions.shape[0]
    result = np.zeros((n, 3))
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            r_vec = positions[j] - positions[i]
            dist = np.sqrt(np.dot(r_vec, r_vec))
            if dist <= MIN_DISTANCE:
                continue
            result[i] += force_fn(r_vec / dist, masses[j], dist)
    return result
