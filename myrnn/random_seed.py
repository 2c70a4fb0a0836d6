"""
Random seeds work in pairs: a graph-level seed (set once with
manual_seed) and an op-level seed (passed to an individual op like
dropout). Together they pin down a generator, so the same program
with the same seeds draws the same random numbers.

    graph seed | op seed | result
    -----------+---------+---------------------------------------
    set        | None    | (graph seed, next value of a counter)
    None       | set     | (DEFAULT_GRAPH_SEED, op seed)
    set        | set     | (graph seed, op seed)
    None       | None    | (None, None) -> global random state
"""

import hashlib
import numpy as np
from ._array import CUDA_AVAILABLE, cp, get_xp, parse_device

DEFAULT_GRAPH_SEED = 87654321
MAXINT32 = 2**31 - 1

_graph_seed = None
_op_counter = 0

def manual_seed(seed):
    """
    Set the graph-level seed and reseed the global numpy/cupy generators.
    Passing None clears the graph-level seed.
    """
    global _graph_seed, _op_counter
    _graph_seed = None if seed is None else int(seed)
    _op_counter = 0

    if _graph_seed is not None:
        np.random.seed(_graph_seed & 0xFFFFFFFF)
        if CUDA_AVAILABLE:
            cp.random.seed(seed=_graph_seed)

def initial_seed():
    return _graph_seed

def get_seed(op_seed=None):
    global _op_counter

    if _graph_seed is not None:
        if op_seed is None:
            op_seed = _op_counter
            _op_counter += 1
        seeds = (_graph_seed, int(op_seed))
    elif op_seed is not None:
        seeds = (DEFAULT_GRAPH_SEED, int(op_seed))
    else:
        seeds = (None, None)

    ### (0, 0) would mean "nondeterministic" in a lot of backends ###
    if seeds == (0, 0):
        seeds = (0, MAXINT32)

    return seeds

def derive_seed(seed, salt):
    """
    Deterministically derive a new seed from `seed` and a string salt,
    so one user seed can feed several independent random sites.
    """
    if seed is None:
        return None
    digest = hashlib.md5(f"{salt}{seed}".encode()).hexdigest()
    return int(digest[:8], 16) & MAXINT32

def generator(op_seed=None, device="cpu"):
    """
    Build a RandomState for the seed pair resolved from `op_seed`, or
    return None (use the global random state) when nothing is seeded.
    """
    graph_seed, op_seed = get_seed(op_seed)
    if graph_seed is None:
        return None

    combined = (graph_seed * 1000003 + op_seed) % (2**32)
    xp = get_xp(device)
    if xp is np:
        return np.random.RandomState(combined)

    with cp.cuda.Device(parse_device(device)[1]):
        return cp.random.RandomState(combined)
