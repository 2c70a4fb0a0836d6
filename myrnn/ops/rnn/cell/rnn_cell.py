"""
Operational RNN cells.

An operational cell is a plain callable over tensors: it is handed a
Tuple(output=input, state=state) for one time step and returns a
Tuple(output, state) for the next one. It does not own its parameters,
it only references the tensors it was built with. The layer cells in
myrnn.learn create the parameters and build these.
"""

from collections import namedtuple
from myrnn import Tensor, zeros

Tuple = namedtuple("Tuple", ["output", "state"])
LSTMState = namedtuple("LSTMState", ["c", "m"])

def is_supported(structure):
    """
    Structures the rnn ops know how to walk: a Tensor, an LSTMState,
    or (nested) tuples and lists of those.
    """
    if isinstance(structure, Tensor):
        return True
    if isinstance(structure, (tuple, list)):
        return all(is_supported(s) for s in structure)
    return False

def map_structure(fn, *structures):
    """
    Apply `fn` leaf-wise over one or more structures of the same shape.
    """
    first = structures[0]
    if isinstance(first, Tensor):
        return fn(*structures)

    if isinstance(first, (tuple, list)):
        if any(len(s) != len(first) for s in structures):
            raise ValueError("Structures passed to map_structure must have the same length")
        mapped = [map_structure(fn, *parts) for parts in zip(*structures)]
        if hasattr(first, "_fields"):
            return type(first)(*mapped)
        return type(first)(mapped)

    raise TypeError(f"Unsupported structure type {type(first).__name__}, "
                    f"expected Tensor, LSTMState, tuple or list")

def _zeros_for(size, batch_size, dtype, device):
    if isinstance(size, int):
        return zeros((batch_size, size), dtype=dtype, device=device)
    mapped = [_zeros_for(s, batch_size, dtype, device) for s in size]
    if hasattr(size, "_fields"):
        return type(size)(*mapped)
    return type(size)(mapped)

class RNNCell:
    def __init__(self, name="RNNCell"):
        self.name = name

    @property
    def output_size(self):
        raise NotImplementedError

    @property
    def state_size(self):
        raise NotImplementedError

    def zero_state(self, batch_size, dtype="float32", device="cpu"):
        return _zeros_for(self.state_size, batch_size, dtype, device)

    def forward(self, input):
        raise NotImplementedError

    def __call__(self, input):
        if not isinstance(input, Tuple):
            input = Tuple(*input)
        return self.forward(input)

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name}, output_size={self.output_size})"
