from .basic import reshape, transpose, exp, sum, mean, chunk, concatenate, stack
from . import rnn

__all__ = [
    "reshape",
    "transpose",
    "exp",
    "sum",
    "mean",
    "chunk",
    "concatenate",
    "stack",
]
