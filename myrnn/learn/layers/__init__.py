from .layer import Layer, unique_layer_name, reset_layer_names
from .rnn import *
from .rnn import __all__ as _rnn_all

__all__ = [
    "Layer",
    "unique_layer_name",
    "reset_layer_names",
    *_rnn_all,
]
