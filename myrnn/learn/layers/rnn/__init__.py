from .cell import *
from .cell import __all__ as _cell_all
from .rnn import RNN

__all__ = ["RNN", *_cell_all]
