from .rnn_cell import RNNCell, CellInstance
from .basic_rnn_cell import BasicRNNCell
from .basic_lstm_cell import BasicLSTMCell
from .gru_cell import GRUCell
from .dropout_rnn_cell import DropoutRNNCell
from .multi_cell import MultiCell
from .residual_cell import ResidualCell

__all__ = [
    "RNNCell",
    "CellInstance",
    "BasicRNNCell",
    "BasicLSTMCell",
    "GRUCell",
    "DropoutRNNCell",
    "MultiCell",
    "ResidualCell",
]
