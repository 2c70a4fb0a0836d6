from . import cell
from .rnn import dynamic_rnn
