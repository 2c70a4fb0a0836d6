from .sigmoid import sigmoid
from .tanh import tanh
