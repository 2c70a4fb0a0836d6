from .layers import linear, dropout
from .activations import sigmoid, tanh
