from .dropout import dropout
from .linear import linear
