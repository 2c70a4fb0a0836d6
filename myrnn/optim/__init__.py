from .optimizers import Optimizer, SGD
