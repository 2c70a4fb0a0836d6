from .base_module import Module
from .layers import *

### Only make visible the modules we actually want ###
__all__ = [
    "Module",
    *layers.__all__,
]
