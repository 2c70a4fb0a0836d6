from .modules import *
from . import functional
from . import initializations
