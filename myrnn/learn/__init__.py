from .mode import Mode, TRAINING, EVALUATION, INFERENCE
from .layers import *
