import os
from ._array import CUDA_AVAILABLE

##### QUICK ENABLE FOR TENSOR CORE OPS ###
if CUDA_AVAILABLE:
    import cupy as cp
    cc_major, cc_minor = cp.cuda.Device().compute_capability
    if int(cc_major) >= 8:
        os.environ["CUPY_TF32"] = "1"
##########################################

from .tensor import Tensor, no_grad, tensor, zeros, ones, full, randn, rand, \
    zeros_like, ones_like, rand_like

from .dtypes import float16, float32, float64, int32, int64
from .errors import InvalidArgumentError
from .random_seed import manual_seed, initial_seed
from .ops import *
from . import nn
from . import learn
from . import optim
from .learn import Mode
from .save_load import save, load
from .config import load_config

### A seed in the config file / MYRNN_SEED makes every run reproducible ###
_startup_seed = load_config()["seed"]
if _startup_seed is not None:
    manual_seed(_startup_seed)
