import math
from ..tensor import zeros_like, ones_like, rand_like

### INPLACE INITS ###
def zeros_(tensor):
    tensor.data = zeros_like(tensor).data

def ones_(tensor):
    tensor.data = ones_like(tensor).data

def constant_(tensor, value):
    tensor.data = (zeros_like(tensor).data + value).astype(str(tensor.dtype))

def uniform_(tensor, low=0.0, high=1.0, generator=None):
    arr = rand_like(tensor, generator=generator).data * (high - low) + low
    tensor.data = arr.astype(str(tensor.dtype))

def xavier_uniform_(tensor, gain=1.0, generator=None):
    fan_in, fan_out = _calculate_fan_in_out(tensor.shape)
    limit = gain * math.sqrt(6.0 / (fan_in + fan_out))
    uniform_(tensor, -limit, limit, generator=generator)

def _calculate_fan_in_out(shape):
    ### rnn kernels are stored (in, out), unlike Linear weights which are (out, in) ###
    if len(shape) == 2:
        fan_in, fan_out = shape[0], shape[1]
    else:
        fan_in = fan_out = 1
    return fan_in, fan_out
