from collections import defaultdict
from myrnn.config import load_config
from myrnn.nn.modules.base_module import Module

### Process-wide count of how often each layer name has been used ###
_LAYER_NAME_COUNTS = defaultdict(int)

def unique_layer_name(name):
    """
    First use of a name keeps it, later uses get "_1", "_2", ... appended.
    """
    count = _LAYER_NAME_COUNTS[name]
    _LAYER_NAME_COUNTS[name] += 1
    return name if count == 0 else f"{name}_{count}"

def reset_layer_names():
    _LAYER_NAME_COUNTS.clear()

class Layer(Module):
    """
    Module with a name. `name` is what the user asked for, `uniquified_name`
    is made unique among all layers created so far and is what ops built
    by this layer get named after.
    """
    layer_type = "Layer"

    def __init__(self, name, device=None, dtype=None):
        super().__init__()
        config = load_config() if device is None or dtype is None else {}
        self.name = name
        self.uniquified_name = unique_layer_name(name)
        self.device = device if device is not None else config["device"]
        self.dtype = dtype if dtype is not None else config["dtype"]

    def _extra_repr(self):
        return f"name={self.uniquified_name}"

    def to(self, device):
        self.device = device
        return super().to(device)
