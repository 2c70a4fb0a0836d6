import numpy as np
from myrnn import Tensor

class Module:
    def __init__(self):

        self._parameters = {}
        self._modules = {}
        self.training = True

    def __setattr__(self, name, value):

        if "_modules" not in self.__dict__:
            if isinstance(value, (Module, Tensor)):
                raise RuntimeError(
                    f"Cannot assign {type(value).__name__} to '{name}' "
                    "before calling super().__init__() in your Module subclass."
                )
            return object.__setattr__(self, name, value)

        # Register parameters
        if isinstance(value, Tensor):
            self._parameters[name] = value

        # Register submodules
        elif isinstance(value, Module):
            self._modules[name] = value

        return object.__setattr__(self, name, value)

    def parameters(self, memo=None):

        """
        Returns a generator of parameters and only returns unique tensors.
        A cell shared by two wrappers only shows up once!
        """

        if memo is None:
            memo = set()

        for param in self._parameters.values():
            if param is not None and id(param) not in memo:
                memo.add(id(param))
                yield param

        for module in self._modules.values():
            yield from module.parameters(memo)

    def named_parameters(self, prefix="", memo=None):

        """
        Same as parameters, but we also return the name
        of the params with it
        """
        if memo is None:
            memo = set()

        for name, param in self._parameters.items():
            if param is not None and id(param) not in memo:
                memo.add(id(param))
                full = f"{prefix}{name}" if prefix else name
                yield full, param

        for name, m in self._modules.items():
            sub_prefix = f"{prefix}{name}." if prefix else f"{name}."
            yield from m.named_parameters(sub_prefix, memo)

    def to(self, device):
        """
        Moves all parameters of this module to the given device.
        """
        for param in self._parameters.values():
            if param is not None:
                param.to(device)

        for m in self._modules.values():
            m.to(device)

        return self

    def apply(self, fn):

        """
        Function to apply to all modules (mainly for weight init)
        """
        fn(self)
        for m in self._modules.values():
            m.apply(fn)
        return self

    def _extra_repr(self):
        return ""

    def _repr(self, indent=0):
        model_name = self.__class__.__name__
        ind = "   " * indent
        extra = self._extra_repr()
        if not self._modules:
            return f"{ind}{model_name}({extra})\n"
        s = f"{ind}{model_name}(\n"
        if extra:
            s += f"{ind}  {extra}\n"
        for key, val in self._modules.items():
            s += f"{ind}  ({key}): {val._repr(indent + 1).lstrip()}"
        s += f"{ind})\n"
        return s

    def __repr__(self):
        return self._repr(indent=0).rstrip()

    def __call__(self, *args, **kwargs):
        return self.forward(*args, **kwargs)

    def forward(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not implement forward")

    def state_dict(self):
        """
        Returns a dictionary of all parameters as NumPy arrays
        """
        return {name: param.numpy() for name, param in self.named_parameters()}

    def load_state_dict(self, state_dict, strict=True):
        """
        Loads parameters from a state_dict (NumPy arrays). Parameters
        keep their device and dtype, only the values are replaced.
        """
        missing_keys = []
        unexpected_keys = list(state_dict.keys())

        for name, param in self.named_parameters():
            if name not in state_dict:
                missing_keys.append(name)
                continue

            value = np.asarray(state_dict[name])
            if tuple(value.shape) != tuple(param.shape):
                raise RuntimeError(f"Failed to load {name}. Expected {param.shape}, got {value.shape}")

            param.data = Tensor(value, device=param.device, dtype=str(param.dtype)).data
            unexpected_keys.remove(name)

        if strict:
            error_msgs = []
            if missing_keys:
                error_msgs.append(f"Missing keys: {missing_keys}")
            if unexpected_keys:
                error_msgs.append(f"Unexpected keys: {unexpected_keys}")
            if error_msgs:
                raise RuntimeError("Error(s) in loading state_dict:\n" + "\n".join(error_msgs))
            return "<All Keys Matched Successfully>"

        if len(missing_keys) == 0 and len(unexpected_keys) == 0:
            return "<All Keys Matched Successfully>"
        return missing_keys, unexpected_keys

    def train(self):
        """recursively set all modules to training mode"""
        self.training = True
        for m in self._modules.values():
            m.train()
        return self

    def eval(self):
        """recursively set all modules to eval mode"""
        self.training = False
        for m in self._modules.values():
            m.eval()
        return self
