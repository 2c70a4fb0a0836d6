import math
import myrnn
from ..base_module import Module
from ... import initializations as init
import myrnn.nn.functional as F

class Linear(Module):

    def __init__(self,
                 in_features,
                 out_features,
                 bias=True,
                 auto=False,
                 device="cpu",
                 dtype="float32"):

        super().__init__()
        self.in_features = in_features
        self.out_features = out_features
        self.auto = auto

        self.weight = myrnn.zeros((out_features, in_features), device=device, dtype=dtype, requires_grad=True)
        k = math.sqrt(1 / in_features)
        init.uniform_(self.weight, -k, k)

        if bias:
            self.use_bias = True
            self.bias = myrnn.zeros((out_features,), device=device, dtype=dtype, requires_grad=True)
            init.uniform_(self.bias, -k, k)
        else:
            self.use_bias = False
            self.bias = None

    def _extra_repr(self):
        return f"in_features={self.in_features}, out_features={self.out_features}, bias={self.use_bias}"

    def forward(self, x):
        return F.linear(x, weight=self.weight, bias=self.bias, auto=self.auto)
