import myrnn.nn.functional as F
from ...basic import concatenate
from .rnn_cell import RNNCell, Tuple

class GRUCell(RNNCell):
    """
    Gated recurrent unit (Cho et al., 2014):

        r, u = split(sigmoid([x, h] @ gate_kernel + gate_bias), 2)
        c    = activation([x, r * h] @ candidate_kernel + candidate_bias)
        h'   = u * h + (1 - u) * c
    """
    def __init__(self, gate_kernel, gate_bias, candidate_kernel, candidate_bias,
                 activation=F.tanh, name="GRUCell"):
        super().__init__(name)
        self.gate_kernel = gate_kernel
        self.gate_bias = gate_bias
        self.candidate_kernel = candidate_kernel
        self.candidate_bias = candidate_bias
        self.activation = activation

    @property
    def output_size(self):
        return self.candidate_kernel.shape[-1]

    @property
    def state_size(self):
        return self.candidate_kernel.shape[-1]

    def forward(self, input):
        x, h = input.output, input.state
        gates = F.sigmoid(concatenate([x, h], dim=1) @ self.gate_kernel + self.gate_bias)
        r, u = gates.chunk(2, dim=1)

        c = self.activation(concatenate([x, r * h], dim=1) @ self.candidate_kernel + self.candidate_bias)
        new_h = u * h + (1 - u) * c

        return Tuple(new_h, new_h)
