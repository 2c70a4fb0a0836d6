import myrnn.nn.functional as F
from ...basic import concatenate
from .rnn_cell import RNNCell, Tuple, LSTMState

class BasicLSTMCell(RNNCell):
    """
    LSTM without peepholes or projections:

        i, j, f, o = split([x, m] @ kernel + bias, 4)
        c' = c * sigmoid(f + forget_bias) + sigmoid(i) * activation(j)
        m' = activation(c') * sigmoid(o)

    kernel: (input_size + num_units, 4 * num_units)
    bias:   (4 * num_units,)
    """
    def __init__(self, kernel, bias, activation=F.tanh, forget_bias=1.0, name="BasicLSTMCell"):
        super().__init__(name)
        self.kernel = kernel
        self.bias = bias
        self.activation = activation
        self.forget_bias = forget_bias

    @property
    def num_units(self):
        return self.kernel.shape[-1] // 4

    @property
    def output_size(self):
        return self.num_units

    @property
    def state_size(self):
        return LSTMState(self.num_units, self.num_units)

    def forward(self, input):
        c, m = input.state
        gates = concatenate([input.output, m], dim=1) @ self.kernel + self.bias
        i, j, f, o = gates.chunk(4, dim=1)

        new_c = c * F.sigmoid(f + self.forget_bias) + F.sigmoid(i) * self.activation(j)
        new_m = self.activation(new_c) * F.sigmoid(o)

        return Tuple(new_m, LSTMState(new_c, new_m))
