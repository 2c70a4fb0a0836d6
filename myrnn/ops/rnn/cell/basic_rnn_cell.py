import myrnn.nn.functional as F
from ...basic import concatenate
from .rnn_cell import RNNCell, Tuple

class BasicRNNCell(RNNCell):
    """
    h' = activation([x, h] @ kernel + bias)

    kernel: (input_size + num_units, num_units)
    bias:   (num_units,)
    """
    def __init__(self, kernel, bias, activation=F.tanh, name="BasicRNNCell"):
        super().__init__(name)
        self.kernel = kernel
        self.bias = bias
        self.activation = activation

    @property
    def output_size(self):
        return self.kernel.shape[-1]

    @property
    def state_size(self):
        return self.kernel.shape[-1]

    def forward(self, input):
        linear = concatenate([input.output, input.state], dim=1) @ self.kernel + self.bias
        output = self.activation(linear)
        return Tuple(output, output)
