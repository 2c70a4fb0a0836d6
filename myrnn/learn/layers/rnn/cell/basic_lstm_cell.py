import myrnn.nn.functional as F
from myrnn.nn import initializations as init
from myrnn.ops.rnn import cell as ops_cell
from .rnn_cell import RNNCell, CellInstance

class BasicLSTMCell(RNNCell):
    """
    Basic LSTM cell layer. `forget_bias` is added to the forget gate
    at every step, so the bias variable itself starts at zero.
    """
    layer_type = "BasicLSTMCell"

    def __init__(self,
                 num_units,
                 forget_bias=1.0,
                 activation=F.tanh,
                 input_size=None,
                 kernel_initializer=init.xavier_uniform_,
                 bias_initializer=init.zeros_,
                 name="BasicLSTMCell",
                 device=None,
                 dtype=None):

        super().__init__(name, input_size=input_size, device=device, dtype=dtype)
        self.num_units = num_units
        self.forget_bias = forget_bias
        self.activation = activation
        self.kernel_initializer = kernel_initializer
        self.bias_initializer = bias_initializer
        self.kernel = None
        self.bias = None

    def _build(self, input_size):
        self.kernel = self._new_variable((input_size + self.num_units, 4 * self.num_units), self.kernel_initializer)
        self.bias = self._new_variable((4 * self.num_units,), self.bias_initializer)
        self.input_size = input_size

    def create_cell(self, mode, input_shape=None):
        input_size = self._resolve_input_size(input_shape)
        if self.kernel is None:
            self._build(input_size)

        cell = ops_cell.BasicLSTMCell(self.kernel, self.bias, self.activation,
                                      forget_bias=self.forget_bias, name=self.uniquified_name)
        return CellInstance(cell, {self.kernel, self.bias}, set())

    def _extra_repr(self):
        return f"num_units={self.num_units}, forget_bias={self.forget_bias}"
