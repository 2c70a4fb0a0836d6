import myrnn.nn.functional as F
from myrnn.nn import initializations as init
from myrnn.ops.rnn import cell as ops_cell
from .rnn_cell import RNNCell, CellInstance

class BasicRNNCell(RNNCell):
    layer_type = "BasicRNNCell"

    def __init__(self,
                 num_units,
                 activation=F.tanh,
                 input_size=None,
                 kernel_initializer=init.xavier_uniform_,
                 bias_initializer=init.zeros_,
                 name="BasicRNNCell",
                 device=None,
                 dtype=None):

        super().__init__(name, input_size=input_size, device=device, dtype=dtype)
        self.num_units = num_units
        self.activation = activation
        self.kernel_initializer = kernel_initializer
        self.bias_initializer = bias_initializer
        self.kernel = None
        self.bias = None

    def _build(self, input_size):
        self.kernel = self._new_variable((input_size + self.num_units, self.num_units), self.kernel_initializer)
        self.bias = self._new_variable((self.num_units,), self.bias_initializer)
        self.input_size = input_size

    def create_cell(self, mode, input_shape=None):
        input_size = self._resolve_input_size(input_shape)
        if self.kernel is None:
            self._build(input_size)

        cell = ops_cell.BasicRNNCell(self.kernel, self.bias, self.activation, name=self.uniquified_name)
        return CellInstance(cell, {self.kernel, self.bias}, set())

    def _extra_repr(self):
        return f"num_units={self.num_units}"
