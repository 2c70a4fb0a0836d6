from functools import partial
import myrnn.nn.functional as F
from myrnn.nn import initializations as init
from myrnn.ops.rnn import cell as ops_cell
from .rnn_cell import RNNCell, CellInstance

class GRUCell(RNNCell):
    """
    GRU cell layer. The gate bias starts at 1.0 so the cell initially
    neither resets nor updates much.
    """
    layer_type = "GRUCell"

    def __init__(self,
                 num_units,
                 activation=F.tanh,
                 input_size=None,
                 kernel_initializer=init.xavier_uniform_,
                 gate_bias_initializer=partial(init.constant_, value=1.0),
                 candidate_bias_initializer=init.zeros_,
                 name="GRUCell",
                 device=None,
                 dtype=None):

        super().__init__(name, input_size=input_size, device=device, dtype=dtype)
        self.num_units = num_units
        self.activation = activation
        self.kernel_initializer = kernel_initializer
        self.gate_bias_initializer = gate_bias_initializer
        self.candidate_bias_initializer = candidate_bias_initializer
        self.gate_kernel = None
        self.gate_bias = None
        self.candidate_kernel = None
        self.candidate_bias = None

    def _build(self, input_size):
        fan_in = input_size + self.num_units
        self.gate_kernel = self._new_variable((fan_in, 2 * self.num_units), self.kernel_initializer)
        self.gate_bias = self._new_variable((2 * self.num_units,), self.gate_bias_initializer)
        self.candidate_kernel = self._new_variable((fan_in, self.num_units), self.kernel_initializer)
        self.candidate_bias = self._new_variable((self.num_units,), self.candidate_bias_initializer)
        self.input_size = input_size

    def create_cell(self, mode, input_shape=None):
        input_size = self._resolve_input_size(input_shape)
        if self.gate_kernel is None:
            self._build(input_size)

        cell = ops_cell.GRUCell(self.gate_kernel, self.gate_bias,
                                self.candidate_kernel, self.candidate_bias,
                                self.activation, name=self.uniquified_name)
        variables = {self.gate_kernel, self.gate_bias, self.candidate_kernel, self.candidate_bias}
        return CellInstance(cell, variables, set())

    def _extra_repr(self):
        return f"num_units={self.num_units}"
