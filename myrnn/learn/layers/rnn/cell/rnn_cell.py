from collections import namedtuple
import myrnn
from ...layer import Layer

CellInstance = namedtuple("CellInstance", ["cell", "trainable_variables", "non_trainable_variables"])
CellInstance.__doc__ = """
Result of RNNCell.create_cell: an operational cell plus the sets of
trainable and non-trainable variables it reads.
"""

class RNNCell(Layer):
    """
    Declarative RNN cell. Calling `create_cell(mode, input_shape)` builds an
    operational cell (myrnn.ops.rnn.cell) for that mode. Parameters are
    created on the first call and shared by every cell built afterwards.
    """
    layer_type = "RNNCell"

    def __init__(self, name, input_size=None, device=None, dtype=None):
        super().__init__(name, device=device, dtype=dtype)
        self._input_size = input_size

    @property
    def input_size(self):
        return self._input_size

    @input_size.setter
    def input_size(self, value):
        self._input_size = value

    def create_cell(self, mode, input_shape=None):
        raise NotImplementedError

    def forward(self, mode, input_shape=None):
        return self.create_cell(mode, input_shape)

    def _resolve_input_size(self, input_shape):
        if input_shape is None:
            if self.input_size is None:
                raise ValueError(f"{self.uniquified_name}: the input size is unknown, pass "
                                 f"`input_shape` to create_cell or `input_size` to the constructor")
            return self.input_size

        size = int(input_shape[-1])
        if self.input_size is not None and size != self.input_size:
            raise ValueError(f"{self.uniquified_name} was built for inputs of size "
                             f"{self.input_size}, got {size}")
        return size

    def _new_variable(self, shape, initializer):
        variable = myrnn.zeros(shape, device=self.device, dtype=self.dtype, requires_grad=True)
        initializer(variable)
        return variable
