from myrnn.ops.rnn import cell as ops_cell
from .rnn_cell import RNNCell, CellInstance

class ResidualCell(RNNCell):
    layer_type = "ResidualCell"

    def __init__(self, cell, residual_fn=None, name="ResidualCell"):
        if not isinstance(cell, RNNCell):
            raise TypeError(f"ResidualCell wraps an RNNCell layer, got {type(cell).__name__}")
        super().__init__(name, device=cell.device, dtype=cell.dtype)
        self.cell = cell
        self.residual_fn = residual_fn

    @property
    def input_size(self):
        ### always the wrapped cell's, which may only learn it when built ###
        return self.cell.input_size

    def create_cell(self, mode, input_shape=None):
        cell_instance = self.cell.create_cell(mode, input_shape)
        residual_cell = ops_cell.ResidualCell(cell_instance.cell, self.residual_fn, name=self.uniquified_name)
        return CellInstance(residual_cell,
                            cell_instance.trainable_variables,
                            cell_instance.non_trainable_variables)
