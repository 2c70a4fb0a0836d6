from myrnn.ops.rnn import cell as ops_cell
from myrnn.ops.rnn.cell.dropout_rnn_cell import check_keep_probability
from .rnn_cell import RNNCell, CellInstance

class DropoutRNNCell(RNNCell):
    """
    RNN cell that applies dropout to the provided RNN cell.

    Dropout is only applied in Mode.TRAINING. In every other mode
    create_cell hands back the wrapped cell's instance unchanged.

    Note that a different dropout mask is used for each time step (this
    is not the variational recurrent dropout of Gal & Ghahramani, 2016),
    and that for LSTM cells only the `m` part of the state is dropped,
    never the memory `c`.

    Args:
        cell: RNNCell layer on which to perform dropout.
        input_keep_probability: keep probability for the input of the cell.
        output_keep_probability: keep probability for the output of the cell.
        state_keep_probability: keep probability for the output state of the cell.
        seed: optional op-level random seed, combined with the graph-level
            seed set by myrnn.manual_seed. The dropout streams are created
            on the first training step and kept for the life of the layer,
            a later manual_seed does not restart them.
        name: desired name for this layer, made unique by appending a
            number to it if it has been used before.
    """
    layer_type = "DropoutRNNCell"

    def __init__(self,
                 cell,
                 input_keep_probability=1.0,
                 output_keep_probability=1.0,
                 state_keep_probability=1.0,
                 seed=None,
                 name="DropoutRNNCell"):

        if not isinstance(cell, RNNCell):
            raise TypeError(f"DropoutRNNCell wraps an RNNCell layer, got {type(cell).__name__}")

        check_keep_probability("input_keep_probability", input_keep_probability)
        check_keep_probability("output_keep_probability", output_keep_probability)
        check_keep_probability("state_keep_probability", state_keep_probability)

        super().__init__(name, device=cell.device, dtype=cell.dtype)
        self.cell = cell
        self.input_keep_probability = input_keep_probability
        self.output_keep_probability = output_keep_probability
        self.state_keep_probability = state_keep_probability
        self.seed = seed
        self._generators = {}

    @property
    def input_size(self):
        ### always the wrapped cell's, which may only learn it when built ###
        return self.cell.input_size

    def create_cell(self, mode, input_shape=None):
        cell_instance = self.cell.create_cell(mode, input_shape)
        if not mode.is_training:
            return cell_instance

        dropout_cell = ops_cell.DropoutRNNCell(
            cell_instance.cell,
            self.input_keep_probability,
            self.output_keep_probability,
            self.state_keep_probability,
            self.seed,
            self.uniquified_name,
            generators=self._generators)
        return CellInstance(dropout_cell,
                            cell_instance.trainable_variables,
                            cell_instance.non_trainable_variables)

    def _extra_repr(self):
        return (f"input_keep_probability={self.input_keep_probability}, "
                f"output_keep_probability={self.output_keep_probability}, "
                f"state_keep_probability={self.state_keep_probability}, seed={self.seed}")
