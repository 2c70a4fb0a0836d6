from myrnn.ops.rnn import dynamic_rnn
from ...mode import Mode
from ..layer import Layer
from .cell import RNNCell

class RNN(Layer):
    """
    Runs an RNNCell layer over a sequence. The mode defaults to the
    module's train()/eval() state.
    """
    layer_type = "RNN"

    def __init__(self, cell, time_major=False, name="RNN"):
        if not isinstance(cell, RNNCell):
            raise TypeError(f"RNN runs an RNNCell layer, got {type(cell).__name__}")
        super().__init__(name, device=cell.device, dtype=cell.dtype)
        self.cell = cell
        self.time_major = time_major

    def forward(self, inputs, mode=None, initial_state=None, sequence_lengths=None):
        if mode is None:
            mode = Mode.TRAINING if self.training else Mode.EVALUATION

        instance = self.cell.create_cell(mode, inputs.shape)
        return dynamic_rnn(instance.cell,
                           inputs,
                           initial_state=initial_state,
                           time_major=self.time_major,
                           sequence_lengths=sequence_lengths)
