import myrnn.nn.functional as F
from myrnn import Tensor
from myrnn import random_seed
from myrnn.errors import InvalidArgumentError
from .rnn_cell import RNNCell, Tuple, LSTMState, is_supported, map_structure

def check_keep_probability(name, value):
    if not 0.0 < value <= 1.0:
        raise InvalidArgumentError(f"'{name}' ({value}) must be in (0, 1].")

class DropoutRNNCell(RNNCell):
    """
    Applies dropout to the input, output and state of `cell`.

    A new mask is drawn at every time step (this is not variational
    dropout). For LSTM states only the `m` tensor is dropped, the memory
    `c` is passed through as is.

    Each of the three dropout sites gets its own generator, derived from
    `seed` and combined with the graph-level seed (see myrnn.random_seed).
    The generators are created on first use and then advance step by
    step, so two cells built with the same seeds draw the same masks.
    Cells handed the same `generators` dict share those streams, that is
    how a layer keeps drawing fresh masks across the cells it builds.
    The graph-level seed is read once, when a generator is first created,
    so a later myrnn.manual_seed does not reseed streams already in use.
    """
    def __init__(self,
                 cell,
                 input_keep_probability=1.0,
                 output_keep_probability=1.0,
                 state_keep_probability=1.0,
                 seed=None,
                 name="DropoutRNNCell",
                 generators=None):

        super().__init__(name)
        if not isinstance(cell, RNNCell):
            raise TypeError(f"DropoutRNNCell wraps an RNNCell, got {type(cell).__name__}")

        check_keep_probability("input_keep_probability", input_keep_probability)
        check_keep_probability("output_keep_probability", output_keep_probability)
        check_keep_probability("state_keep_probability", state_keep_probability)

        self.cell = cell
        self.input_keep_probability = input_keep_probability
        self.output_keep_probability = output_keep_probability
        self.state_keep_probability = state_keep_probability
        self.seed = seed
        self._generators = generators if generators is not None else {}

    @property
    def output_size(self):
        return self.cell.output_size

    @property
    def state_size(self):
        return self.cell.state_size

    def zero_state(self, batch_size, dtype="float32", device="cpu"):
        return self.cell.zero_state(batch_size, dtype=dtype, device=device)

    def _generator(self, site, device):
        key = (site, device)
        if key not in self._generators:
            op_seed = random_seed.derive_seed(self.seed, site)
            self._generators[key] = random_seed.generator(op_seed, device=device)
        return self._generators[key]

    def _dropout(self, tensor, keep_probability, site):
        ### keep probability 1 is a no-op, the tensor passes through untouched ###
        if keep_probability >= 1.0:
            return tensor
        return F.dropout(tensor,
                         1.0 - keep_probability,
                         training=True,
                         generator=self._generator(site, tensor.device))

    def _dropout_state(self, state):
        if isinstance(state, LSTMState):
            return LSTMState(state.c, self._dropout_state(state.m))
        if isinstance(state, Tensor):
            return self._dropout(state, self.state_keep_probability, "state")
        dropped = [self._dropout_state(s) for s in state]
        if hasattr(state, "_fields"):
            return type(state)(*dropped)
        return type(state)(dropped)

    def forward(self, input):
        if not is_supported(input.output):
            raise TypeError(f"DropoutRNNCell does not support inputs of type {type(input.output).__name__}")

        dropped_input = map_structure(
            lambda t: self._dropout(t, self.input_keep_probability, "input"), input.output)

        output, state = self.cell(Tuple(dropped_input, input.state))

        if not is_supported(output):
            raise TypeError(f"DropoutRNNCell does not support outputs of type {type(output).__name__}")
        if not is_supported(state):
            raise TypeError(f"DropoutRNNCell does not support states of type {type(state).__name__}")

        output = map_structure(
            lambda t: self._dropout(t, self.output_keep_probability, "output"), output)
        state = self._dropout_state(state)

        return Tuple(output, state)
