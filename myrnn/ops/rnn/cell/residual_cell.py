from .rnn_cell import RNNCell, Tuple, map_structure

def _add(input, output):
    return map_structure(lambda i, o: i + o, input, output)

class ResidualCell(RNNCell):
    """
    Adds the cell input to the cell output (residual connection). The
    input and output structures must match in shape.
    """
    def __init__(self, cell, residual_fn=None, name="ResidualCell"):
        super().__init__(name)
        self.cell = cell
        self.residual_fn = residual_fn if residual_fn is not None else _add

    @property
    def output_size(self):
        return self.cell.output_size

    @property
    def state_size(self):
        return self.cell.state_size

    def forward(self, input):
        output, state = self.cell(input)

        def _check(i, o):
            if i.shape != o.shape:
                raise ValueError(f"ResidualCell input shape {i.shape} does not match output shape {o.shape}")
            return o

        map_structure(_check, input.output, output)
        return Tuple(self.residual_fn(input.output, output), state)
