from .rnn_cell import RNNCell, Tuple

class MultiCell(RNNCell):
    """
    Stack of cells, the output of each one is the input of the next.
    The state is a tuple with one entry per cell.
    """
    def __init__(self, cells, name="MultiCell"):
        super().__init__(name)
        if len(cells) == 0:
            raise ValueError("MultiCell needs at least one cell")
        self.cells = list(cells)

    @property
    def output_size(self):
        return self.cells[-1].output_size

    @property
    def state_size(self):
        return tuple(cell.state_size for cell in self.cells)

    def forward(self, input):
        if len(input.state) != len(self.cells):
            raise ValueError(f"Expected {len(self.cells)} states, got {len(input.state)}")

        x = input.output
        states = []
        for cell, state in zip(self.cells, input.state):
            x, new_state = cell(Tuple(x, state))
            states.append(new_state)

        return Tuple(x, tuple(states))
