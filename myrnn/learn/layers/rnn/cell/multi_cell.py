from myrnn.ops.rnn import cell as ops_cell
from .rnn_cell import RNNCell, CellInstance

class MultiCell(RNNCell):
    """
    Stacks RNNCell layers. Each cell is built for the output size of the
    one below it, and the instance reads the union of all their variables.
    """
    layer_type = "MultiCell"

    def __init__(self, cells, name="MultiCell"):
        cells = list(cells)
        if len(cells) == 0:
            raise ValueError("MultiCell needs at least one cell")
        for cell in cells:
            if not isinstance(cell, RNNCell):
                raise TypeError(f"MultiCell stacks RNNCell layers, got {type(cell).__name__}")

        super().__init__(name, device=cells[0].device, dtype=cells[0].dtype)
        self.num_cells = len(cells)
        for idx, cell in enumerate(cells):
            setattr(self, str(idx), cell)

    @property
    def cells(self):
        return [getattr(self, str(idx)) for idx in range(self.num_cells)]

    @property
    def input_size(self):
        return self.cells[0].input_size

    def create_cell(self, mode, input_shape=None):
        instances = []
        shape = input_shape
        for cell in self.cells:
            instance = cell.create_cell(mode, shape)
            instances.append(instance)
            shape = (instance.cell.output_size,)

        trainable = set().union(*(i.trainable_variables for i in instances))
        non_trainable = set().union(*(i.non_trainable_variables for i in instances))
        multi_cell = ops_cell.MultiCell([i.cell for i in instances], name=self.uniquified_name)
        return CellInstance(multi_cell, trainable, non_trainable)
