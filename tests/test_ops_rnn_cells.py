import numpy as np
import pytest
import myrnn
from myrnn.errors import InvalidArgumentError
from myrnn.ops.rnn.cell import (RNNCell, BasicRNNCell, BasicLSTMCell, GRUCell, MultiCell,
                                ResidualCell, DropoutRNNCell, Tuple, LSTMState, map_structure)

def as_tensor(arr, requires_grad=False):
    return myrnn.tensor(np.asarray(arr, dtype=np.float32), requires_grad=requires_grad)

def sigmoid(x):
    return 1 / (1 + np.exp(-x))

class IdentityCell(RNNCell):
    """Returns its input as output and as new state."""
    def __init__(self, size):
        super().__init__("IdentityCell")
        self.size = size

    @property
    def output_size(self):
        return self.size

    @property
    def state_size(self):
        return self.size

    def forward(self, input):
        return Tuple(input.output, input.output)

class LSTMPassthroughCell(IdentityCell):
    @property
    def state_size(self):
        return LSTMState(self.size, self.size)

    def forward(self, input):
        return Tuple(input.output, LSTMState(input.output, input.output))

class BrokenCell(IdentityCell):
    def forward(self, input):
        return Tuple(input.output, "not a tensor")

def test_basic_rnn_cell_matches_reference(rng):
    x, h = rng.randn(2, 3), rng.randn(2, 4)
    kernel, bias = rng.randn(7, 4), rng.randn(4)

    cell = BasicRNNCell(as_tensor(kernel), as_tensor(bias))
    output, state = cell(Tuple(as_tensor(x), as_tensor(h)))

    expected = np.tanh(np.concatenate([x, h], 1) @ kernel + bias)
    assert np.allclose(output.numpy(), expected, atol=1e-5)
    assert output is state
    assert cell.output_size == 4 and cell.state_size == 4

def test_basic_lstm_cell_matches_reference(rng):
    x, c, m = rng.randn(2, 3), rng.randn(2, 5), rng.randn(2, 5)
    kernel, bias = rng.randn(8, 20), rng.randn(20)

    cell = BasicLSTMCell(as_tensor(kernel), as_tensor(bias), forget_bias=1.0)
    output, state = cell(Tuple(as_tensor(x), LSTMState(as_tensor(c), as_tensor(m))))

    i, j, f, o = np.split(np.concatenate([x, m], 1) @ kernel + bias, 4, axis=1)
    new_c = c * sigmoid(f + 1.0) + sigmoid(i) * np.tanh(j)
    new_m = np.tanh(new_c) * sigmoid(o)

    assert isinstance(state, LSTMState)
    assert np.allclose(state.c.numpy(), new_c, atol=1e-5)
    assert np.allclose(state.m.numpy(), new_m, atol=1e-5)
    assert np.allclose(output.numpy(), new_m, atol=1e-5)
    assert cell.state_size == LSTMState(5, 5)

def test_gru_cell_matches_reference(rng):
    x, h = rng.randn(3, 2), rng.randn(3, 4)
    gate_kernel, gate_bias = rng.randn(6, 8), rng.randn(8)
    cand_kernel, cand_bias = rng.randn(6, 4), rng.randn(4)

    cell = GRUCell(as_tensor(gate_kernel), as_tensor(gate_bias), as_tensor(cand_kernel), as_tensor(cand_bias))
    output, state = cell(Tuple(as_tensor(x), as_tensor(h)))

    r, u = np.split(sigmoid(np.concatenate([x, h], 1) @ gate_kernel + gate_bias), 2, axis=1)
    cand = np.tanh(np.concatenate([x, r * h], 1) @ cand_kernel + cand_bias)
    expected = u * h + (1 - u) * cand

    assert np.allclose(output.numpy(), expected, atol=1e-5)
    assert np.allclose(state.numpy(), expected, atol=1e-5)

def test_cells_accept_plain_tuples(rng):
    cell = IdentityCell(3)
    x = as_tensor(rng.randn(2, 3))
    result = cell((x, x))
    assert isinstance(result, Tuple)

def test_zero_state_follows_state_size():
    state = BasicLSTMCell(myrnn.zeros(8, 20), myrnn.zeros(20)).zero_state(3)
    assert isinstance(state, LSTMState)
    assert state.c.shape == (3, 5) and state.m.shape == (3, 5)
    assert np.all(state.c.numpy() == 0)

    nested = MultiCell([IdentityCell(2), LSTMPassthroughCell(4)]).zero_state(1, dtype="float64")
    assert nested[0].shape == (1, 2)
    assert nested[1].m.shape == (1, 4)
    assert str(nested[0].dtype) == "float64"

def test_lstm_gradients_reach_parameters(rng):
    kernel = as_tensor(rng.randn(5, 8), requires_grad=True)
    bias = as_tensor(np.zeros(8), requires_grad=True)
    cell = BasicLSTMCell(kernel, bias)

    output, _ = cell(Tuple(as_tensor(rng.randn(2, 3)), cell.zero_state(2)))
    output.sum().backward()

    assert kernel.grad is not None and kernel.grad.shape == (5, 8)
    assert bias.grad is not None and bias.grad.shape == (8,)

def test_multi_cell_chains_outputs(rng):
    first = BasicRNNCell(as_tensor(rng.randn(5, 2)), as_tensor(rng.randn(2)))
    second = BasicRNNCell(as_tensor(rng.randn(6, 4)), as_tensor(rng.randn(4)))
    multi = MultiCell([first, second])

    x = as_tensor(rng.randn(1, 3))
    states = multi.zero_state(1)
    output, new_states = multi(Tuple(x, states))

    h1, _ = first(Tuple(x, states[0]))
    h2, _ = second(Tuple(h1, states[1]))

    assert multi.output_size == 4
    assert multi.state_size == (2, 4)
    assert np.allclose(output.numpy(), h2.numpy())
    assert len(new_states) == 2

def test_multi_cell_errors():
    with pytest.raises(ValueError):
        MultiCell([])

    multi = MultiCell([IdentityCell(2), IdentityCell(2)])
    with pytest.raises(ValueError):
        multi(Tuple(myrnn.zeros(1, 2), (myrnn.zeros(1, 2),)))

def test_residual_cell_adds_input(rng):
    inner = BasicRNNCell(as_tensor(rng.randn(6, 3)), as_tensor(rng.randn(3)))
    residual = ResidualCell(inner)

    x, h = as_tensor(rng.randn(2, 3)), as_tensor(rng.randn(2, 3))
    output, state = residual(Tuple(x, h))
    inner_output, inner_state = inner(Tuple(x, h))

    assert np.allclose(output.numpy(), x.numpy() + inner_output.numpy(), atol=1e-6)
    assert np.allclose(state.numpy(), inner_state.numpy())

def test_residual_cell_custom_fn_and_shape_mismatch(rng):
    residual = ResidualCell(IdentityCell(3), residual_fn=lambda i, o: o * 2)
    x = as_tensor(rng.randn(1, 3))
    output, _ = residual(Tuple(x, x))
    assert np.allclose(output.numpy(), x.numpy() * 2)

    wider = ResidualCell(BasicRNNCell(myrnn.zeros(5, 2), myrnn.zeros(2)))
    with pytest.raises(ValueError):
        wider(Tuple(myrnn.zeros(1, 3), myrnn.zeros(1, 2)))

def test_map_structure():
    a, b = myrnn.ones(2), myrnn.ones(2)
    doubled = map_structure(lambda t: t * 2, LSTMState(a, [b]))
    assert isinstance(doubled, LSTMState)
    assert isinstance(doubled.m, list)
    assert np.allclose(doubled.m[0].numpy(), [2.0, 2.0])

    with pytest.raises(TypeError):
        map_structure(lambda t: t, {"a": a})
    with pytest.raises(ValueError):
        map_structure(lambda x, y: x, (a,), (a, b))

def test_dropout_cell_with_keep_one_is_transparent(rng):
    inner = IdentityCell(4)
    cell = DropoutRNNCell(inner)
    x = as_tensor(rng.randn(2, 4))

    output, state = cell(Tuple(x, x))

    assert output is x and state is x
    assert cell.output_size == 4 and cell.state_size == 4

def test_dropout_cell_drops_each_site():
    x = myrnn.ones(64, 64)
    output_dropped = DropoutRNNCell(IdentityCell(64), output_keep_probability=0.5, seed=1)
    output, state = output_dropped(Tuple(x, x))
    assert set(np.unique(output.numpy()).tolist()).issubset({0.0, 2.0})
    assert np.all(state.numpy() == 1.0)

    state_dropped = DropoutRNNCell(IdentityCell(64), state_keep_probability=0.5, seed=1)
    output, state = state_dropped(Tuple(x, x))
    assert np.all(output.numpy() == 1.0)
    assert 0.4 < (state.numpy() == 0).mean() < 0.6

    input_dropped = DropoutRNNCell(IdentityCell(64), input_keep_probability=0.25, seed=1)
    output, state = input_dropped(Tuple(x, x))
    assert set(np.unique(output.numpy()).tolist()).issubset({0.0, 4.0})
    assert np.array_equal(output.numpy(), state.numpy())

def test_dropout_cell_keeps_lstm_memory():
    x = myrnn.ones(16, 16)
    cell = DropoutRNNCell(LSTMPassthroughCell(16), state_keep_probability=0.5, seed=3)

    _, state = cell(Tuple(x, LSTMState(x, x)))

    assert isinstance(state, LSTMState)
    assert np.all(state.c.numpy() == 1.0)
    assert set(np.unique(state.m.numpy()).tolist()) == {0.0, 2.0}

def test_dropout_cell_masks_are_reproducible_and_change_per_step():
    x = myrnn.ones(32, 32)
    first = DropoutRNNCell(IdentityCell(32), output_keep_probability=0.5, seed=7)
    second = DropoutRNNCell(IdentityCell(32), output_keep_probability=0.5, seed=7)

    step_one = first(Tuple(x, x)).output.numpy()
    step_two = first(Tuple(x, x)).output.numpy()

    assert np.array_equal(step_one, second(Tuple(x, x)).output.numpy())
    assert not np.array_equal(step_one, step_two)

@pytest.mark.parametrize("keep", [0.0, -0.5, 1.5])
def test_dropout_cell_rejects_bad_probabilities(keep):
    with pytest.raises(InvalidArgumentError):
        DropoutRNNCell(IdentityCell(2), state_keep_probability=keep)

def test_dropout_cell_rejects_unsupported_structures():
    with pytest.raises(TypeError):
        DropoutRNNCell("not a cell")

    cell = DropoutRNNCell(BrokenCell(2))
    with pytest.raises(TypeError):
        cell(Tuple(myrnn.zeros(1, 2), myrnn.zeros(1, 2)))
    with pytest.raises(TypeError):
        cell(Tuple("text", myrnn.zeros(1, 2)))
