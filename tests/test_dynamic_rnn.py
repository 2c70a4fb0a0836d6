import numpy as np
import pytest
import myrnn
from myrnn.learn import Mode, RNN, BasicRNNCell, BasicLSTMCell, DropoutRNNCell
from myrnn.ops.rnn import dynamic_rnn
from myrnn.ops.rnn.cell import BasicRNNCell as BasicRNNOp, BasicLSTMCell as BasicLSTMOp, LSTMState

def as_tensor(arr, requires_grad=False):
    return myrnn.tensor(np.asarray(arr, dtype=np.float32), requires_grad=requires_grad)

@pytest.fixture
def rnn_op(rng):
    kernel = as_tensor(rng.randn(7, 4) * 0.5, requires_grad=True)
    bias = as_tensor(rng.randn(4) * 0.1, requires_grad=True)
    return BasicRNNOp(kernel, bias)

def test_batch_major_shapes(rnn_op, rng):
    inputs = as_tensor(rng.randn(2, 5, 3))

    outputs, state = dynamic_rnn(rnn_op, inputs)

    assert outputs.shape == (2, 5, 4)
    assert state.shape == (2, 4)
    assert np.allclose(outputs.numpy()[:, -1], state.numpy())

def test_matches_manual_unroll(rnn_op, rng):
    x = rng.randn(2, 3, 3)
    outputs, _ = dynamic_rnn(rnn_op, as_tensor(x))

    h = np.zeros((2, 4))
    kernel, bias = rnn_op.kernel.numpy(), rnn_op.bias.numpy()
    for step in range(3):
        h = np.tanh(np.concatenate([x[:, step], h], 1) @ kernel + bias)
        assert np.allclose(outputs.numpy()[:, step], h, atol=1e-5)

def test_time_major_matches_batch_major(rnn_op, rng):
    x = rng.randn(2, 5, 3)

    batch_outputs, batch_state = dynamic_rnn(rnn_op, as_tensor(x))
    time_outputs, time_state = dynamic_rnn(rnn_op, as_tensor(x.transpose(1, 0, 2)), time_major=True)

    assert time_outputs.shape == (5, 2, 4)
    assert np.allclose(time_outputs.numpy().transpose(1, 0, 2), batch_outputs.numpy())
    assert np.allclose(time_state.numpy(), batch_state.numpy())

def test_initial_state_is_used(rnn_op, rng):
    inputs = as_tensor(rng.randn(2, 1, 3))
    initial = as_tensor(rng.randn(2, 4))

    outputs, _ = dynamic_rnn(rnn_op, inputs, initial_state=initial)
    expected, _ = rnn_op((inputs[:, 0], initial))

    assert np.allclose(outputs.numpy()[:, 0], expected.numpy())

def test_sequence_lengths(rnn_op, rng):
    inputs = as_tensor(rng.randn(2, 5, 3))

    outputs, state = dynamic_rnn(rnn_op, inputs, sequence_lengths=[2, 5])
    full_outputs, full_state = dynamic_rnn(rnn_op, inputs)

    outputs, full_outputs = outputs.numpy(), full_outputs.numpy()
    assert np.all(outputs[0, 2:] == 0)
    assert np.allclose(outputs[0, :2], full_outputs[0, :2])
    assert np.allclose(state.numpy()[0], full_outputs[0, 1])
    assert np.allclose(state.numpy()[1], full_state.numpy()[1])

def test_lstm_state_is_carried(rng):
    kernel = as_tensor(rng.randn(5, 8) * 0.5)
    cell = BasicLSTMOp(kernel, myrnn.zeros(8))

    outputs, state = dynamic_rnn(cell, as_tensor(rng.randn(3, 4, 3)), sequence_lengths=myrnn.tensor([4, 1, 2]))

    assert isinstance(state, LSTMState)
    assert state.c.shape == (3, 2)
    assert np.allclose(outputs.numpy()[2, 1], state.m.numpy()[2])

def test_gradients_flow_through_time(rnn_op, rng):
    outputs, _ = dynamic_rnn(rnn_op, as_tensor(rng.randn(2, 4, 3)))
    outputs.sum().backward()

    assert rnn_op.kernel.grad.shape == (7, 4)
    assert np.any(rnn_op.kernel.grad.asnumpy() != 0)
    assert rnn_op.bias.grad.shape == (4,)

def test_bad_inputs(rnn_op):
    with pytest.raises(ValueError):
        dynamic_rnn(rnn_op, myrnn.zeros(2, 3))
    with pytest.raises(ValueError):
        dynamic_rnn(rnn_op, myrnn.zeros(2, 0, 3))
    with pytest.raises(ValueError):
        dynamic_rnn(rnn_op, myrnn.zeros(2, 4, 3), sequence_lengths=[1, 2, 3])

def test_rnn_layer_mode_follows_train_and_eval():
    myrnn.manual_seed(2)
    cell = DropoutRNNCell(BasicRNNCell(32), output_keep_probability=0.5, seed=9)
    layer = RNN(cell)
    inputs = myrnn.ones(4, 3, 8)

    training_outputs, _ = layer(inputs)
    assert np.mean(training_outputs.numpy() == 0) > 0.25

    layer.eval()
    first, _ = layer(inputs)
    second, _ = layer(inputs)
    plain, _ = dynamic_rnn(cell.cell.create_cell(Mode.EVALUATION, inputs.shape).cell, inputs)

    assert np.array_equal(first.numpy(), second.numpy())
    assert np.array_equal(first.numpy(), plain.numpy())

def test_rnn_layer_explicit_mode_wins():
    cell = DropoutRNNCell(BasicLSTMCell(16), state_keep_probability=0.5, output_keep_probability=0.5)
    layer = RNN(cell, time_major=True).eval()
    inputs = myrnn.ones(3, 2, 4)

    outputs, state = layer(inputs, mode=Mode.TRAINING)

    assert outputs.shape == (3, 2, 16)
    assert np.any(outputs.numpy() == 0)
    assert isinstance(state, LSTMState)
    assert layer.uniquified_name == "RNN"

def test_rnn_layer_parameters_and_errors():
    inner = BasicRNNCell(3, input_size=2)
    layer = RNN(DropoutRNNCell(inner))
    layer(myrnn.ones(1, 2, 2))

    assert {id(p) for p in layer.parameters()} == {id(inner.kernel), id(inner.bias)}
    with pytest.raises(TypeError):
        RNN(BasicRNNOp(myrnn.zeros(5, 3), myrnn.zeros(3)))
