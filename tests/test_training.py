import numpy as np
import myrnn
import myrnn.nn as nn
from myrnn.learn import Mode, RNN, BasicLSTMCell, DropoutRNNCell
from myrnn.optim import SGD

def mse(pred, target):
    return ((pred - target) ** 2).mean()

def test_lstm_with_dropout_learns_last_input():
    myrnn.manual_seed(0)
    rng = np.random.RandomState(0)
    x = rng.uniform(-1, 1, size=(32, 6, 2)).astype(np.float32)
    y = x[:, -1, :1].copy()
    inputs, targets = myrnn.tensor(x), myrnn.tensor(y)

    cell = DropoutRNNCell(BasicLSTMCell(16), output_keep_probability=0.9, seed=1)
    rnn = RNN(cell)
    head = nn.Linear(16, 1)

    def evaluate():
        with myrnn.no_grad():
            outputs, _ = rnn(inputs, mode=Mode.EVALUATION)
            return mse(head(outputs[:, -1]), targets).item()

    start = evaluate()
    instance = cell.create_cell(Mode.TRAINING, inputs.shape)
    optimizer = SGD([
        {"params": instance.trainable_variables},
        {"params": head.parameters(), "lr": 0.05},
    ], lr=0.1)

    for _ in range(150):
        outputs, _ = rnn.train()(inputs)
        loss = mse(head(outputs[:, -1]), targets)
        optimizer.zero_grad()
        loss.backward()
        optimizer.step()

    assert evaluate() < start
    assert len(optimizer.param_groups[0]["params"]) == 2

def test_sgd_weight_decay_and_repr():
    weight = myrnn.ones(3, requires_grad=True)
    frozen = myrnn.ones(3)
    optimizer = SGD([weight, frozen], lr=0.5, weight_decay=0.1)

    (weight * 2).sum().backward()
    optimizer.step()

    assert np.allclose(weight.numpy(), 1 - 0.5 * (2 + 0.1))
    assert "3 parameters" in repr(optimizer)

    optimizer.zero_grad()
    assert weight.grad is None
