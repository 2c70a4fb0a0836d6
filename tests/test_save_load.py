import numpy as np
import pytest
import myrnn
from myrnn.learn import Mode, BasicLSTMCell, DropoutRNNCell, MultiCell, GRUCell

def built(cell, input_size=3):
    cell.create_cell(Mode.EVALUATION, (1, input_size))
    return cell

def test_state_dict_names():
    cell = built(MultiCell([DropoutRNNCell(BasicLSTMCell(4)), GRUCell(2)]))
    assert set(cell.state_dict()) == {
        "0.cell.kernel", "0.cell.bias",
        "1.gate_kernel", "1.gate_bias", "1.candidate_kernel", "1.candidate_bias",
    }

def test_save_and_load_roundtrip(tmp_path):
    source = built(DropoutRNNCell(BasicLSTMCell(4), output_keep_probability=0.5))
    path = tmp_path / "cell.safetensors"
    myrnn.save(source.state_dict(), path)

    target = built(DropoutRNNCell(BasicLSTMCell(4)))
    assert target.load_state_dict(myrnn.load(path)) == "<All Keys Matched Successfully>"

    x = myrnn.ones(2, 5, 3)
    expected, _ = myrnn.learn.RNN(source).eval()(x)
    actual, _ = myrnn.learn.RNN(target).eval()(x)
    assert np.allclose(actual.numpy(), expected.numpy())

def test_load_keeps_dtype_and_identity():
    cell = built(BasicLSTMCell(2, dtype="float64"))
    kernel = cell.kernel
    state = {name: np.ones_like(value, dtype=np.float32) for name, value in cell.state_dict().items()}

    cell.load_state_dict(state)

    assert cell.kernel is kernel
    assert str(cell.kernel.dtype) == "float64"
    assert np.all(cell.kernel.numpy() == 1.0)

def test_load_errors():
    cell = built(BasicLSTMCell(2))

    with pytest.raises(RuntimeError):
        cell.load_state_dict({"kernel": np.zeros((1, 1)), "bias": np.zeros(8)})
    with pytest.raises(RuntimeError):
        cell.load_state_dict({"kernel": np.zeros((5, 8))})

    missing, unexpected = cell.load_state_dict({"kernel": np.zeros((5, 8)), "extra": np.zeros(1)}, strict=False)
    assert missing == ["bias"]
    assert unexpected == ["extra"]
