import numpy as np
import pytest
import myrnn
from myrnn.learn import reset_layer_names

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """
    Every test gets its own (missing) config file, no MYRNN_* overrides,
    fresh layer names and no graph-level seed.
    """
    monkeypatch.setenv("MYRNN_CONFIG", str(tmp_path / "default_config.yaml"))
    for var in ("MYRNN_SEED", "MYRNN_DEVICE", "MYRNN_DTYPE"):
        monkeypatch.delenv(var, raising=False)
    reset_layer_names()
    myrnn.manual_seed(None)
    yield
    myrnn.manual_seed(None)

@pytest.fixture
def rng():
    return np.random.RandomState(1234)
