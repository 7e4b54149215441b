import os

# keep tests on the NumPy backend regardless of the machine
os.environ.setdefault("NOETHER_USE_GPU", "0")

import numpy as np
import pytest


@pytest.fixture
def numerical_grad():
    """Central-difference gradient of loss_fn() wrt every element of tensor."""
    def _grad(loss_fn, tensor, eps=1e-6):
        out = np.zeros(tensor.size())
        for i in range(tensor.size()):
            orig = tensor[i]
            tensor[i] = orig + eps
            plus = loss_fn()
            tensor[i] = orig - eps
            minus = loss_fn()
            tensor[i] = orig
            out[i] = (plus - minus) / (2 * eps)
        return out
    return _grad


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
