import numpy as np
import pytest

from noether import InputLayer, ReLU


def test_forward_clamps_negatives():
    inp = InputLayer(1, 2, 2)
    inp.load([-1.0, 0.0, 2.0, -3.5])
    relu = ReLU(inp)
    relu.forward()
    assert relu.dims() == (1, 2, 2)
    assert np.array_equal(relu.get_output().data, [0.0, 0.0, 2.0, 0.0])


def test_backward_masks_gradient():
    inp = InputLayer(1, 1, 3)
    inp.load([-1.0, 1.0, 2.0])
    relu = ReLU(inp)
    relu.forward()
    relu.get_grad().assign([5.0, 6.0, 7.0])
    relu.backward()
    assert np.array_equal(inp.get_grad().data, [0.0, 6.0, 7.0])


def test_requires_input_layer():
    with pytest.raises(ValueError):
        ReLU(None)


def test_input_size_change_is_a_structural_error():
    inp = InputLayer(2, 2, 1)
    relu = ReLU(inp)
    inp.get_output().reset(1, 1, 1)
    with pytest.raises(RuntimeError):
        relu.forward()
    with pytest.raises(RuntimeError):
        relu.backward()
