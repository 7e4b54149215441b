import numpy as np
import pytest

from noether import ConvLayer, FullyConnectedLayer, InputLayer, Network


def build(rng=None, dtype=np.float64):
    net = Network()
    net.input(6, 6, 2, dtype=dtype)
    net.conv(out_depth=3, filter_size=3, stride=1)
    net.relu()
    net.fully_connected(4)
    if rng is not None:
        for p, _ in net.parameters():
            p.assign(rng.standard_normal(p.size()) * 0.5)
    return net


def test_chain_records_predecessor_indices():
    net = build()
    assert len(net) == 4
    assert net.predecessor_index(0) is None
    assert [net.predecessor_index(i) for i in range(1, 4)] == [0, 1, 2]
    assert net.predecessor(2) is net[1]
    assert [L.dims() for L in net.layers] == [(6, 6, 2), (4, 4, 3), (4, 4, 3), (1, 1, 4)]


def test_add_rejects_layers_off_the_tail():
    net = Network()
    first = net.input(4, 4, 1)
    net.conv(1, 2)
    with pytest.raises(ValueError):
        net.add(FullyConnectedLayer(first, 2))
    with pytest.raises(ValueError):
        net.add(InputLayer(2, 2, 1))


def test_first_layer_must_be_input():
    net = Network()
    with pytest.raises(ValueError):
        net.add(ConvLayer(InputLayer(4, 4, 1), 1, 2))
    with pytest.raises(ValueError):
        net.conv(1, 2)


def test_empty_network_cannot_run():
    with pytest.raises(RuntimeError):
        Network().forward()


def test_forward_runs_layers_in_order(rng):
    net = build(rng)
    x = rng.standard_normal((6, 6, 2))
    out = net.forward(x)
    assert out is net.tail().get_output()

    conv, relu, fc = net[1], net[2], net[3]
    hidden = np.maximum(conv.get_output().to_numpy(), 0)
    assert np.array_equal(relu.get_output().to_numpy(), hidden)
    flat = hidden.ravel()
    expected = [np.dot(flat, f.data) + fc.bias[i] for i, f in enumerate(fc.filters)]
    assert np.allclose(out.data, expected)


def test_forward_is_deterministic(rng):
    net = build(rng, dtype=np.float32)
    x = rng.standard_normal((6, 6, 2))
    first = net.forward(x).to_numpy()
    second = net.forward(x).to_numpy()
    assert np.array_equal(first, second)


def test_backward_matches_numerical_gradient(rng, numerical_grad):
    net = build(rng)
    net.forward(rng.standard_normal((6, 6, 2)))
    upstream = rng.standard_normal(4)
    source = net[0].get_output()

    def loss():
        return float(np.dot(net.forward().data, upstream))

    grad_in = net.backward(upstream)
    assert grad_in is net[0].get_grad()
    assert np.allclose(grad_in.data, numerical_grad(loss, source), atol=1e-5)


def test_backward_zeroes_grads_between_calls(rng):
    net = build(rng)
    net.forward(rng.standard_normal((6, 6, 2)))
    upstream = rng.standard_normal(4)
    first = net.backward(upstream).to_numpy()
    second = net.backward(upstream).to_numpy()
    assert np.array_equal(first, second)


def test_parameters_pair_params_with_grads():
    net = build()
    pairs = net.parameters()
    # conv: 3 filters + bias, fc: 4 filters + bias
    assert len(pairs) == 9
    assert all(p.dims() == g.dims() for p, g in pairs)


def test_summary_rows(capsys):
    net = build()
    net.verbose = 1
    rows = net.summary()
    assert rows[1] == (1, "conv", (4, 4, 3), 3 * 3 * 3 * 2 + 3)
    assert rows[3] == (3, "fc", (1, 1, 4), 4 * 48 + 4)
    assert "conv" in capsys.readouterr().out
