import time

from .layers import (
    Layer,
    InputLayer,
    ConvLayer,
    FullyConnectedLayer,
    ReLU,
)


class Network:
    """
    Owns a chain of layers, in order. Entry ``i`` records the index of its
    predecessor, so ordering never depends on walking layer references.

        net = Network()
        net.input(5, 5, 1)
        net.conv(out_depth=2, filter_size=3)
        net.fully_connected(10)
        out = net.forward(sample)
    """

    def __init__(self, verbose=0):
        self.layers = []
        self._predecessors = []  # index of each layer's input, None for the source
        self.verbose = verbose

    def __len__(self):
        return len(self.layers)

    def __getitem__(self, index):
        return self.layers[index]

    def tail(self):
        return self.layers[-1] if self.layers else None

    def predecessor_index(self, index):
        return self._predecessors[index]

    def predecessor(self, index):
        p = self._predecessors[index]
        return None if p is None else self.layers[p]

    def add(self, layer):
        if not isinstance(layer, Layer):
            raise ValueError(f"Expected a Layer, got {type(layer).__name__}")
        if not self.layers:
            if not isinstance(layer, InputLayer):
                raise ValueError("The first layer of a network must be an InputLayer")
            self.layers.append(layer)
            self._predecessors.append(None)
            return layer
        if isinstance(layer, InputLayer):
            raise ValueError("A network has exactly one InputLayer")
        if layer.input_layer is not self.tail():
            raise ValueError(f"{layer.name()} layer does not take the current tail as input")
        self._predecessors.append(len(self.layers) - 1)
        self.layers.append(layer)
        return layer

    # ----- builders -----
    def input(self, sx, sy, sz, dtype=None):
        return self.add(InputLayer(sx, sy, sz, dtype=dtype))

    def conv(self, out_depth, filter_size, stride=1, pad=0):
        return self.add(ConvLayer(self.tail(), out_depth, filter_size, stride=stride, pad=pad))

    def fully_connected(self, out_depth):
        return self.add(FullyConnectedLayer(self.tail(), out_depth))

    def relu(self):
        return self.add(ReLU(self.tail()))

    # ----- passes -----
    def _require_built(self):
        if not self.layers:
            raise RuntimeError("Network has no layers")

    def forward(self, x=None, logger=None, step=0):
        self._require_built()
        if x is not None:
            self.layers[0].load(x)
        for i, layer in enumerate(self.layers):
            t0 = time.time()
            layer.forward()
            if logger is not None:
                logger.log_layer(step, i, layer, "forward", time.time() - t0)
        return self.tail().get_output()

    def backward(self, grad, logger=None, step=0):
        """
        grad: gradient wrt the tail output, shaped like it
        returns: gradient wrt the network input
        """
        self._require_built()
        self.zero_grad()
        self.tail().get_grad().assign(grad)
        for i in reversed(range(len(self.layers))):
            layer = self.layers[i]
            t0 = time.time()
            layer.backward()
            if logger is not None:
                logger.log_layer(step, i, layer, "backward", time.time() - t0)
        return self.layers[0].get_grad()

    def zero_grad(self):
        for layer in self.layers:
            layer.zero_grad()

    def parameters(self):
        ps = []
        for L in self.layers:
            for p, g in zip(L.params(), L.grads()):
                ps.append([p, g])
        return ps

    def summary(self):
        rows = []
        for i, L in enumerate(self.layers):
            n_params = sum(p.size() for p in L.params())
            rows.append((i, L.name(), L.dims(), n_params))
        if self.verbose > 0:
            print("=" * 50)
            for i, name, dims, n_params in rows:
                print(f"{i:3d}  {name:<6} {str(dims):<16} params={n_params}")
            print("=" * 50)
        return rows
