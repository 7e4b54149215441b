from .Layer import Layer
from ..Tensor import Tensor
from ..helpers.Backend import backend


class FullyConnectedLayer(Layer):
    def __init__(self, input_layer, out_depth):
        # filters: out_depth tensors of (1, 1, num_inputs)
        # bias: (1, 1, out_depth)
        # output: (1, 1, out_depth)
        super().__init__(self._require_input(input_layer))
        if out_depth < 1:
            raise ValueError(f"Output depth must be positive, got {out_depth}")

        self.out_depth = out_depth
        self.num_inputs = input_layer.size()

        dtype = input_layer.get_output().dtype
        self._allocate(1, 1, out_depth, dtype)
        self.bias = Tensor(1, 1, out_depth, dtype=dtype)
        self.filters = [Tensor(1, 1, self.num_inputs, dtype=dtype) for _ in range(out_depth)]

        self.bias_grad = Tensor(1, 1, out_depth, dtype=dtype)
        self.filter_grads = [Tensor(1, 1, self.num_inputs, dtype=dtype) for _ in range(out_depth)]

    def name(self):
        return "fc"

    def _flat_input(self):
        # The input store is already flat in x-major, y, z-fastest order,
        # the same order the filters are stored in.
        flat = self.input_layer.get_output().data
        if flat.shape[0] != self.num_inputs:
            raise RuntimeError(
                f"Invalid index: consumed {flat.shape[0]} inputs, expected {self.num_inputs}"
            )
        return flat

    def forward(self):
        x = self._flat_input()
        for i in range(self.out_depth):
            s = backend.sum(x * self.filters[i].data) + self.bias[i]
            self.output.set_unchecked(0, 0, i, s)

    def backward(self):
        x = self._flat_input()
        dx = self.input_layer.get_grad().data
        if dx.shape[0] != self.num_inputs:
            raise RuntimeError(f"Input grad holds {dx.shape[0]} elements, expected {self.num_inputs}")
        for i in range(self.out_depth):
            g = self.grad.get_unchecked(0, 0, i)
            self.filter_grads[i].data[...] = g * x
            self.bias_grad[i] = g
            dx[...] += g * self.filters[i].data

    def params(self):
        return self.filters + [self.bias]

    def grads(self):
        return self.filter_grads + [self.bias_grad]
