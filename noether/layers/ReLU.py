from .Layer import Layer
from ..helpers.Backend import backend


class ReLU(Layer):
    def __init__(self, input_layer):
        super().__init__(self._require_input(input_layer))
        inp = input_layer.get_output()
        self._allocate(*inp.dims(), dtype=inp.dtype)

    def name(self):
        return "relu"

    def forward(self):
        self._check_input_dims(self.dims())
        x = self.input_layer.get_output().data
        self.output.data[...] = backend.maximum(0, x)

    def backward(self):
        self._check_input_dims(self.dims())
        x = self.input_layer.get_output().data
        mask = (x > 0).astype(self.grad.dtype)
        self.input_layer.get_grad().data[...] += self.grad.data * mask
