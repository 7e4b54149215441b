from ..Tensor import Tensor


class Layer:
    """
    A node in the forward/backward chain.

    Each layer owns ``output`` (its forward result) and ``grad`` (the loss
    gradient w.r.t. ``output``). Successors accumulate into ``grad`` during
    backward; the layer itself only ever reads its input layer's buffers.
    """

    def __init__(self, input_layer=None):
        self.input_layer = input_layer
        self.output = Tensor()
        self.grad = Tensor()

    @staticmethod
    def _require_input(input_layer):
        if input_layer is None:
            raise ValueError("Invalid input layer")
        if not isinstance(input_layer, Layer):
            raise ValueError(f"Input layer must be a Layer, got {type(input_layer).__name__}")
        return input_layer

    def _check_input_dims(self, expected):
        # input buffers must keep the dims this layer was built for
        for label, t in (("output", self.input_layer.get_output()), ("grad", self.input_layer.get_grad())):
            if t.dims() != tuple(expected):
                raise RuntimeError(
                    f"{self.name()} layer expects input {label} of dims {tuple(expected)}, got {t.dims()}"
                )

    def _allocate(self, sx, sy, sz, dtype):
        # output and grad always share dims
        self.output = Tensor(sx, sy, sz, dtype=dtype)
        self.grad = Tensor(sx, sy, sz, dtype=dtype)

    # Subclasses override as needed
    def name(self):
        raise NotImplementedError

    def get_output(self):
        return self.output

    def get_grad(self):
        return self.grad

    def dims(self):
        return self.output.dims()

    def size(self):
        return self.output.size()

    def forward(self):
        raise NotImplementedError

    def backward(self):
        # Accumulate grad wrt input into self.input_layer.grad
        raise NotImplementedError

    def zero_grad(self):
        self.grad.zero()

    def params(self):
        # Return list of parameter tensors (e.g., filters + [bias])
        return []

    def grads(self):
        # Return list of gradient tensors matching params()
        return []

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name()!r}, dims={self.dims()})"
