from .Layer import Layer
from ..Tensor import Tensor
from ..helpers.Backend import backend


class ConvLayer(Layer):
    def __init__(self, input_layer, out_depth, filter_size, stride=1, pad=0):
        # filters: out_depth tensors of (filter_size, filter_size, in_depth)
        # bias: (1, 1, out_depth)
        # output: (out_x, out_y, out_depth)
        super().__init__(self._require_input(input_layer))
        if pad != 0:
            raise ValueError(f"Unsupported pad size: {pad}")
        if out_depth < 1:
            raise ValueError(f"Output depth must be positive, got {out_depth}")
        if filter_size < 1:
            raise ValueError(f"Filter size must be positive, got {filter_size}")
        if stride < 1:
            raise ValueError(f"Stride must be positive, got {stride}")

        self.out_depth = out_depth
        self.filter_size = filter_size
        self.stride = stride
        self.pad = pad

        self.in_dims = input_layer.dims()
        in_x, in_y, in_z = self.in_dims
        if filter_size > in_x + 2 * pad or filter_size > in_y + 2 * pad:
            raise ValueError(
                f"Filter size {filter_size} exceeds input plane {in_x}x{in_y} (pad {pad})"
            )

        # Floor division: a stride that does not divide evenly drops the
        # trailing input rows/columns.
        out_x = (in_x + 2 * pad - filter_size) // stride + 1
        out_y = (in_y + 2 * pad - filter_size) // stride + 1

        dtype = input_layer.get_output().dtype
        self._allocate(out_x, out_y, out_depth, dtype)
        self.bias = Tensor(1, 1, out_depth, dtype=dtype)
        self.filters = [Tensor(filter_size, filter_size, in_z, dtype=dtype) for _ in range(out_depth)]

        # grads (filled during backward)
        self.bias_grad = Tensor(1, 1, out_depth, dtype=dtype)
        self.filter_grads = [Tensor(filter_size, filter_size, in_z, dtype=dtype) for _ in range(out_depth)]

    def name(self):
        return "conv"

    # ----- helpers -----
    def _windows(self):
        """
        All receptive fields of the input at once, without copying:
        (out_x, out_y, in_depth, F, F). With pad 0 and a filter no larger than
        the input plane, every window lies inside the input.
        """
        F, s = self.filter_size, self.stride
        x_in = self.input_layer.get_output().view()
        # stepping the (in - F + 1) valid anchors by s leaves exactly
        # (in - F) // s + 1 of them, the floor-division output size
        return backend.sliding_window_view(x_in, (F, F), axis=(0, 1))[::s, ::s]

    def _filter_bank(self):
        # (out_depth, F, F, in_depth)
        return backend.stack([f.view() for f in self.filters])

    def forward(self):
        self._check_input_dims(self.in_dims)
        cols = self._windows()  # (out_x, out_y, C, k, k)
        W = backend.transpose(self._filter_bank(), (0, 3, 1, 2))  # (O, C, k, k)

        # contract every window with every filter over (C, k, k), then add bias
        out = backend.tensordot(cols, W, axes=([2, 3, 4], [1, 2, 3]))  # (out_x, out_y, O)
        self.output.view()[...] = out + self.bias.data

    def backward(self):
        """
        self.grad: (out_x, out_y, out_depth)
        accumulates grad wrt input into input_layer.grad
        """
        self._check_input_dims(self.in_dims)
        F, s = self.filter_size, self.stride
        out_x, out_y, _ = self.output.dims()
        go = self.grad.view()
        cols = self._windows()

        # ---- dW and db ----
        # dW[o] = sum over positions of go[:, :, o] * window
        dW = backend.tensordot(go, cols, axes=([0, 1], [0, 1]))  # (O, C, k, k)
        dW = backend.transpose(dW, (0, 2, 3, 1))  # (O, k, k, C)
        for d, df in enumerate(self.filter_grads):
            df.view()[...] = dW[d]
        self.bias_grad.data[...] = backend.sum(go, axis=(0, 1))

        # ---- dX: scatter every filter cell back over the windows that used it ----
        cols_grad = backend.tensordot(go, self._filter_bank(), axes=([2], [0]))  # (out_x, out_y, k, k, C)
        dx = self.input_layer.get_grad().view()
        for fx in range(F):
            for fy in range(F):
                # overlapping windows add up
                dx[fx:fx + s * (out_x - 1) + 1:s, fy:fy + s * (out_y - 1) + 1:s, :] += cols_grad[:, :, fx, fy, :]

    # expose params / grads for an optimizer
    def params(self):
        return self.filters + [self.bias]

    def grads(self):
        return self.filter_grads + [self.bias_grad]
