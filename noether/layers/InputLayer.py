from .Layer import Layer


class InputLayer(Layer):
    """Source of a chain. Its output is filled by the caller via ``load``."""

    def __init__(self, sx, sy, sz, dtype=None):
        super().__init__()
        for d in (sx, sy, sz):
            if d < 1:
                raise ValueError(f"Input dimensions must be positive, got {(sx, sy, sz)}")
        self._allocate(sx, sy, sz, dtype)

    def name(self):
        return "input"

    def load(self, values):
        self.output.assign(values)

    def forward(self):
        pass

    def backward(self):
        # nothing upstream; self.grad now holds dLoss/dInput
        pass
