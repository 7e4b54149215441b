import numpy as np
from .helpers.Backend import backend

# largest element count the flat store can address
_MAX_ELEMENTS = np.iinfo(np.intp).max


class Tensor:
    """
    Dense 3D array with a flat backing store.

    Elements are laid out with z varying fastest, then y, then x:

        index(x, y, z) = (x * sy + y) * sz + z

    which is C order for an array of shape (sx, sy, sz). ``view()`` exposes
    the store under that shape without copying, and the fully connected layer
    relies on this order when it flattens its input.

    ``get_unchecked``/``set_unchecked`` skip the bounds test for per-element
    loops; whole-window kernels such as the convolution go through ``view()``.
    """

    def __init__(self, sx=0, sy=0, sz=0, dtype=None):
        self.dtype = np.dtype(dtype if dtype is not None else backend.default_float)
        self.reset(sx, sy, sz)

    def reset(self, sx, sy, sz):
        """Reallocate storage as sx*sy*sz zeros. Old contents are discarded."""
        for d in (sx, sy, sz):
            if isinstance(d, bool) or not isinstance(d, (int, np.integer)):
                raise ValueError(f"Tensor dimensions must be integers, got {(sx, sy, sz)}")
            if d < 0:
                raise ValueError(f"Tensor dimensions must be non-negative, got {(sx, sy, sz)}")
        sx, sy, sz = int(sx), int(sy), int(sz)
        n = sx * sy * sz
        if n > _MAX_ELEMENTS:
            raise OverflowError(f"Tensor of dims {(sx, sy, sz)} exceeds the addressable size")
        self.sx, self.sy, self.sz = sx, sy, sz
        self.data = backend.zeros(n, dtype=self.dtype)

    # ----- shape -----
    def size(self):
        return self.data.shape[0]

    def dims(self):
        return (self.sx, self.sy, self.sz)

    def __len__(self):
        return self.size()

    def is_in_bounds(self, x, y):
        """True when (x, y) lies inside the first two dimensions."""
        return 0 <= x < self.sx and 0 <= y < self.sy

    # ----- element access -----
    def _index(self, x, y, z):
        if not (0 <= x < self.sx and 0 <= y < self.sy and 0 <= z < self.sz):
            raise IndexError(f"index {(x, y, z)} out of range for tensor of dims {self.dims()}")
        return (x * self.sy + y) * self.sz + z

    def get(self, x, y, z):
        return self.data[self._index(x, y, z)]

    def set(self, x, y, z, value):
        self.data[self._index(x, y, z)] = value

    def get_unchecked(self, x, y, z):
        return self.data[(x * self.sy + y) * self.sz + z]

    def set_unchecked(self, x, y, z, value):
        self.data[(x * self.sy + y) * self.sz + z] = value

    def _flat_index(self, i):
        if isinstance(i, bool) or not isinstance(i, (int, np.integer)):
            raise TypeError(f"flat tensor index must be an integer, got {type(i).__name__}")
        if not 0 <= i < self.size():
            raise IndexError(f"flat index {i} out of range for tensor of size {self.size()}")
        return i

    def __getitem__(self, i):
        return self.data[self._flat_index(i)]

    def __setitem__(self, i, value):
        self.data[self._flat_index(i)] = value

    # ----- bulk helpers -----
    def view(self):
        # (sx, sy, sz) view sharing storage with self.data
        return backend.reshape(self.data, self.dims())

    def fill(self, value):
        self.data[...] = value

    def zero(self):
        self.fill(0)

    def assign(self, values):
        """Copy values in, given either in dims() shape or as size() flat elements."""
        if isinstance(values, Tensor):
            values = values.view()
        arr = backend.ensure_array(values, dtype=self.dtype)
        if arr.shape == self.dims():
            self.data[...] = backend.reshape(arr, (self.size(),))
        elif arr.ndim == 1 and arr.shape[0] == self.size():
            self.data[...] = arr
        else:
            raise ValueError(f"cannot assign values of shape {arr.shape} to tensor of dims {self.dims()}")

    def to_numpy(self):
        return np.array(backend.to_cpu(self.view()), copy=True)

    def copy(self):
        out = Tensor(self.sx, self.sy, self.sz, dtype=self.dtype)
        out.data[...] = self.data
        return out

    def __repr__(self):
        return f"Tensor(dims={self.dims()}, dtype={self.dtype.name})"
