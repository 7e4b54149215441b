# noether/helpers/Backend.py
import os
import numpy as np

VERBOSE_STARTUP = False  # set True to print device details on import

try:
    import cupy as cp
    if VERBOSE_STARTUP:
        print("CuPy:", cp.__version__)
        print("GPU count:", cp.cuda.runtime.getDeviceCount())
        print("Runtime ver:", cp.cuda.runtime.runtimeGetVersion())
    # Quick runtime check
    try:
        _ = (cp.array([1, 2, 3]) + 1).sum()
        CUPY_AVAILABLE = True
    except Exception as e:
        print(f"CuPy installed but CUDA runtime error: {e}")
        print("Falling back to CPU (NumPy)")
        cp = None
        CUPY_AVAILABLE = False
except ImportError:
    cp = None
    CUPY_AVAILABLE = False
    if VERBOSE_STARTUP:
        print("CuPy not available - using NumPy (CPU)")


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


class Backend:
    """Backend abstraction for NumPy/CuPy compatibility.

    Every Tensor keeps its flat storage in ``xp`` arrays, so switching the
    backend moves all layer buffers allocated afterwards.
    """
    def __init__(self, use_gpu=True, default_float=np.float32):
        self.use_gpu = bool(use_gpu and CUPY_AVAILABLE)
        self.default_float = default_float
        self.xp = cp if self.use_gpu else np
        if VERBOSE_STARTUP:
            print("Using GPU backend (CuPy)" if self.use_gpu else "Using CPU backend (NumPy)")

    def to_cpu(self, x):
        """Move array to CPU (NumPy)."""
        if self.use_gpu and x is not None and not isinstance(x, np.ndarray):
            return cp.asnumpy(x)
        return x

    def ensure_array(self, x, dtype=None):
        """
        Ensure 'x' is an array of the current backend.
        Accepts list/tuple/np/cp arrays; returns xp.ndarray.
        """
        if isinstance(x, self.xp.ndarray):
            if dtype is not None and x.dtype != dtype:
                return x.astype(dtype)
            return x
        if (not self.use_gpu) and (cp is not None) and isinstance(x, cp.ndarray):
            x = cp.asnumpy(x)
        arr = self.xp.asarray(x)
        if dtype is not None and arr.dtype != dtype:
            arr = arr.astype(dtype)
        return arr

    # -------- fall back to CPU on GPU failure --------
    def _fallback_to_cpu(self):
        """
        Switch to CPU backend when GPU operations fail.

        Only arrays allocated after the switch live on NumPy. Tensors created
        before it keep their CuPy storage, and mixing the two in one layer
        fails, so rebuild the network after a fallback.
        """
        self.use_gpu = False
        self.xp = np
        print("Switched to CPU backend (NumPy)")

    # -------- array creation --------
    def zeros(self, *args, **kwargs):
        kwargs.setdefault("dtype", self.default_float)
        try:
            return self.xp.zeros(*args, **kwargs)
        except Exception as e:
            if self.use_gpu:
                print(f"GPU operation failed, falling back to CPU: {e}")
                self._fallback_to_cpu()
                return np.zeros(*args, **kwargs)
            raise

    # -------- math (thin wrappers) --------
    def sum(self, x, axis=None):   return self.xp.sum(x, axis=axis)
    def maximum(self, a, b):       return self.xp.maximum(a, b)
    def reshape(self, x, shape):   return self.xp.reshape(x, shape)
    def transpose(self, x, axes=None): return self.xp.transpose(x, axes)
    def stack(self, arrays, axis=0):   return self.xp.stack(arrays, axis=axis)
    def tensordot(self, a, b, axes):   return self.xp.tensordot(a, b, axes=axes)

    # -------- sliding window (conv helper) --------
    def sliding_window_view(self, x, window_shape, axis=None):
        """
        Device-aware sliding_window_view (read-only view, no copy).
        Falls back to a CPU view copied back to the device if CuPy lacks it.
        """
        try:
            return self.xp.lib.stride_tricks.sliding_window_view(x, window_shape, axis=axis)
        except AttributeError:
            if self.use_gpu:
                v = np.lib.stride_tricks.sliding_window_view(self.to_cpu(x), window_shape, axis=axis)
                return cp.asarray(v)
            raise

    # -------- delegate unknown attrs to xp --------
    def __getattr__(self, name):
        return getattr(self.xp, name)


# Global backend instance; NOETHER_USE_GPU=0 forces NumPy
backend = Backend(use_gpu=_env_flag("NOETHER_USE_GPU", True))
