"""
Array homogenizes Numpy and Cupy.

Cupy gives us the GPU but no CPU, Numpy gives us the CPU but no GPU.
Array sits on either one and every numpy method works on it, so the
Tensor and the cells above never have to care where the data lives.
"""

import warnings
import numpy as np
try:
    import cupy as cp
    CUDA_AVAILABLE = True
    NUM_AVAIL_GPUS = cp.cuda.runtime.getDeviceCount()
except ImportError:
    cp = None
    CUDA_AVAILABLE = False
    NUM_AVAIL_GPUS = 0
    warnings.warn("Cupy not installed, only the cpu device is available")

def _is_cupy_array(x):
    return CUDA_AVAILABLE and isinstance(x, cp.ndarray)

def _is_ndarray(x):
    return isinstance(x, np.ndarray) or _is_cupy_array(x)

def parse_device(device):
    """
    "cpu" -> ("cpu", None), "cuda" -> ("cuda", 0), "cuda:1" -> ("cuda", 1)
    """
    if device is None or device == "cpu":
        return "cpu", None
    if not device.startswith("cuda"):
        raise ValueError(f"Unknown device '{device}', expected 'cpu' or 'cuda[:idx]'")
    if not CUDA_AVAILABLE:
        raise RuntimeError("CUDA Not supported, check cupy installation")
    idx = int(device.split(":")[-1]) if ":" in device else 0
    if idx + 1 > NUM_AVAIL_GPUS:
        raise RuntimeError(f"cuda:{idx} does not exist")
    return "cuda", idx

def get_xp(device):
    return np if parse_device(device)[0] == "cpu" else cp

class Array:
    _binary_ufuncs = {
        "__add__": "add", "__radd__": "add",
        "__sub__": "subtract", "__rsub__": "subtract",
        "__mul__": "multiply", "__rmul__": "multiply",
        "__truediv__": "true_divide", "__rtruediv__": "true_divide",
        "__matmul__": "matmul", "__rmatmul__": "matmul",
        "__pow__": "power", "__rpow__": "power",
        "__lt__": "less", "__le__": "less_equal",
        "__gt__": "greater", "__ge__": "greater_equal",
    }

    _unary_ufuncs = {
        "__neg__": "negative",
        "__pos__": "positive",
        "__abs__": "absolute",
    }

    def __init__(self, data, device=None, dtype=None):

        ### Unwrap whatever we were handed into a raw ndarray ###
        if isinstance(data, Array):
            arr = data._array
        elif _is_ndarray(data):
            arr = data
        else:
            arr = np.array(data)

        ### No device given means we stay wherever the data already is ###
        src_device = "cpu" if isinstance(arr, np.ndarray) else f"cuda:{arr.device.id}"
        if device is None:
            device = src_device
        elif device == "cuda":
            device = "cuda:0"

        if device != src_device:
            arr = self._move_array(arr, device)

        ### Default float64 -> float32 and int64 -> int32 for raw data, an Array keeps its dtype ###
        if dtype is None and isinstance(data, Array):
            dtype = str(arr.dtype)
        elif dtype is None:
            current_dtype = str(arr.dtype)
            if current_dtype == "float64":
                dtype = "float32"
            elif current_dtype == "int64":
                dtype = "int32"
            else:
                dtype = current_dtype
        else:
            dtype = str(dtype)

        if str(arr.dtype) != dtype:
            if isinstance(arr, np.ndarray):
                arr = arr.astype(dtype)
            else:
                with cp.cuda.Device(arr.device.id):
                    arr = arr.astype(dtype)

        self._array = arr
        self._xp = np if isinstance(arr, np.ndarray) else cp
        self._dev_id = None if self._xp is np else arr.device.id
        self._device = "cpu" if self._xp is np else f"cuda:{self._dev_id}"

    @staticmethod
    def _move_array(arr, device):
        tgt_dev, tgt_idx = parse_device(device)
        if tgt_dev == "cpu":
            return arr if isinstance(arr, np.ndarray) else cp.asnumpy(arr)
        with cp.cuda.Device(tgt_idx):
            return cp.asarray(arr)

    @staticmethod
    def _from_result(arr):
        ### results of ops on Arrays keep whatever dtype numpy/cupy gave them ###
        return Array(arr, dtype=str(arr.dtype))

    @property
    def xp(self):
        return self._xp

    @property
    def device(self):
        return self._device

    @property
    def dtype(self):
        return self._array.dtype

    @property
    def shape(self):
        return self._array.shape

    @property
    def ndim(self):
        return self._array.ndim

    @property
    def size(self):
        return self._array.size

    @property
    def T(self):
        return Array._from_result(self._array.T)

    def astype(self, dtype):
        if str(self.dtype) == str(dtype):
            return self
        return Array(self._array, dtype=str(dtype))

    def to(self, device):
        if device == "cuda":
            device = "cuda:0"
        if device == self._device:
            return self
        return Array(self._move_array(self._array, device), dtype=str(self.dtype))

    def asnumpy(self):
        if self._xp is np:
            return self._array
        return cp.asnumpy(self._array)

    def _run(self, func, *args, **kwargs):
        ### All cupy ops default to cuda:0, so run under the right device context ###
        if self._xp is np:
            return func(*args, **kwargs)
        with cp.cuda.Device(self._dev_id):
            return func(*args, **kwargs)

    def _coerce_other(self, other):
        if isinstance(other, Array):
            return other._array, other._device
        if isinstance(other, np.ndarray):
            return other, "cpu"
        if _is_cupy_array(other):
            return other, f"cuda:{other.device.id}"
        return other, None

    @classmethod
    def _make_binary_op(cls, ufunc_name, reflect=False):
        def op(self, other):
            other_arr, other_dev = self._coerce_other(other)
            if other_dev is not None and other_dev != self._device:
                raise RuntimeError(f"Expected all tensors to be on the "
                                   f"same device, but found at least two devices, "
                                   f"{self._device} and {other_dev}!")
            func = getattr(self._xp, ufunc_name)
            _in = (other_arr, self._array) if reflect else (self._array, other_arr)
            return Array._from_result(self._run(func, *_in))
        return op

    @classmethod
    def _make_unary_op(cls, ufunc_name):
        def op(self):
            func = getattr(self._xp, ufunc_name)
            return Array._from_result(self._run(func, self._array))
        return op

    def __len__(self):
        return len(self._array)

    def __repr__(self):
        data_str = self._xp.array2string(
            self._array,
            separator=" ",
            precision=5,
            floatmode="fixed",
            max_line_width=80
        )
        lines = data_str.split("\n")
        if len(lines) > 1:
            indent = " " * len("Array(")
            data_str = lines[0] + "\n" + "\n".join(indent + line for line in lines[1:])
        device_info = f", device='{self.device}'" if "cuda" in self.device else ""
        return f"Array({data_str}, dtype={self.dtype}{device_info})"

    @staticmethod
    def _wrap(result):
        if _is_ndarray(result):
            return Array._from_result(result)
        if isinstance(result, (list, tuple)):
            return type(result)(Array._wrap(r) for r in result)
        return result

    def _unwrap_args(self, args, devices):
        def handler(x):
            if isinstance(x, Array):
                devices.add(x._device)
                return x._array
            elif isinstance(x, np.ndarray):
                devices.add("cpu")
                return x
            elif _is_cupy_array(x):
                devices.add(f"cuda:{x.device.id}")
                return x
            elif isinstance(x, (list, tuple)):
                return type(x)(handler(y) for y in x)
            elif isinstance(x, dict):
                return {k: handler(v) for k, v in x.items()}
            return x
        return handler(args)

    def __array_function__(self, func, types, args, kwargs):
        """
        np.concatenate, np.stack, np.sum, ... land here whenever one of
        the arguments is an Array. Unwrap, dispatch to numpy or cupy, rewrap.
        """
        devices = set()
        handled_args = self._unwrap_args(args, devices)
        handled_kwargs = self._unwrap_args(kwargs, devices)

        if len(devices) > 1:
            raise RuntimeError(f"Expected all tensors to be on the "
                               f"same device, but found devices {devices}!")

        device = devices.pop() if devices else self._device
        xp = np if device == "cpu" else cp
        xp_func = getattr(xp, func.__name__, None)
        if xp_func is None:
            return NotImplemented

        if xp is np:
            result = xp_func(*handled_args, **handled_kwargs)
        else:
            with cp.cuda.Device(parse_device(device)[1]):
                result = xp_func(*handled_args, **handled_kwargs)
        return self._wrap(result)

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        """
        Handle numpy ufuncs (np.add, np.tanh, np.matmul, ...) on Arrays,
        enforcing that every input lives on the same device.
        """
        if "out" in kwargs:
            return NotImplemented

        devices = set()
        arrays = self._unwrap_args(inputs, devices)
        if len(devices) > 1:
            raise RuntimeError(f"All inputs must be on the same device, found: {devices}")

        device = devices.pop() if devices else "cpu"
        if device == "cpu":
            result = getattr(ufunc, method)(*arrays, **kwargs)
        else:
            ### numpy ufunc objects dont run on cupy, grab the cupy twin by name ###
            cp_ufunc = getattr(cp, ufunc.__name__)
            with cp.cuda.Device(parse_device(device)[1]):
                result = getattr(cp_ufunc, method)(*arrays, **kwargs)
        return self._wrap(result)

    def __getitem__(self, idx):

        def _coerce_index(index):
            if isinstance(index, tuple):
                return tuple(_coerce_index(i) for i in index)
            if isinstance(index, Array):
                return index._array
            return index

        return Array._from_result(self._run(self._array.__getitem__, _coerce_index(idx)))

    def __setitem__(self, idx, value):
        if isinstance(value, Array):
            value = value._array
        self._array[idx] = value

    def __getattr__(self, name):
        """
        Anything we did not define (sum, reshape, swapaxes, ...) is forwarded
        to the underlying ndarray, and ndarray results come back as Arrays.
        """
        if name.startswith("__") or "_array" not in self.__dict__:
            raise AttributeError(name)
        if not hasattr(self._array, name):
            raise AttributeError(f"'Array' object has no attribute '{name}'")
        attr = getattr(self._array, name)
        if callable(attr):
            def method(*args, **kwargs):
                return self._wrap(self._run(attr, *args, **kwargs))
            return method
        return self._wrap(attr)

    @classmethod
    def _factory(cls, xp_func, *args, device="cpu", dtype="float32", **kwargs):
        xp = get_xp(device)
        _, dev_idx = parse_device(device)
        if xp is np:
            arr = getattr(xp, xp_func)(*args, **kwargs)
        else:
            with cp.cuda.Device(dev_idx):
                arr = getattr(xp, xp_func)(*args, **kwargs)
        return cls(arr, device=device, dtype=dtype)

    @classmethod
    def zeros(cls, shape, device="cpu", dtype="float32"):
        return cls._factory("zeros", shape, device=device, dtype=dtype)

    @classmethod
    def ones(cls, shape, device="cpu", dtype="float32"):
        return cls._factory("ones", shape, device=device, dtype=dtype)

    @classmethod
    def full(cls, shape, fill_value, device="cpu", dtype="float32"):
        return cls._factory("full", shape, fill_value, device=device, dtype=dtype)

    @classmethod
    def _random(cls, sampler, shape, device="cpu", dtype="float32", generator=None):
        """
        Sample from `generator` (a numpy/cupy RandomState) or, when it is
        None, from the global random state of the device's backend.
        """
        xp = get_xp(device)
        source = generator if generator is not None else xp.random
        _, dev_idx = parse_device(device)
        if xp is np:
            arr = getattr(source, sampler)(shape)
        else:
            with cp.cuda.Device(dev_idx):
                arr = getattr(source, sampler)(shape)
        return cls(arr, device=device, dtype=dtype)

    @classmethod
    def randn(cls, shape, device="cpu", dtype="float32", generator=None):
        return cls._random("standard_normal", shape, device=device, dtype=dtype, generator=generator)

    @classmethod
    def rand(cls, shape, device="cpu", dtype="float32", generator=None):
        return cls._random("random_sample", shape, device=device, dtype=dtype, generator=generator)

    @classmethod
    def zeros_like(cls, other, device=None, dtype=None):
        return cls.zeros(other.shape, device=device or other.device, dtype=dtype or str(other.dtype))

    @classmethod
    def ones_like(cls, other, device=None, dtype=None):
        return cls.ones(other.shape, device=device or other.device, dtype=dtype or str(other.dtype))


# Attach binary and unary operations
for dunder, ufunc in Array._binary_ufuncs.items():
    reflect = dunder.startswith("__r")
    setattr(Array, dunder, Array._make_binary_op(ufunc, reflect=reflect))

for dunder, ufunc in Array._unary_ufuncs.items():
    setattr(Array, dunder, Array._make_unary_op(ufunc))
