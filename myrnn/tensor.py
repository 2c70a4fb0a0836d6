import weakref
import warnings
import numpy as np
from . import _array as ap
from .dtypes import float32

class no_grad:
    def __enter__(self):
        self.old_state = Tensor._build_graph
        Tensor._build_graph = False
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        Tensor._build_graph = self.old_state
        return False

    def __call__(self, func):
        def wrapper(*args, **kwargs):
            with self:
                return func(*args, **kwargs)
        return wrapper

def _unbroadcast(x_shape, grad):
    """
    Undo numpy broadcasting on a gradient: sum away the leading dims
    that were added, then the dims that were stretched from size 1.
    """
    grad_ndim = len(grad.shape) if hasattr(grad, "shape") else 0
    extra = grad_ndim - len(x_shape)
    if extra > 0:
        grad = grad.sum(axis=tuple(range(extra)))

    sum_axes = tuple(idx for idx, (x_dim, grad_dim) in enumerate(zip(x_shape, grad.shape))
                     if x_dim == 1 and grad_dim != 1)
    if sum_axes:
        grad = grad.sum(axis=sum_axes, keepdims=True)

    return grad

def _accumulate_grad(tensor, grad):
    if not isinstance(grad, ap.Array):
        grad = ap.Array(grad, device=tensor.device, dtype=str(tensor.dtype))
    ### Never accumulate in place, the same grad array can be handed to several parents ###
    if tensor.grad is None:
        tensor.grad = grad
    else:
        tensor.grad = tensor.grad + grad

class Tensor:

    _build_graph = True

    def __init__(self,
                 data,
                 requires_grad=False,
                 grad_fn=None,
                 grad_fn_name=None,
                 device=None,
                 dtype=None):

        if isinstance(data, Tensor):
            data = data.data

        ### Array handles device, dtype and every numpy op on the raw data ###
        self._data = ap.Array(data=data, device=device, dtype=dtype)

        self.requires_grad = requires_grad
        self.grad_fn = grad_fn
        self.grad_fn_name = grad_fn_name
        self.grad = None
        self._is_leaf = self.requires_grad and (self.grad_fn is None)
        self._parents = ()
        self._warn_retain_grad = False

    @property
    def xp(self):
        return self._data.xp

    @property
    def data(self):
        return self._data

    @data.setter
    def data(self, value):
        ### an Array keeps its dtype, anything else gets the default conversion ###
        if not isinstance(value, ap.Array):
            value = ap.Array(value)
        self._data = value

    @property
    def dtype(self):
        return self._data.dtype

    @property
    def device(self):
        return self._data.device

    @property
    def shape(self):
        return self._data.shape

    @property
    def ndim(self):
        return len(self._data.shape)

    @property
    def is_leaf(self):
        return self._is_leaf

    def __repr__(self):
        data_str = self.xp.array2string(
            self.data._array,
            separator=" ",
            precision=5,
            floatmode="fixed",
            max_line_width=80
        )

        lines = data_str.split("\n")
        if len(lines) > 1:
            indent = " " * len("tensor(")
            data_str = lines[0] + "\n" + "\n".join(indent + line for line in lines[1:])

        grad_info = ""
        if self.requires_grad:
            if self.grad_fn is not None:
                grad_info = f", grad_fn={self.grad_fn_name}"
            else:
                grad_info = ", requires_grad=True"

        device_info = f", device={self.device}" if "cuda" in self.device else ""
        return f"tensor({data_str}{grad_info}{device_info})"

    def to(self, device):
        self.data = self.data.to(device)
        return self

    @classmethod
    def build_graph_enabled(cls):
        return cls._build_graph

    def _coerce(self, val):
        ### Python numbers / arrays become constant tensors on our device ###
        if isinstance(val, Tensor):
            return val
        return Tensor(ap.Array(val, dtype=str(self.dtype)), device=self.device)

    def _make_output(self, data, backward, grad_fn_name, *parents):
        requires_grad = any(p.requires_grad for p in parents) and Tensor.build_graph_enabled()
        out = Tensor(data,
                     requires_grad=requires_grad,
                     grad_fn=backward if requires_grad else None,
                     grad_fn_name=grad_fn_name if requires_grad else None)
        if requires_grad:
            out._add_parents(*parents)
        return out

    def backward(self, grad=None, retain_graph=False):

        if retain_graph and not self._warn_retain_grad:
            warnings.warn("You are retaining graph, intermediate gradients may not be cleared!!")
            self._warn_retain_grad = True

        if grad is None:
            grad = ap.Array.ones_like(self.data)
        elif isinstance(grad, Tensor):
            grad = grad.data

        self.grad = grad if isinstance(grad, ap.Array) else ap.Array(grad, device=self.device)

        ### Topological order, iteratively so long unrolled sequences dont hit the recursion limit ###
        visited = set()
        topo_order = []
        stack = [(self, False)]
        while stack:
            t, expanded = stack.pop()
            if expanded:
                topo_order.append(t)
                continue
            if id(t) in visited:
                continue
            visited.add(id(t))
            stack.append((t, True))
            for parent_ref in (t._parents or ()):
                parent = parent_ref()
                if parent is not None and id(parent) not in visited:
                    stack.append((parent, False))

        for t in reversed(topo_order):
            if t.grad_fn is not None and t.grad is not None:
                t.grad_fn(t.grad)

                if not retain_graph:
                    t.grad_fn = None
                    t._parents = None
                    if not t.is_leaf:
                        t.grad = None

    ###################################
    ######## BINARY OPERATIONS ########
    ###################################

    def __add__(self, val):
        """
        O = A + B
        dO/dA = 1
        dO/dB = 1
        """
        val = self._coerce(val)
        output = np.add(self.data, val.data)

        def _add_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, _unbroadcast(self.shape, input_grad))
            if val.requires_grad:
                _accumulate_grad(val, _unbroadcast(val.shape, input_grad))

        return self._make_output(output, _add_backward, "<AddBackward>", self, val)

    def __radd__(self, val):
        return self + val

    def __sub__(self, val):
        """
        O = A - B
        dO/dA = 1
        dO/dB = -1
        """
        val = self._coerce(val)
        output = np.subtract(self.data, val.data)

        def _sub_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, _unbroadcast(self.shape, input_grad))
            if val.requires_grad:
                _accumulate_grad(val, _unbroadcast(val.shape, -input_grad))

        return self._make_output(output, _sub_backward, "<SubBackward>", self, val)

    def __rsub__(self, val):
        return self._coerce(val) - self

    def __mul__(self, val):
        """
        O = A * B
        dO/dA = B
        dO/dB = A
        """
        val = self._coerce(val)
        output = np.multiply(self.data, val.data)

        def _mul_backward(input_grad):
            if self.requires_grad:
                self_grad = np.multiply(input_grad, val.data)
                _accumulate_grad(self, _unbroadcast(self.shape, self_grad))
            if val.requires_grad:
                val_grad = np.multiply(input_grad, self.data)
                _accumulate_grad(val, _unbroadcast(val.shape, val_grad))

        return self._make_output(output, _mul_backward, "<MulBackward>", self, val)

    def __rmul__(self, val):
        return self * val

    def __truediv__(self, val):
        """
        O = A / B
        dO/dA = 1 / B
        dO/dB = -A / B^2
        """
        val = self._coerce(val)
        output = np.true_divide(self.data, val.data)

        def _div_backward(input_grad):
            if self.requires_grad:
                self_grad = np.true_divide(input_grad, val.data)
                _accumulate_grad(self, _unbroadcast(self.shape, self_grad))
            if val.requires_grad:
                val_grad = -input_grad * self.data / (val.data ** 2)
                _accumulate_grad(val, _unbroadcast(val.shape, val_grad))

        return self._make_output(output, _div_backward, "<DivBackward>", self, val)

    def __rtruediv__(self, val):
        return self._coerce(val) / self

    def __neg__(self):
        return self * -1

    def __pow__(self, exponent):
        """
        O = A ** k   (k a python number)
        dO/dA = k * A ** (k - 1)
        """
        output = self.data ** exponent

        def _pow_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, input_grad * exponent * self.data ** (exponent - 1))

        return self._make_output(output, _pow_backward, "<PowBackward>", self)

    def __matmul__(self, val):

        output_data = np.matmul(self.data, val.data)

        def _matmul_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, np.matmul(input_grad, val.data.swapaxes(-1, -2)))
            if val.requires_grad:
                _accumulate_grad(val, np.matmul(self.data.swapaxes(-1, -2), input_grad))

        return self._make_output(output_data, _matmul_backward, "<MatmulBackward>", self, val)

    ##################################
    ######## UNARY OPERATIONS ########
    ##################################

    def exp(self):
        output = np.exp(self.data)

        def _exp_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, input_grad * output)

        return self._make_output(output, _exp_backward, "<ExpBackward>", self)

    ##################################
    ######## SHAPE OPERATIONS ########
    ##################################

    def __getitem__(self, idx):
        """
        Basic indexing only (ints, slices, None, Ellipsis), which is all
        the time-step slicing in the rnn code needs.
        """
        out_data = self.data[idx]

        def _index_backward(input_grad):
            if self.requires_grad:
                grad = ap.Array.zeros_like(self.data)
                grad[idx] = input_grad
                _accumulate_grad(self, grad)

        return self._make_output(out_data, _index_backward, "<IndexBackward>", self)

    def reshape(self, *shape):
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        output = self.data.reshape(shape)

        def _reshape_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, input_grad.reshape(self.shape))

        return self._make_output(output, _reshape_backward, "<ReshapeBackward>", self)

    def transpose(self, dim1, dim2):
        output = self.data.swapaxes(dim1, dim2)

        def _transpose_backward(input_grad):
            if self.requires_grad:
                _accumulate_grad(self, input_grad.swapaxes(dim1, dim2))

        return self._make_output(output, _transpose_backward, "<TransposeBackward>", self)

    def chunk(self, chunks, dim=0):
        """
        Split into `chunks` equal pieces along `dim`, each piece is just
        a slice so the gradient flows back through __getitem__.
        """
        size = self.shape[dim]
        if size % chunks != 0:
            raise ValueError(f"Cannot split dimension {dim} of size {size} into {chunks} equal chunks")

        chunk_size = size // chunks
        out_tensors = []
        for i in range(chunks):
            idx = [slice(None)] * self.ndim
            idx[dim] = slice(i * chunk_size, (i + 1) * chunk_size)
            out_tensors.append(self[tuple(idx)])

        return out_tensors

    ############################
    ### REDUCTION OPERATIONS ###
    ############################

    def _normalize_dims(self, dim):
        if dim is None:
            return tuple(range(self.ndim))
        if isinstance(dim, int):
            dim = (dim,)
        return tuple(d % self.ndim for d in dim)

    def sum(self, dim=None, keepdims=False):
        dims = self._normalize_dims(dim)
        out_data = self.data.sum(axis=dims, keepdims=keepdims)

        def _sum_backward(input_grad):
            if self.requires_grad:
                ### put the summed dims back as size 1 and broadcast ###
                keep_shape = tuple(1 if i in dims else s for i, s in enumerate(self.shape))
                grad = ap.Array(input_grad).reshape(keep_shape)
                _accumulate_grad(self, np.broadcast_to(grad, self.shape))

        return self._make_output(out_data, _sum_backward, "<SumBackward>", self)

    def mean(self, dim=None, keepdims=False):
        dims = self._normalize_dims(dim)
        count = 1
        for d in dims:
            count *= self.shape[d]
        return self.sum(dim=dims, keepdims=keepdims) / count

    def _add_parents(self, *parents):
        """
        Store references to parent tensors as weakrefs, the backward
        closures hold the strong references.
        """
        self._parents = tuple(weakref.ref(p) for p in parents if p is not None)

    def item(self):
        if self.data.size != 1:
            raise ValueError("only one element tensors can be converted to a Python scalar")
        return self.data.asnumpy().reshape(-1)[0].item()

    def astype(self, dtype):
        self.data = self._data.astype(dtype)
        return self

    def detach(self):
        return Tensor(self.data, requires_grad=False)

    def numpy(self):
        return self.data.asnumpy()

    def __len__(self):
        return self.shape[0]

##################################################################
### TENSOR FACTORY ###############################################
##################################################################

def _shape(shape):
    if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
        return tuple(shape[0])
    return shape

def tensor(data, device="cpu", dtype=None, requires_grad=False):
    return Tensor(data, device=device, dtype=dtype, requires_grad=requires_grad)

def zeros(*shape, device="cpu", dtype=float32, requires_grad=False):
    return Tensor(ap.Array.zeros(_shape(shape), device=device, dtype=dtype), requires_grad=requires_grad)

def ones(*shape, device="cpu", dtype=float32, requires_grad=False):
    return Tensor(ap.Array.ones(_shape(shape), device=device, dtype=dtype), requires_grad=requires_grad)

def full(*shape, fill_value, device="cpu", dtype=float32, requires_grad=False):
    return Tensor(ap.Array.full(_shape(shape), fill_value, device=device, dtype=dtype), requires_grad=requires_grad)

def randn(*shape, device="cpu", dtype=float32, requires_grad=False, generator=None):
    return Tensor(ap.Array.randn(_shape(shape), device=device, dtype=dtype, generator=generator),
                  requires_grad=requires_grad)

def rand(*shape, device="cpu", dtype=float32, requires_grad=False, generator=None):
    return Tensor(ap.Array.rand(_shape(shape), device=device, dtype=dtype, generator=generator),
                  requires_grad=requires_grad)

def zeros_like(tensor, device=None, dtype=None, requires_grad=False):
    return Tensor(ap.Array.zeros_like(tensor.data, device=device, dtype=dtype), requires_grad=requires_grad)

def ones_like(tensor, device=None, dtype=None, requires_grad=False):
    return Tensor(ap.Array.ones_like(tensor.data, device=device, dtype=dtype), requires_grad=requires_grad)

def rand_like(tensor, device=None, dtype=None, requires_grad=False, generator=None):
    return rand(tensor.shape, device=device or tensor.device, dtype=dtype or str(tensor.dtype),
                requires_grad=requires_grad, generator=generator)
