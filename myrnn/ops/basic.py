import numpy as np
from ..tensor import Tensor
from .. import _array as ap

### Functional Access to Non-Dunder Methods ###
def reshape(input, *shape):
    return input.reshape(*shape)

def transpose(input, dim1, dim2):
    return input.transpose(dim1, dim2)

def exp(input):
    return input.exp()

def sum(input, dim=None, keepdims=False):
    return input.sum(dim, keepdims)

def mean(input, dim=None, keepdims=False):
    return input.mean(dim, keepdims)

def chunk(input, chunks, dim=0):
    return input.chunk(chunks=chunks, dim=dim)

### MultiTensor Ops ###
def concatenate(tensors, dim=0):

    if len(tensors) == 0:
        raise ValueError("concatenate() expects a non-empty list of Tensors")

    requires_grad = any(t.requires_grad for t in tensors) and Tensor.build_graph_enabled()
    out_data = np.concatenate([t.data for t in tensors], axis=dim)

    ### For backward pass we need the sizes along the concat dim ###
    sizes = [t.shape[dim] for t in tensors]

    def _concat_backward(out_grad):
        offset = 0
        for t, size in zip(tensors, sizes):
            if t.requires_grad:
                grad_idx = [slice(None)] * out_grad.ndim
                grad_idx[dim] = slice(offset, offset + size)
                grad_chunk = ap.Array(out_grad)[tuple(grad_idx)]

                if t.grad is None:
                    t.grad = grad_chunk
                else:
                    t.grad = t.grad + grad_chunk

            offset += size

    out = Tensor(
        out_data,
        requires_grad=requires_grad,
        grad_fn=_concat_backward if requires_grad else None,
        grad_fn_name="<ConcatBackward>" if requires_grad else None,
    )

    if requires_grad:
        out._add_parents(*tensors)

    return out

def stack(tensors, dim=0):
    """
    Basically like concat, but adds a new dimension
    """
    if len(tensors) == 0:
        raise ValueError("stack() expects a non-empty list of tensors")

    requires_grad = any(t.requires_grad for t in tensors) and Tensor.build_graph_enabled()
    out_data = np.stack([t.data for t in tensors], axis=dim)

    def _stack_backward(out_grad):

        ### Stacking T tensors of (B, H) on dim 1 gives (B, T, H), the grad
        ### of tensor i is just index i along that dim
        for i, t in enumerate(tensors):
            if t.requires_grad:
                grad_idx = [slice(None)] * out_grad.ndim
                grad_idx[dim] = i
                grad_chunk = ap.Array(out_grad)[tuple(grad_idx)]

                if t.grad is None:
                    t.grad = grad_chunk
                else:
                    t.grad = t.grad + grad_chunk

    out = Tensor(
        out_data,
        requires_grad=requires_grad,
        grad_fn=_stack_backward if requires_grad else None,
        grad_fn_name="<StackBackward>" if requires_grad else None,
    )

    if requires_grad:
        out._add_parents(*tensors)

    return out
