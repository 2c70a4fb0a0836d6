from myrnn import Tensor
from myrnn._array import Array
from myrnn.errors import InvalidArgumentError

def _sample_mask(input, dropout_p, generator=None):
    """
    Inverted dropout mask: keep with probability 1 - p and scale the
    survivors by 1 / (1 - p) so the expected value is unchanged.
    """
    noise = Array.rand(input.shape, device=input.device, dtype=str(input.dtype), generator=generator)
    mask = (noise >= dropout_p).astype(str(input.dtype))
    return mask * (1 / (1 - dropout_p))

def auto_dropout(input, dropout_p, training=True, generator=None):
    if not training or dropout_p == 0.0:
        return input

    return input * _sample_mask(input, dropout_p, generator)

def manual_dropout(input, dropout_p, training=True, generator=None):

    if not training or dropout_p == 0.0:
        return input

    mask = _sample_mask(input, dropout_p, generator)
    out_data = input.data * mask

    # Backward function only needs the mask (not full input_tensor)
    def _dropout_backward(input_grad):
        if input.requires_grad:
            self_grad = input_grad * mask
            if input.grad is None:
                input.grad = self_grad
            else:
                input.grad = input.grad + self_grad

    requires_grad = input.requires_grad and Tensor.build_graph_enabled()
    out = Tensor(
        out_data,
        requires_grad=requires_grad,
        grad_fn=_dropout_backward if requires_grad else None,
        grad_fn_name="<DropoutBackward>" if requires_grad else None,
    )

    if requires_grad:
        out._add_parents(input)

    return out

def dropout(input, dropout_p, training=True, auto=False, generator=None):

    if not 0.0 <= dropout_p < 1.0:
        raise InvalidArgumentError(f"'dropout_p' ({dropout_p}) must be in [0, 1).")

    if auto:
        return auto_dropout(input, dropout_p, training, generator)
    else:
        return manual_dropout(input, dropout_p, training, generator)
