"""
Forward:
    y = x @ W.T + b
    x: (B, I)        input
    W: (O, I)        weight
    b: (O,)          bias (broadcasted)
    y: (B, O)        output

Backward (given grad_y = dL/dy in (B, O)):

    dx = grad_y @ W          (B, O) @ (O, I) -> (B, I)
    dW = grad_y.T @ x        (O, B) @ (B, I) -> (O, I)
    db = grad_y.sum(axis=0)  (B, O) -> (O,)

Inputs with more than two dims, e.g. (B, T, I) sequence outputs, are
flattened to (B*T, I) for the matmul and reshaped back afterwards.
"""

import numpy as np
from myrnn import Tensor

def auto_linear(input, weight, bias=None):

    """
    auto_linear will leverage our autograd system
    to perform the operation
    """
    output = input @ weight.transpose(-1, -2)
    if bias is not None:
        output = output + bias
    return output

def manual_linear(input, weight, bias=None):

    """
    manual_linear will manually pass the gradients
    backward for this operation
    """
    *dims, in_features = input.shape
    out_features = weight.shape[0]

    input_arr = input.data.reshape(-1, in_features)
    weight_arr = weight.data.T

    output = np.matmul(input_arr, weight_arr)
    if bias is not None:
        output = output + bias.data.reshape(1, -1)

    output = output.reshape(*dims, out_features)

    def _linear_backward(grad_output):

        ### Grads come in as (*, O), our matmul happened on (N, O) ###
        grad_output = grad_output.reshape(-1, out_features)

        if weight.requires_grad:
            grad_W = np.matmul(grad_output.T, input_arr)
            if weight.grad is None:
                weight.grad = grad_W
            else:
                weight.grad = weight.grad + grad_W

        if bias is not None and bias.requires_grad:
            grad_b = grad_output.sum(axis=0)
            if bias.grad is None:
                bias.grad = grad_b
            else:
                bias.grad = bias.grad + grad_b

        if input.requires_grad:
            grad_input = np.matmul(grad_output, weight.data).reshape(*dims, in_features)
            if input.grad is None:
                input.grad = grad_input
            else:
                input.grad = input.grad + grad_input

    requires_grad = input.requires_grad or weight.requires_grad or \
                        (bias is not None and bias.requires_grad)
    requires_grad = requires_grad and Tensor.build_graph_enabled()
    output = Tensor(
        output,
        requires_grad=requires_grad,
        grad_fn=_linear_backward if requires_grad else None,
        grad_fn_name="<LinearBackward>" if requires_grad else None
    )

    if requires_grad:
        output._add_parents(input, weight, bias)

    return output

def linear(input, weight, bias=None, auto=False):
    if auto:
        return auto_linear(input, weight, bias)
    return manual_linear(input, weight, bias)
