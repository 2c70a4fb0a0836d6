import numpy as np
from myrnn import Tensor
from myrnn._array import Array
from ..basic import stack
from .cell import Tuple, map_structure

def _length_mask(sequence_lengths, step, batch_size, dtype, device):
    """
    (batch, 1) mask that is 1 for sequences still running at `step`.
    """
    if isinstance(sequence_lengths, Tensor):
        sequence_lengths = sequence_lengths.numpy()
    lengths = np.asarray(sequence_lengths).reshape(-1)
    if lengths.shape[0] != batch_size:
        raise ValueError(f"Got {lengths.shape[0]} sequence lengths for a batch of {batch_size}")
    mask = (lengths > step).astype(dtype).reshape(batch_size, 1)
    return Array(mask, device=device, dtype=dtype)

def dynamic_rnn(cell, inputs, initial_state=None, time_major=False, sequence_lengths=None):
    """
    Unroll an operational cell over the time axis of `inputs`.

    Args:
        cell: operational RNNCell
        inputs: (batch, time, features), or (time, batch, features) if time_major
        initial_state: defaults to cell.zero_state(batch)
        sequence_lengths: optional per-example lengths. Past its length an
            example emits zero outputs and carries its last state forward.

    Returns:
        Tuple(outputs, final_state), outputs stacked along the same time axis
    """
    if inputs.ndim < 3:
        raise ValueError(f"dynamic_rnn expects inputs with at least 3 dims, got shape {inputs.shape}")

    time_axis = 0 if time_major else 1
    batch_axis = 1 if time_major else 0
    num_steps = inputs.shape[time_axis]
    batch_size = inputs.shape[batch_axis]
    if num_steps == 0:
        raise ValueError("dynamic_rnn needs at least one time step")

    dtype = str(inputs.dtype)
    state = initial_state
    if state is None:
        state = cell.zero_state(batch_size, dtype=dtype, device=inputs.device)

    outputs = []
    for step in range(num_steps):
        step_input = inputs[step] if time_major else inputs[:, step]
        output, new_state = cell(Tuple(step_input, state))

        if sequence_lengths is not None:
            mask = _length_mask(sequence_lengths, step, batch_size, dtype, inputs.device)
            output = map_structure(lambda o: o * mask, output)
            new_state = map_structure(lambda new, old: new * mask + old * (1 - mask), new_state, state)

        outputs.append(output)
        state = new_state

    stacked = map_structure(lambda *steps: stack(list(steps), dim=time_axis), *outputs)
    return Tuple(stacked, state)
