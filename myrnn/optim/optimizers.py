"""
Optimizers take either an iterable of parameters

    optim = SGD(layer.parameters(), lr=0.1)
    optim = SGD(cell_instance.trainable_variables, lr=0.1)

or a list of parameter groups:

    optim = SGD([
        {'params': rnn.parameters(), 'lr': 0.1},
        {'params': head.parameters(), 'lr': 0.01, 'weight_decay': 0.0},
    ])
"""
import numpy as np

class Optimizer:
    def step(self):
        raise NotImplementedError

    def zero_grad(self):
        for group in self.param_groups:
            for p in group['params']:
                p.grad = None

    def _update_lr(self, lr):
        for group in self.param_groups:
            group["lr"] = lr

    def _build_param_groups(self, parameters, **defaults):
        parameters = list(parameters)
        if len(parameters) == 0:
            raise ValueError("optimizer got an empty parameter list")

        if isinstance(parameters[0], dict):
            groups = []
            for group in parameters:
                param_group = {key: group.get(key, value) for key, value in defaults.items()}
                param_group["params"] = [p for p in group["params"] if p.requires_grad]
                groups.append(param_group)
            return groups

        return [{"params": [p for p in parameters if p.requires_grad], **defaults}]

    def __repr__(self):
        format_string = self.__class__.__name__ + ' ('
        for i, group in enumerate(self.param_groups):
            format_string += ("\n" if i == 0 else "") + f'Parameter Group {i}\n'
            for key in sorted(group.keys()):
                if key == 'params':
                    num_params = sum(int(np.prod(p.shape)) for p in group['params'])
                    format_string += f'  {key}: {len(group[key])} tensors ({num_params:,} parameters)\n'
                else:
                    format_string += f'  {key}: {group[key]}\n'
        format_string += ')'
        return format_string

class SGD(Optimizer):
    def __init__(self, parameters, lr=0.001, weight_decay=0.0):
        self.param_groups = self._build_param_groups(parameters, lr=lr, weight_decay=weight_decay)

    def step(self):
        for group in self.param_groups:
            lr = group['lr']
            weight_decay = group['weight_decay']

            for p in group['params']:
                if p.grad is None:
                    continue

                g = p.grad

                # Apply weight decay to gradient (L2 regularization)
                if weight_decay != 0.0:
                    g = g + weight_decay * p.data

                # Tensor identity is what the cells hold on to, so only swap the data
                p.data = (p.data - lr * g).astype(str(p.dtype))
