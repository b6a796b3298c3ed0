"""Adam optimizer with global gradient-norm clipping and weight decay."""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np


class AdamClipOptimizer:
    """Adam over every parameter of a sequence of layers.

    Each layer provides ``parameters()``, ``gradients()`` and
    ``update_parameter(index, update)``, where the update is subtracted.
    """

    def __init__(
        self,
        layers: Iterable,
        learning_rate: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
        clip_norm: float = 1.0,
        weight_decay: float = 0.0001,
    ) -> None:
        self.layers = list(layers)
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.clip_norm = clip_norm
        self.weight_decay = weight_decay
        self.steps = 0
        self._moments = [
            (np.zeros(np.shape(param)), np.zeros(np.shape(param)))
            for layer in self.layers
            for param in layer.parameters()
        ]

    def step(self) -> None:
        """Apply one clipped Adam update using the layers' current gradients."""
        self.steps += 1
        layer_grads = [
            [np.asarray(grad, dtype=float) for grad in layer.gradients()]
            for layer in self.layers
        ]
        global_norm = math.sqrt(
            sum(float(np.sum(grad * grad)) for grads in layer_grads for grad in grads)
        )
        clip_factor = 1.0
        if global_norm > self.clip_norm and global_norm > 0:
            clip_factor = self.clip_norm / global_norm

        corrected_beta1 = 1.0 - self.beta1**self.steps
        corrected_beta2 = 1.0 - self.beta2**self.steps
        corrected_lr = self.learning_rate * math.sqrt(corrected_beta2) / corrected_beta1

        moment_index = 0
        for layer, grads in zip(self.layers, layer_grads):
            params = layer.parameters()
            for index, (param, grad) in enumerate(zip(params, grads)):
                param = np.asarray(param, dtype=float)
                effective = grad * clip_factor + self.weight_decay * param
                first, second = self._moments[moment_index]
                first = self.beta1 * first + (1.0 - self.beta1) * effective
                second = self.beta2 * second + (1.0 - self.beta2) * effective * effective
                self._moments[moment_index] = (first, second)
                update = corrected_lr * first / (np.sqrt(second) + self.epsilon)
                layer.update_parameter(index, update)
                moment_index += 1