"""Softmax activation layer operating on column batches."""

from __future__ import annotations

import numpy as np


class SoftmaxLayer:
    """Column-wise softmax over inputs shaped ``[features, batch]``."""

    def __init__(self, name: str, size: int) -> None:
        if size <= 0:
            raise ValueError(f"SoftmaxLayer: size must be positive, got: {size}")
        self.name = name
        self.input_size = size
        self.output_size = size
        self.training = True
        self._last_input: np.ndarray | None = None
        self._last_output: np.ndarray | None = None

    @property
    def layer_type(self) -> str:
        return "SoftmaxLayer"

    def forward(self, inputs) -> np.ndarray:
        """Apply softmax to each column and cache the result."""
        x = np.asarray(inputs, dtype=float)
        if x.ndim != 2 or x.shape[0] != self.input_size:
            got = x.shape[0] if x.ndim >= 1 else 0
            raise ValueError(
                "SoftmaxLayer.forward: input dimension mismatch. "
                f"Expected: {self.input_size}, got: {got}"
            )
        self._last_input = x
        exp = np.exp(x - x.max(axis=0, keepdims=True))
        self._last_output = exp / exp.sum(axis=0, keepdims=True)
        return self._last_output.copy()

    def backward(self, grad_output, learning_rate: float) -> np.ndarray:
        """Propagate ``grad_output`` through the softmax Jacobian."""
        grad = np.asarray(grad_output, dtype=float)
        if grad.ndim != 2 or grad.shape[0] != self.output_size:
            got = grad.shape[0] if grad.ndim >= 1 else 0
            raise ValueError(
                "SoftmaxLayer.backward: gradient dimension mismatch. "
                f"Expected: {self.output_size}, got: {got}"
            )
        if self._last_output is None:
            raise RuntimeError("SoftmaxLayer.backward called before forward")
        if grad.shape != self._last_output.shape:
            raise ValueError(
                "SoftmaxLayer.backward: batch size does not match the last forward pass"
            )
        s = self._last_output
        # J @ g with J_jk = s_j * (delta_jk - s_k), for every column at once.
        return s * (grad - (s * grad).sum(axis=0, keepdims=True))

    def parameters(self) -> list[np.ndarray]:
        """Softmax has no trainable parameters."""
        return []

    def gradients(self) -> list[np.ndarray]:
        """Softmax has no parameter gradients."""
        return []

    def update_parameter(self, index: int, update) -> None:
        """Softmax holds no parameters, so every index is out of range."""
        count = len(self.parameters())
        if not 0 <= index < count:
            raise IndexError(
                f"SoftmaxLayer.update_parameter: invalid parameter index {index}; "
                f"layer has {count} parameters"
            )

    def set_training(self, training: bool) -> None:
        self.training = bool(training)