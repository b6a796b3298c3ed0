"""Channel-wise batch normalization for convolutional feature maps."""

from __future__ import annotations

import numpy as np


class ChannelBatchNormLayer:
    """Batch normalization with one scale and one shift per channel.

    Inputs are shaped ``[channels*height*width, batch]`` and hold the channels
    one after another. In training mode each feature row is centred on its own
    batch mean. The whole channel is scaled by the standard deviation of its
    first feature row. The running statistics track that first row as well.
    In inference mode the running statistics are used instead.
    """

    def __init__(
        self,
        name: str,
        channels: int,
        height: int,
        width: int,
        momentum: float = 0.9,
        epsilon: float = 1e-5,
    ) -> None:
        if channels <= 0:
            raise ValueError("ChannelBatchNormLayer: channels must be positive")
        if height <= 0 or width <= 0:
            raise ValueError("ChannelBatchNormLayer: dimensions must be positive")
        if momentum <= 0.0 or momentum >= 1.0:
            raise ValueError("ChannelBatchNormLayer: momentum must be in range (0, 1)")
        if epsilon <= 0.0:
            raise ValueError("ChannelBatchNormLayer: epsilon must be positive")
        self.name = name
        self.channels = channels
        self.height = height
        self.width = width
        self.feature_size = height * width
        self.input_size = channels * self.feature_size
        self.output_size = self.input_size
        self.momentum = momentum
        self.epsilon = epsilon
        self.training = True

        self._gamma = np.ones(channels)
        self._beta = np.zeros(channels)
        self.running_mean = np.zeros(channels)
        self.running_var = np.ones(channels)
        self._grad_gamma = np.zeros(channels)
        self._grad_beta = np.zeros(channels)

        self._input: np.ndarray | None = None
        self._batch_mean: np.ndarray | None = None
        self._batch_var: np.ndarray | None = None

    @property
    def layer_type(self) -> str:
        return "ChannelBatchNormLayer"

    def _split(self, matrix: np.ndarray) -> np.ndarray:
        """View ``[C*F, batch]`` as ``[C, F, batch]``."""
        return matrix.reshape(self.channels, self.feature_size, matrix.shape[1])

    def _check_rows(self, matrix: np.ndarray, where: str, what: str) -> None:
        if matrix.ndim != 2 or matrix.shape[0] != self.input_size:
            got = matrix.shape[0] if matrix.ndim >= 1 else 0
            raise ValueError(
                f"ChannelBatchNormLayer.{where}: {what} dimension mismatch. "
                f"Expected: {self.input_size}, got: {got}"
            )

    def forward(self, inputs) -> np.ndarray:
        """Normalize, scale and shift each channel of the batch."""
        x = np.asarray(inputs, dtype=float)
        self._check_rows(x, "forward", "input")
        self._input = x
        data = self._split(x)
        gamma = self._gamma[:, None, None]
        beta = self._beta[:, None, None]

        if self.training:
            mean = data.mean(axis=2)
            centered = data - mean[:, :, None]
            var = (centered**2).mean(axis=2)
            keep = self.momentum
            self.running_mean = keep * self.running_mean + (1.0 - keep) * mean[:, 0]
            self.running_var = keep * self.running_var + (1.0 - keep) * var[:, 0]
            self._batch_mean = mean
            self._batch_var = var
            std = np.sqrt(var[:, 0] + self.epsilon)[:, None, None]
        else:
            centered = data - self.running_mean[:, None, None]
            std = np.sqrt(self.running_var + self.epsilon)[:, None, None]

        output = gamma * (centered / std) + beta
        return output.reshape(self.input_size, x.shape[1])

    def backward(self, grad_output, learning_rate: float) -> np.ndarray:
        """Return the input gradient and apply an SGD step to gamma and beta."""
        grad = np.asarray(grad_output, dtype=float)
        self._check_rows(grad, "backward", "gradient")
        if learning_rate <= 0.0:
            raise ValueError(
                "ChannelBatchNormLayer.backward: learning_rate must be positive"
            )
        if self._input is None or self._batch_mean is None or self._batch_var is None:
            raise RuntimeError(
                "ChannelBatchNormLayer.backward needs a preceding training forward pass"
            )
        if grad.shape != self._input.shape:
            raise ValueError(
                "ChannelBatchNormLayer.backward: batch size does not match the last forward pass"
            )
        batch_size = grad.shape[1]
        data = self._split(self._input)
        grad_out = self._split(grad)

        var0 = self._batch_var[:, 0] + self.epsilon
        std = np.sqrt(var0)[:, None, None]
        centered = data - self._batch_mean[:, :, None]
        normalized = centered / std

        self._grad_gamma = (normalized * grad_out).sum(axis=(1, 2))
        self._grad_beta = grad_out.sum(axis=(1, 2))

        grad_norm = grad_out * self._gamma[:, None, None]
        grad_centered = grad_norm / std
        grad_var = (grad_norm * centered).sum(axis=(1, 2)) * -0.5 * var0**-1.5
        grad_sum_squares = (grad_var / batch_size)[:, None, None]
        grad_centered = grad_centered + 2.0 * centered * grad_sum_squares
        grad_mean = -grad_centered.sum(axis=2, keepdims=True)
        grad_input = grad_centered + grad_mean / batch_size

        self._gamma = self._gamma - learning_rate * self._grad_gamma
        self._beta = self._beta - learning_rate * self._grad_beta
        self._batch_mean = None
        self._batch_var = None
        return grad_input.reshape(self.input_size, batch_size)

    def parameters(self) -> list[np.ndarray]:
        """Copies of gamma and beta, each shaped ``[channels, 1]``."""
        return [self._gamma.reshape(-1, 1).copy(), self._beta.reshape(-1, 1).copy()]

    def gradients(self) -> list[np.ndarray]:
        """Copies of the gamma and beta gradients, each ``[channels, 1]``."""
        return [
            self._grad_gamma.reshape(-1, 1).copy(),
            self._grad_beta.reshape(-1, 1).copy(),
        ]

    def update_parameter(self, index: int, update) -> None:
        """Subtract the first column of ``update`` from gamma (0) or beta (1)."""
        delta = np.asarray(update, dtype=float)
        column = delta[:, 0] if delta.ndim == 2 else delta
        if index == 0:
            self._gamma = self._gamma - column
        elif index == 1:
            self._beta = self._beta - column
        else:
            raise ValueError(
                "ChannelBatchNormLayer.update_parameter: invalid parameter index"
            )

    def set_training(self, training: bool) -> None:
        self.training = bool(training)