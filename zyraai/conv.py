"""Convolution layer built on im2col / col2im matrix products."""

from __future__ import annotations

import itertools
import math

import numpy as np


def _check_positive(**dims: int) -> None:
    for label, value in dims.items():
        if value <= 0:
            raise ValueError(f"{label} must be positive, got: {value}")


def _window(fh: int, fw: int, stride: int, output_height: int, output_width: int):
    """Slices picking, for one filter offset, the padded pixels of every output position."""
    return (
        slice(None),
        slice(fh, fh + stride * (output_height - 1) + 1, stride),
        slice(fw, fw + stride * (output_width - 1) + 1, stride),
        slice(None),
    )


def _padded_extent(size: int, filter_size: int, stride: int, padding: int, output: int) -> int:
    return max(size + 2 * padding, (output - 1) * stride + filter_size)


def im2col(
    inputs,
    input_channels: int,
    input_height: int,
    input_width: int,
    filter_size: int,
    stride: int,
    padding: int,
    output_height: int,
    output_width: int,
    batch_size: int,
) -> np.ndarray:
    """Unfold image patches into columns.

    ``inputs`` is ``[channels*height*width, batch]``. The result has one row per
    ``(channel, fh, fw)`` filter tap and one column per ``(batch, oh, ow)``
    output position; taps falling into the padding are zero.
    """
    _check_positive(
        input_channels=input_channels,
        input_height=input_height,
        input_width=input_width,
        filter_size=filter_size,
        stride=stride,
        output_height=output_height,
        output_width=output_width,
        batch_size=batch_size,
    )
    x = np.asarray(inputs, dtype=float)
    expected = (input_channels * input_height * input_width, batch_size)
    if x.shape != expected:
        raise ValueError(f"im2col: expected input of shape {expected}, got: {x.shape}")

    image = x.reshape(input_channels, input_height, input_width, batch_size)
    padded = np.zeros(
        (
            input_channels,
            _padded_extent(input_height, filter_size, stride, padding, output_height),
            _padded_extent(input_width, filter_size, stride, padding, output_width),
            batch_size,
        )
    )
    padded[:, padding : padding + input_height, padding : padding + input_width, :] = image

    columns = np.empty(
        (input_channels, filter_size, filter_size, batch_size, output_height, output_width)
    )
    for fh, fw in itertools.product(range(filter_size), repeat=2):
        patch = padded[_window(fh, fw, stride, output_height, output_width)]
        columns[:, fh, fw] = patch.transpose(0, 3, 1, 2)
    return columns.reshape(
        input_channels * filter_size * filter_size,
        batch_size * output_height * output_width,
    )


def col2im(
    columns,
    input_channels: int,
    input_height: int,
    input_width: int,
    filter_size: int,
    stride: int,
    padding: int,
    output_height: int,
    output_width: int,
    batch_size: int,
) -> np.ndarray:
    """Fold columns back into images, summing overlapping contributions.

    This is the adjoint of :func:`im2col`; taps that fall into the padding
    are dropped.
    """
    _check_positive(
        input_channels=input_channels,
        input_height=input_height,
        input_width=input_width,
        filter_size=filter_size,
        stride=stride,
        output_height=output_height,
        output_width=output_width,
        batch_size=batch_size,
    )
    cols = np.asarray(columns, dtype=float)
    expected = (
        input_channels * filter_size * filter_size,
        batch_size * output_height * output_width,
    )
    if cols.shape != expected:
        raise ValueError(f"col2im: expected columns of shape {expected}, got: {cols.shape}")

    taps = cols.reshape(
        input_channels, filter_size, filter_size, batch_size, output_height, output_width
    )
    padded = np.zeros(
        (
            input_channels,
            _padded_extent(input_height, filter_size, stride, padding, output_height),
            _padded_extent(input_width, filter_size, stride, padding, output_width),
            batch_size,
        )
    )
    for fh, fw in itertools.product(range(filter_size), repeat=2):
        padded[_window(fh, fw, stride, output_height, output_width)] += taps[
            :, fh, fw
        ].transpose(0, 2, 3, 1)
    image = padded[:, padding : padding + input_height, padding : padding + input_width, :]
    return image.reshape(input_channels * input_height * input_width, batch_size)


class OptimizedConvLayer:
    """2-D convolution over inputs shaped ``[channels*height*width, batch]``."""

    def __init__(
        self,
        name: str,
        input_channels: int,
        input_height: int,
        input_width: int,
        num_filters: int,
        filter_size: int,
        stride: int = 1,
        padding: int = 0,
        rng=None,
    ) -> None:
        _check_positive(
            input_channels=input_channels,
            input_height=input_height,
            input_width=input_width,
            num_filters=num_filters,
            filter_size=filter_size,
            stride=stride,
        )
        if padding < 0:
            raise ValueError(f"padding must not be negative, got: {padding}")
        self.name = name
        self.input_channels = input_channels
        self.input_height = input_height
        self.input_width = input_width
        self.num_filters = num_filters
        self.filter_size = filter_size
        self.stride = stride
        self.padding = padding
        self.output_height = (input_height - filter_size + 2 * padding) // stride + 1
        self.output_width = (input_width - filter_size + 2 * padding) // stride + 1
        _check_positive(output_height=self.output_height, output_width=self.output_width)
        self.input_size = input_channels * input_height * input_width
        self.output_size = num_filters * self.output_height * self.output_width
        self.training = True

        taps = filter_size * filter_size * input_channels
        fan_in = taps
        fan_out = filter_size * filter_size * num_filters
        scale = math.sqrt(6.0 / (fan_in + fan_out))
        generator = np.random.default_rng(rng)
        self._filters = generator.uniform(-scale, scale, size=(num_filters, taps))
        self._biases = np.zeros((num_filters, 1))
        self._grad_filters = np.zeros_like(self._filters)
        self._grad_biases = np.zeros_like(self._biases)
        self._input_cols: np.ndarray | None = None

    @property
    def layer_type(self) -> str:
        return "OptimizedConvLayer"

    def _geometry(self, batch_size: int) -> tuple:
        return (
            self.input_channels,
            self.input_height,
            self.input_width,
            self.filter_size,
            self.stride,
            self.padding,
            self.output_height,
            self.output_width,
            batch_size,
        )

    def forward(self, inputs) -> np.ndarray:
        """Convolve the batch and add per-filter biases."""
        x = np.asarray(inputs, dtype=float)
        if x.ndim != 2 or x.shape[0] != self.input_size:
            raise ValueError(
                "OptimizedConvLayer.forward: input dimension mismatch. "
                f"Expected: {self.input_size}, got shape: {x.shape}"
            )
        batch_size = x.shape[1]
        self._input_cols = im2col(x, *self._geometry(batch_size))
        product = self._filters @ self._input_cols
        spatial = self.output_height * self.output_width
        output = product.reshape(self.num_filters, batch_size, spatial).transpose(0, 2, 1)
        output = output + self._biases[:, :, None]
        return output.reshape(self.output_size, batch_size)

    def backward(self, grad_output, learning_rate: float) -> np.ndarray:
        """Compute gradients, apply a plain SGD step and return the input gradient."""
        if self._input_cols is None:
            raise RuntimeError("OptimizedConvLayer.backward called before forward")
        grad = np.asarray(grad_output, dtype=float)
        if grad.ndim != 2 or grad.shape[0] != self.output_size:
            raise ValueError(
                "OptimizedConvLayer.backward: gradient dimension mismatch. "
                f"Expected: {self.output_size}, got shape: {grad.shape}"
            )
        batch_size = grad.shape[1]
        spatial = self.output_height * self.output_width
        if self._input_cols.shape[1] != batch_size * spatial:
            raise ValueError(
                "OptimizedConvLayer.backward: batch size does not match the last forward pass"
            )
        reshaped = (
            grad.reshape(self.num_filters, spatial, batch_size)
            .transpose(0, 2, 1)
            .reshape(self.num_filters, batch_size * spatial)
        )
        self._grad_filters = reshaped @ self._input_cols.T / batch_size
        self._grad_biases = reshaped.sum(axis=1, keepdims=True) / batch_size
        grad_input = col2im(self._filters.T @ reshaped, *self._geometry(batch_size))
        self._filters -= learning_rate * self._grad_filters
        self._biases -= learning_rate * self._grad_biases
        return grad_input

    def parameters(self) -> list[np.ndarray]:
        """Copies of the filters ``[filters, taps]`` and biases ``[filters, 1]``."""
        return [self._filters.copy(), self._biases.copy()]

    def gradients(self) -> list[np.ndarray]:
        """Copies of the gradients from the last backward pass."""
        return [self._grad_filters.copy(), self._grad_biases.copy()]

    def update_parameter(self, index: int, update) -> None:
        """Subtract ``update`` from parameter ``index``; other indices are ignored."""
        delta = np.asarray(update, dtype=float)
        if index == 0:
            self._filters -= delta.reshape(self._filters.shape)
        elif index == 1:
            self._biases -= delta.reshape(self._biases.shape)

    def set_training(self, training: bool) -> None:
        self.training = bool(training)