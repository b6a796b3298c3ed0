"""Binary save and load of layer parameters.

Layout (little-endian): u64 layer count; per layer a u64 name length, the
UTF-8 name, a u64 parameter count, and per parameter i32 rows, i32 cols and
``rows*cols`` float32 values in column-major order.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO, Sequence

import numpy as np

from .errors import ErrorCategory, ZyraAIError

_SIZE = struct.Struct("<Q")
_DIMS = struct.Struct("<ii")


class SerializationError(ZyraAIError):
    """A saved model is malformed or does not match the target layers."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.RUNTIME_ERROR, "ModelSerializer")


def _as_matrix(param) -> np.ndarray:
    matrix = np.asarray(param)
    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    if matrix.ndim != 2:
        raise SerializationError(f"parameters must be 1-D or 2-D, got shape {matrix.shape}")
    return matrix


def save_model(layers: Sequence, path) -> None:
    """Write the names and parameters of ``layers`` to ``path``."""
    layers = list(layers)
    with open(path, "wb") as stream:
        stream.write(_SIZE.pack(len(layers)))
        for layer in layers:
            name = layer.name.encode("utf-8")
            stream.write(_SIZE.pack(len(name)))
            stream.write(name)
            params = [_as_matrix(p) for p in layer.parameters()]
            stream.write(_SIZE.pack(len(params)))
            for matrix in params:
                rows, cols = matrix.shape
                stream.write(_DIMS.pack(rows, cols))
                stream.write(matrix.astype("<f4").tobytes(order="F"))


def _read(stream: BinaryIO, count: int) -> bytes:
    data = stream.read(count)
    if len(data) != count:
        raise SerializationError("unexpected end of file")
    return data


def load_model(layers: Sequence, path) -> None:
    """Load parameters saved by :func:`save_model` into ``layers``.

    The file must describe the same layers, in the same order, with the same
    names and parameter shapes. Nothing is changed unless the whole file
    matches.
    """
    layers = list(layers)
    loaded: list[list[np.ndarray]] = []
    with open(Path(path), "rb") as stream:
        (num_layers,) = _SIZE.unpack(_read(stream, _SIZE.size))
        if num_layers != len(layers):
            raise SerializationError(
                f"Model structure mismatch: expected {num_layers} layers, "
                f"but got {len(layers)}"
            )
        for position, layer in enumerate(layers):
            (name_length,) = _SIZE.unpack(_read(stream, _SIZE.size))
            name = _read(stream, name_length).decode("utf-8", errors="replace")
            if name != layer.name:
                raise SerializationError(
                    f"Layer name mismatch at index {position}: expected {name}, "
                    f"but got {layer.name}"
                )
            (num_params,) = _SIZE.unpack(_read(stream, _SIZE.size))
            current = [_as_matrix(p) for p in layer.parameters()]
            if num_params != len(current):
                raise SerializationError(
                    f"Parameter count mismatch for layer {name}: expected {num_params}, "
                    f"but got {len(current)}"
                )
            values = []
            for index, matrix in enumerate(current):
                rows, cols = _DIMS.unpack(_read(stream, _DIMS.size))
                if (rows, cols) != matrix.shape:
                    raise SerializationError(
                        f"Parameter dimension mismatch for layer {name} param {index}: "
                        f"expected ({rows},{cols}), but got {matrix.shape}"
                    )
                data = _read(stream, rows * cols * 4)
                values.append(
                    np.frombuffer(data, dtype="<f4").reshape((rows, cols), order="F")
                )
            loaded.append(values)

    for layer, values in zip(layers, loaded):
        for index, (param, value) in enumerate(zip(layer.parameters(), values)):
            param = np.asarray(param, dtype=float)
            target = value.astype(float).reshape(param.shape)
            layer.update_parameter(index, param - target)