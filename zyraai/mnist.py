"""MNIST loading, image augmentation and small training-run helpers.

Images are column vectors of 784 values. A vector is viewed as a 28x28 grid
in column-major order, so grid element ``(y, x)`` is vector element
``x * 28 + y``.
"""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np

IMAGE_SIDE = 28
IMAGE_SIZE = IMAGE_SIDE * IMAGE_SIDE
NUM_CLASSES = 10
IMAGE_HEADER_BYTES = 16
LABEL_HEADER_BYTES = 8
_STD_EPSILON = 1e-7
_CENTER = 13.5


def read_mnist(images_path, labels_path, num_samples: int) -> tuple[np.ndarray, np.ndarray]:
    """Read the first ``num_samples`` images and labels from IDX files.

    Returns ``(images, labels)``: images shaped ``[784, num_samples]`` and
    standardized with the mean and standard deviation of all pixels read
    (pixels first scaled to ``[0, 1]``), labels one-hot shaped
    ``[10, num_samples]``.
    """
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got: {num_samples}")

    image_bytes = Path(images_path).read_bytes()
    needed = IMAGE_HEADER_BYTES + num_samples * IMAGE_SIZE
    if len(image_bytes) < needed:
        raise ValueError(
            f"images file {images_path} holds fewer than {num_samples} images"
        )
    pixels = np.frombuffer(image_bytes, dtype=np.uint8, count=num_samples * IMAGE_SIZE,
                           offset=IMAGE_HEADER_BYTES)
    scaled = pixels.astype(float).reshape(num_samples, IMAGE_SIZE) / 255.0
    mean = float(scaled.mean())
    variance = max(float((scaled * scaled).mean()) - mean * mean, 0.0)
    std = math.sqrt(variance)
    images = ((scaled - mean) / (std + _STD_EPSILON)).T.copy()

    label_bytes = Path(labels_path).read_bytes()
    if len(label_bytes) < LABEL_HEADER_BYTES + num_samples:
        raise ValueError(
            f"labels file {labels_path} holds fewer than {num_samples} labels"
        )
    labels = np.frombuffer(label_bytes, dtype=np.uint8, count=num_samples,
                           offset=LABEL_HEADER_BYTES)
    if labels.max() >= NUM_CLASSES:
        raise ValueError(f"label out of range in {labels_path}: {int(labels.max())}")
    one_hot = np.zeros((NUM_CLASSES, num_samples))
    one_hot[labels, np.arange(num_samples)] = 1.0
    return images, one_hot


def _as_grid(image) -> tuple[np.ndarray, tuple[int, ...]]:
    array = np.asarray(image, dtype=float)
    if array.size != IMAGE_SIZE:
        raise ValueError(f"image must hold {IMAGE_SIZE} values, got: {array.size}")
    return array.reshape(IMAGE_SIDE, IMAGE_SIDE, order="F").copy(), array.shape


def _as_vector(grid: np.ndarray, shape: tuple[int, ...]) -> np.ndarray:
    return grid.reshape(-1, order="F").reshape(shape)


def shift_image(image, shift_x: int, shift_y: int) -> np.ndarray:
    """Move the image by whole pixels, filling uncovered pixels with zero."""
    grid, shape = _as_grid(image)
    shifted = np.zeros_like(grid)
    src_y = slice(max(0, -shift_y), min(IMAGE_SIDE, IMAGE_SIDE - shift_y))
    dst_y = slice(max(0, shift_y), min(IMAGE_SIDE, IMAGE_SIDE + shift_y))
    src_x = slice(max(0, -shift_x), min(IMAGE_SIDE, IMAGE_SIDE - shift_x))
    dst_x = slice(max(0, shift_x), min(IMAGE_SIDE, IMAGE_SIDE + shift_x))
    if src_y.start < src_y.stop and src_x.start < src_x.stop:
        shifted[dst_y, dst_x] = grid[src_y, src_x]
    return _as_vector(shifted, shape)


def add_noise(image, rng=None, stddev: float = 0.05) -> np.ndarray:
    """Add Gaussian noise and clamp every pixel to ``[0, 1]``."""
    grid, shape = _as_grid(image)
    generator = np.random.default_rng(rng)
    noisy = np.clip(grid + generator.normal(0.0, stddev, size=grid.shape), 0.0, 1.0)
    return _as_vector(noisy, shape)


def rotate_image(image, angle_degrees: float) -> np.ndarray:
    """Rotate about the image centre with bilinear sampling.

    Output pixels whose sampling square leaves the image are zero.
    """
    grid, shape = _as_grid(image)
    angle = math.radians(angle_degrees)
    sin_a, cos_a = math.sin(angle), math.cos(angle)
    ys, xs = np.meshgrid(np.arange(IMAGE_SIDE, dtype=float),
                         np.arange(IMAGE_SIDE, dtype=float), indexing="ij")
    xr = cos_a * (xs - _CENTER) - sin_a * (ys - _CENTER) + _CENTER
    yr = sin_a * (xs - _CENTER) + cos_a * (ys - _CENTER) + _CENTER
    x0 = np.trunc(xr).astype(int)
    y0 = np.trunc(yr).astype(int)
    inside = (x0 >= 0) & (x0 + 1 < IMAGE_SIDE) & (y0 >= 0) & (y0 + 1 < IMAGE_SIDE)

    rotated = np.zeros_like(grid)
    x0i, y0i = x0[inside], y0[inside]
    dx = xr[inside] - x0i
    dy = yr[inside] - y0i
    rotated[inside] = (
        (1 - dx) * (1 - dy) * grid[y0i, x0i]
        + dx * (1 - dy) * grid[y0i, x0i + 1]
        + (1 - dx) * dy * grid[y0i + 1, x0i]
        + dx * dy * grid[y0i + 1, x0i + 1]
    )
    return _as_vector(rotated, shape)


def augment_image(image, rng=None) -> np.ndarray:
    """Randomly shift (70%), add noise (30%) and rotate (20%) an image."""
    generator = np.random.default_rng(rng)
    result = np.asarray(image, dtype=float)
    if result.size != IMAGE_SIZE:
        raise ValueError(f"image must hold {IMAGE_SIZE} values, got: {result.size}")
    if generator.integers(10) < 7:
        shift_x = int(generator.integers(5)) - 2
        shift_y = int(generator.integers(5)) - 2
        result = shift_image(result, shift_x, shift_y)
    if generator.integers(10) < 3:
        result = add_noise(result, generator)
    if generator.integers(10) < 2:
        result = rotate_image(result, int(generator.integers(20)) - 10)
    return np.array(result, dtype=float)


def ensure_directory(path) -> bool:
    """Create ``path`` (with parents) if missing; return whether it was created."""
    directory = Path(path)
    if directory.exists():
        return False
    directory.mkdir(parents=True, exist_ok=True)
    return True


def format_time(milliseconds) -> str:
    """Format a duration in milliseconds as ``"<minutes>m <seconds>s"``."""
    sign = -1 if milliseconds < 0 else 1
    total_seconds = int(abs(milliseconds)) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{sign * minutes}m {sign * seconds}s"