# zyraai

Neural-network building blocks on NumPy. Data is laid out feature-major: a
batch is a 2-D array of shape `(features, batch_size)`, one sample per
column. Image-like inputs hold their channels one after another, each
channel a `height * width` block of rows.

## Modules

- `zyraai.softmax`: `SoftmaxLayer(name, size)`, a column-wise softmax whose
  `backward` applies the full softmax Jacobian to the incoming gradient.
- `zyraai.conv`: `im2col` and `col2im` (its adjoint), and
  `OptimizedConvLayer(name, input_channels, input_height, input_width,
  num_filters, filter_size, stride=1, padding=0, rng=None)`, a 2-D
  convolution with uniform Xavier-initialised filters and zero biases.
  `rng` is anything `numpy.random.default_rng` accepts. Its `backward`
  averages the gradients over the batch and takes a plain SGD step with the
  given learning rate.
- `zyraai.channel_batch_norm`: `ChannelBatchNormLayer(name, channels,
  height, width, momentum=0.9, epsilon=1e-5)`, with one scale (gamma) and
  one shift (beta) per channel. It keeps running statistics for inference
  mode (`set_training(False)`). In training mode each feature row is
  centred on its own batch mean, and the channel is scaled by the standard
  deviation of its first row. The running statistics follow that first row
  too. `backward` needs a preceding training-mode `forward` and a positive
  learning rate.
- `zyraai.optimizer`: `AdamClipOptimizer(layers, learning_rate=0.001,
  beta1=0.9, beta2=0.999, epsilon=1e-8, clip_norm=1.0,
  weight_decay=0.0001)`. `step()` clips all gradients together by their
  global norm, adds L2 weight decay and applies a bias-corrected Adam
  update to every parameter. `learning_rate`, `clip_norm` and
  `weight_decay` are plain attributes that may be changed between steps.
- `zyraai.lr_scheduler`: `CosineAnnealingScheduler`, `StepScheduler`,
  `MultiStepScheduler` and `WarmupCosineScheduler`, each with
  `learning_rate(epoch)`.
- `zyraai.serializer`: `save_model(layers, path)` and
  `load_model(layers, path)` write and read the names and parameters of a
  list of layers in a little-endian binary file. `load_model` raises
  `SerializationError` if the file is truncated or does not match the
  layers in count, names, or parameter counts and shapes. It changes
  nothing unless the whole file matches. Values are stored as float32.
- `zyraai.errors`: `ErrorCategory` and the exception hierarchy
  `ZyraAIError`, `InvalidArgument`, `DimensionMismatch` (with
  `DimensionMismatch.from_dims(expected, actual, component)`),
  `OutOfRange`, `NumericError`, `HardwareError` and
  `UnsupportedOperation`. Messages read `"[CATEGORY in component] message"`.
- `zyraai.mnist`: helpers for MNIST:
  - `read_mnist(images_path, labels_path, num_samples)` reads IDX files and
    returns standardized images `(784, n)` and one-hot labels `(10, n)`.
  - `shift_image`, `add_noise`, `rotate_image` and `augment_image` change
    784-value images, read as 28x28 grids in column-major order.
  - `ensure_directory(path)` creates a directory and returns `True` if it
    was missing.
  - `format_time(milliseconds)` gives strings such as `"2m 5s"`.

The layers give errors as `ValueError` for bad sizes or shapes. They give
`RuntimeError` when `backward` is called before `forward`.

## Layer interface

The optimizer and the serializer work with any object that provides:

- `name`
- `parameters()`, which returns copies of its parameter arrays
- `gradients()`, which returns the matching gradients
- `update_parameter(index, update)`, which subtracts `update` from
  parameter `index`

The three layers above all do this. They also have `forward(inputs)`,
`backward(grad_output, learning_rate)`, `set_training(training)` and a
`layer_type` property.

## Example

```python
import numpy as np

from zyraai.conv import OptimizedConvLayer
from zyraai.lr_scheduler import WarmupCosineScheduler
from zyraai.optimizer import AdamClipOptimizer
from zyraai.serializer import load_model, save_model
from zyraai.softmax import SoftmaxLayer

rng = np.random.default_rng(0)
conv = OptimizedConvLayer("conv1", 1, 28, 28, 4, 3, 1, 1, rng)
softmax = SoftmaxLayer("softmax", 4 * 28 * 28)
layers = [conv, softmax]

optimizer = AdamClipOptimizer(layers, 0.0005, 0.9, 0.999, 1e-8, 1.0, 0.0001)
scheduler = WarmupCosineScheduler(0.0005, 0.00001, 8, 30)

batch = rng.standard_normal((784, 16))
for epoch in range(3):
    optimizer.learning_rate = scheduler.learning_rate(epoch)
    out = softmax.forward(conv.forward(batch))
    grad = softmax.backward(out - 1.0 / out.shape[0], 0.0)
    conv.backward(grad, 0.0)
    optimizer.step()

save_model(layers, "model.bin")
load_model(layers, "model.bin")
```

## What the package does not do

The package has no model container, loss function or training loop; you
hold the layers in a list and drive them yourself, as in the example. It
has no dense, ReLU, dropout, pooling or flatten layers, so a complete
classifier needs those from elsewhere. There is no command-line program.

## Installation and tests

```
pip install .
pip install .[test]
pytest
```