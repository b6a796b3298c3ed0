"""NumPy layers (softmax, convolution, channel batch norm), clipped Adam, schedulers, serialization and MNIST helpers."""

__version__ = "1.0.0"
__all__ = [
    "channel_batch_norm",
    "conv",
    "errors",
    "lr_scheduler",
    "mnist",
    "optimizer",
    "serializer",
    "softmax",
]