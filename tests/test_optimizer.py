import numpy as np
import pytest

from zyraai.conv import OptimizedConvLayer
from zyraai.optimizer import AdamClipOptimizer


class _FixedLayer:
    """Layer with fixed gradients whose updates are subtracted."""

    def __init__(self, params, grads):
        self.name = "fixed"
        self.params = [np.array(p, dtype=float) for p in params]
        self.grads = [np.array(g, dtype=float) for g in grads]

    def parameters(self):
        return [p.copy() for p in self.params]

    def gradients(self):
        return [g.copy() for g in self.grads]

    def update_parameter(self, index, update):
        self.params[index] = self.params[index] - update


def test_first_step_moves_each_weight_by_learning_rate_against_gradient():
    grads = np.array([[0.3, -0.2], [0.05, -0.4]])
    layer = _FixedLayer([np.zeros((2, 2))], [grads])
    opt = AdamClipOptimizer([layer], learning_rate=0.01, clip_norm=100.0, weight_decay=0.0)
    opt.step()
    np.testing.assert_allclose(layer.params[0], -0.01 * np.sign(grads), rtol=1e-5)
    assert opt.steps == 1


def test_zero_gradient_and_no_decay_leaves_parameters():
    start = np.array([[1.0, -2.0, 3.0]])
    layer = _FixedLayer([start], [np.zeros((1, 3))])
    opt = AdamClipOptimizer([layer], weight_decay=0.0)
    for _ in range(3):
        opt.step()
    np.testing.assert_array_equal(layer.params[0], start)


def test_weight_decay_alone_shrinks_parameters():
    start = np.array([[2.0, -3.0]])
    layer = _FixedLayer([start], [np.zeros((1, 2))])
    opt = AdamClipOptimizer([layer], learning_rate=0.01, weight_decay=0.1)
    opt.step()
    assert np.all(np.abs(layer.params[0]) < np.abs(start))
    np.testing.assert_allclose(np.abs(start) - np.abs(layer.params[0]), 0.01, rtol=1e-5)


def test_clipping_rescales_to_clip_norm():
    rng = np.random.default_rng(0)
    start = rng.normal(size=(3, 2))
    direction = rng.normal(size=(3, 2))
    unit = direction / np.linalg.norm(direction)

    big = _FixedLayer([start], [1000.0 * direction])
    clipped = AdamClipOptimizer([big], learning_rate=0.05, clip_norm=1.0, weight_decay=0.5)
    reference = _FixedLayer([start], [unit])
    unclipped = AdamClipOptimizer(
        [reference], learning_rate=0.05, clip_norm=1e9, weight_decay=0.5
    )
    for _ in range(3):
        clipped.step()
        unclipped.step()
    np.testing.assert_allclose(big.params[0], reference.params[0], rtol=1e-9, atol=1e-12)


def test_gradients_below_clip_norm_are_untouched():
    rng = np.random.default_rng(1)
    start = rng.normal(size=(2, 2))
    grads = 0.01 * rng.normal(size=(2, 2))
    a = _FixedLayer([start], [grads])
    b = _FixedLayer([start], [grads])
    AdamClipOptimizer([a], clip_norm=1.0, weight_decay=0.3).step()
    AdamClipOptimizer([b], clip_norm=1e6, weight_decay=0.3).step()
    np.testing.assert_array_equal(a.params[0], b.params[0])


def test_learning_rate_can_be_changed_between_steps():
    layer = _FixedLayer([np.zeros((1, 1))], [np.ones((1, 1))])
    opt = AdamClipOptimizer([layer], learning_rate=0.01, weight_decay=0.0)
    opt.learning_rate = 0.0
    opt.step()
    np.testing.assert_array_equal(layer.params[0], np.zeros((1, 1)))


def test_multiple_layers_each_get_their_own_moments():
    first = _FixedLayer([np.zeros(2), np.zeros((1, 1))], [np.ones(2), -np.ones((1, 1))])
    second = _FixedLayer([np.zeros((2, 1))], [np.array([[2.0], [-3.0]])])
    opt = AdamClipOptimizer([first, second], learning_rate=0.1, clip_norm=1e3, weight_decay=0.0)
    opt.step()
    np.testing.assert_allclose(first.params[0], -0.1 * np.ones(2), rtol=1e-5)
    np.testing.assert_allclose(first.params[1], 0.1 * np.ones((1, 1)), rtol=1e-5)
    np.testing.assert_allclose(second.params[0], np.array([[-0.1], [0.1]]), rtol=1e-5)


def test_training_a_conv_layer_reduces_loss():
    rng = np.random.default_rng(2)
    layer = OptimizedConvLayer("conv", 1, 4, 4, 2, 3, 1, 1, rng=3)
    x = rng.normal(size=(16, 4))
    target = rng.normal(size=(layer.output_size, 4))
    opt = AdamClipOptimizer([layer], learning_rate=0.05, clip_norm=1e6, weight_decay=0.0)

    def loss():
        return 0.5 * np.sum((layer.forward(x) - target) ** 2)

    initial = loss()
    for _ in range(100):
        out = layer.forward(x)
        layer.backward(out - target, 0.0)
        opt.step()
    assert loss() < 0.8 * initial