import math

import pytest

from zyraai.lr_scheduler import (
    CosineAnnealingScheduler,
    LRScheduler,
    MultiStepScheduler,
    StepScheduler,
    WarmupCosineScheduler,
)


def test_base_is_abstract():
    with pytest.raises(TypeError):
        LRScheduler()


def test_cosine_endpoints_and_midpoint():
    sched = CosineAnnealingScheduler(0.1, 0.001, 10)
    assert math.isclose(sched.learning_rate(0), 0.1)
    assert sched.learning_rate(10) == 0.001
    assert sched.learning_rate(25) == 0.001
    assert math.isclose(sched.learning_rate(5), (0.1 + 0.001) / 2)


def test_cosine_is_non_increasing():
    sched = CosineAnnealingScheduler(0.01, 0.0001, 20)
    rates = [sched.learning_rate(e) for e in range(21)]
    assert all(a >= b for a, b in zip(rates, rates[1:]))


def test_step_scheduler():
    sched = StepScheduler(0.1, 0.5, 3)
    assert sched.learning_rate(0) == 0.1
    assert sched.learning_rate(2) == 0.1
    assert math.isclose(sched.learning_rate(3), 0.1 * 0.5)
    assert math.isclose(sched.learning_rate(7), 0.1 * 0.5 * 0.5)


def test_multistep_scheduler():
    sched = MultiStepScheduler(1.0, 0.1, [5, 10])
    assert sched.learning_rate(4) == 1.0
    assert math.isclose(sched.learning_rate(5), 0.1)
    assert math.isclose(sched.learning_rate(10), 0.1 * 0.1)
    assert math.isclose(sched.learning_rate(100), 0.1 * 0.1)


def test_multistep_without_milestones_is_constant():
    sched = MultiStepScheduler(0.3, 0.1)
    assert {sched.learning_rate(e) for e in range(10)} == {0.3}


def test_warmup_cosine_shape():
    sched = WarmupCosineScheduler(0.001, 0.00001, 5, 50)
    assert math.isclose(sched.learning_rate(0), 0.00001)
    assert math.isclose(sched.learning_rate(5), 0.001)
    assert math.isclose(sched.learning_rate(50), 0.00001)
    warm = [sched.learning_rate(e) for e in range(6)]
    assert all(a < b for a, b in zip(warm, warm[1:]))
    decay = [sched.learning_rate(e) for e in range(5, 51)]
    assert all(a >= b for a, b in zip(decay, decay[1:]))