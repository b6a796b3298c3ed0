"""Learning-rate schedules indexed by epoch."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class LRScheduler(ABC):
    """A schedule mapping an epoch number to a learning rate."""

    @abstractmethod
    def learning_rate(self, epoch: int) -> float:
        """Return the learning rate for ``epoch``."""


@dataclass
class CosineAnnealingScheduler(LRScheduler):
    """Cosine decay from ``initial_lr`` to ``min_lr`` over ``total_epochs``."""

    initial_lr: float
    min_lr: float
    total_epochs: int

    def learning_rate(self, epoch: int) -> float:
        if epoch >= self.total_epochs:
            return self.min_lr
        cosine = math.cos(math.pi * epoch / self.total_epochs)
        return self.min_lr + 0.5 * (self.initial_lr - self.min_lr) * (1.0 + cosine)


@dataclass
class StepScheduler(LRScheduler):
    """Multiply the rate by ``gamma`` every ``step_size`` epochs."""

    initial_lr: float
    gamma: float
    step_size: int

    def learning_rate(self, epoch: int) -> float:
        return self.initial_lr * self.gamma ** (epoch // self.step_size)


@dataclass
class MultiStepScheduler(LRScheduler):
    """Multiply the rate by ``gamma`` at each milestone epoch reached."""

    initial_lr: float
    gamma: float
    milestones: list[int] = field(default_factory=list)

    def learning_rate(self, epoch: int) -> float:
        passed = sum(1 for milestone in self.milestones if epoch >= milestone)
        return self.initial_lr * self.gamma**passed


@dataclass
class WarmupCosineScheduler(LRScheduler):
    """Linear warmup from ``min_lr`` followed by cosine annealing."""

    initial_lr: float
    min_lr: float
    warmup_epochs: int
    total_epochs: int

    def learning_rate(self, epoch: int) -> float:
        span = self.initial_lr - self.min_lr
        if epoch < self.warmup_epochs:
            return self.min_lr + span * epoch / self.warmup_epochs
        adjusted_epoch = epoch - self.warmup_epochs
        adjusted_total = self.total_epochs - self.warmup_epochs
        cosine = math.cos(math.pi * adjusted_epoch / adjusted_total)
        return self.min_lr + 0.5 * span * (1.0 + cosine)