"""Exception hierarchy with categories and component tags."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(Enum):
    """Broad classes of failure reported by the library."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DIMENSION_MISMATCH = "DIMENSION_MISMATCH"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    NUMERIC_ERROR = "NUMERIC_ERROR"
    HARDWARE_ERROR = "HARDWARE_ERROR"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

    def __str__(self) -> str:
        return self.value


class ZyraAIError(RuntimeError):
    """Base error carrying a category and the component that raised it."""

    def __init__(self, message: str, category: ErrorCategory, component: str) -> None:
        super().__init__(f"[{category} in {component}] {message}")
        self.category = category
        self.component = component
        self.detail = message


class InvalidArgument(ZyraAIError):
    """An argument or parameter has an unacceptable value."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.INVALID_ARGUMENT, component)


class DimensionMismatch(ZyraAIError):
    """A tensor does not have the expected dimensions."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.DIMENSION_MISMATCH, component)

    @classmethod
    def from_dims(cls, expected: int, actual: int, component: str) -> "DimensionMismatch":
        """Build an error describing an expected and an actual dimension."""
        return cls(f"Expected dimension: {expected}, got: {actual}", component)


class OutOfRange(ZyraAIError):
    """An index or value lies outside its allowed range."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.OUT_OF_RANGE, component)


class NumericError(ZyraAIError):
    """A numerical computation failed (overflow, underflow and the like)."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.NUMERIC_ERROR, component)


class HardwareError(ZyraAIError):
    """A hardware-related failure."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.HARDWARE_ERROR, component)


class UnsupportedOperation(ZyraAIError):
    """The operation is not supported in the current configuration."""

    def __init__(self, message: str, component: str) -> None:
        super().__init__(message, ErrorCategory.UNSUPPORTED_OPERATION, component)