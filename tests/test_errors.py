import pytest

from zyraai.errors import (
    DimensionMismatch,
    ErrorCategory,
    HardwareError,
    InvalidArgument,
    NumericError,
    OutOfRange,
    UnsupportedOperation,
    ZyraAIError,
)


def test_base_error_message_format():
    err = ZyraAIError("something broke", ErrorCategory.RUNTIME_ERROR, "Trainer")
    assert str(err) == "[RUNTIME_ERROR in Trainer] something broke"
    assert err.category is ErrorCategory.RUNTIME_ERROR
    assert err.component == "Trainer"


@pytest.mark.parametrize(
    "cls, category",
    [
        (InvalidArgument, ErrorCategory.INVALID_ARGUMENT),
        (DimensionMismatch, ErrorCategory.DIMENSION_MISMATCH),
        (OutOfRange, ErrorCategory.OUT_OF_RANGE),
        (NumericError, ErrorCategory.NUMERIC_ERROR),
        (HardwareError, ErrorCategory.HARDWARE_ERROR),
        (UnsupportedOperation, ErrorCategory.UNSUPPORTED_OPERATION),
    ],
)
def test_subclasses_carry_category(cls, category):
    err = cls("msg", "Comp")
    assert err.category is category
    assert str(err) == f"[{category.value} in Comp] msg"
    assert isinstance(err, ZyraAIError)


def test_dimension_mismatch_from_dims():
    err = DimensionMismatch.from_dims(10, 7, "Dense")
    assert str(err) == "[DIMENSION_MISMATCH in Dense] Expected dimension: 10, got: 7"
    assert err.component == "Dense"


def test_errors_can_be_caught_as_runtime_error():
    err = OutOfRange("index 5", "Buffer")
    assert isinstance(err, RuntimeError)
    assert err.category is ErrorCategory.OUT_OF_RANGE
    assert err.component == "Buffer"
    assert str(err) == "[OUT_OF_RANGE in Buffer] index 5"
    with pytest.raises(RuntimeError, match=r"^\[OUT_OF_RANGE in Buffer\] index 5$"):
        raise err


@pytest.mark.parametrize("category", list(ErrorCategory))
def test_every_category_formats_by_name(category):
    err = ZyraAIError("m", category, "X")
    assert str(err) == f"[{category.name} in X] m"