"""Outcome handed to single-shot commerce handlers."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Either a product list or purchase confirmation, or the error that replaced it."""

    value: T | None = None
    error: E | None = None

    def __post_init__(self) -> None:
        if self.value is not None and self.error is not None:
            raise ValueError("Result cannot carry both a value and an error")

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return not self.is_success

    @classmethod
    def success(cls, value: T) -> "Result[T, E]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: E) -> "Result[T, E]":
        return cls(error=error)
