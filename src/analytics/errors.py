from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from .transactions import Transaction


class AnalyticsError(Exception):
    """Base class for every error raised by the analytics engine."""


class InvalidInputError(AnalyticsError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        asset_id: str | None = None,
        transaction: Transaction | None = None,
        index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.asset_id = asset_id
        self.transaction = transaction
        self.index = index

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> InvalidInputError:
        """Unwrap an engine error raised inside a validator, or describe the first failing field."""
        errors = exc.errors()
        for error in errors:
            original = error.get("ctx", {}).get("error")
            if isinstance(original, InvalidInputError):
                return original
        first = errors[0]
        location = ".".join(str(part) for part in first["loc"]) or exc.title
        return cls(f"Invalid {exc.title}: {location}: {first['msg']}")


class InvalidConfigurationError(InvalidInputError):
    def __init__(self, message: str, *, option: str, value: object) -> None:
        super().__init__(message)
        self.option = option
        self.value = value
