"""Validation result types with consistent, predictable behavior.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple, Union

PathItem = Union[str, int]


@dataclass(frozen=True)
class ValidationError:
    """Immutable record of a single rule failure.

    This is a data record, not an exception: the engine collects these and
    returns them rather than raising.

    Attributes:
        rule_name: Dotted name of the rule that failed (e.g. ``"string.min"``)
        path: Key/index accessors from the validation root to the failing value
        info: Rule-specific diagnostic data, or None
    """

    rule_name: str
    path: Tuple[PathItem, ...] = ()
    info: Any = None

    @property
    def location(self) -> str:
        """The path rendered as a dotted string (empty for the root)."""
        return ".".join(str(item) for item in self.path)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rule": self.rule_name,
            "path": list(self.path),
            "info": self.info,
        }

    def __str__(self) -> str:
        location = f" at {self.location}" if self.path else ""
        info = f": {self.info}" if self.info is not None else ""
        return f"{self.rule_name}{location}{info}"


@dataclass
class ValidationResult:
    """Unified result object for a validation run.

    Carries the validity flag, the (possibly coerced) value, and the ordered
    list of collected errors.
    """

    valid: bool
    value: Any
    errors: list[ValidationError] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    @property
    def error(self) -> ValidationError | None:
        """The first collected error, or None for a successful result."""
        return self.errors[0] if self.errors else None

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine results for composite validation.

        Args:
            other: Another ValidationResult to merge with this one

        Returns:
            New ValidationResult with combined state
        """
        return ValidationResult(
            valid=self.valid and other.valid,
            value=other.value if other.valid else self.value,
            errors=self.errors + other.errors,
        )

    def add_error(self, error: ValidationError) -> ValidationResult:
        """Add an error and mark as invalid (fluent API).

        Args:
            error: Error record to add

        Returns:
            Self for chaining
        """
        self.errors.append(error)
        self.valid = False
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "valid": self.valid,
            "value": self.value,
            "errors": [error.to_dict() for error in self.errors],
        }

    @classmethod
    def success(cls, value: Any) -> ValidationResult:
        """Create a successful validation result.

        Args:
            value: The validated (possibly coerced) value

        Returns:
            Successful ValidationResult
        """
        return cls(valid=True, value=value, errors=[])

    @classmethod
    def failure(cls, value: Any, errors: list[ValidationError]) -> ValidationResult:
        """Create a failed validation result.

        Args:
            value: The value that failed validation
            errors: List of error records

        Returns:
            Failed ValidationResult
        """
        return cls(valid=False, value=value, errors=list(errors))
