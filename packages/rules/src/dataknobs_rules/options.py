"""Engine-wide validation options."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Union

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class ValidationOptions:
    """Options recognized by the validation engine.

    Attributes:
        convert: Enable coercion of failing values followed by one re-validation
        abort_early: Stop the run at the first failing rule
    """

    convert: bool = False
    abort_early: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationOptions:
        """Create options from a configuration dictionary.

        Args:
            data: Mapping of option names to values

        Returns:
            ValidationOptions instance

        Raises:
            ConfigurationError: If the mapping contains unknown option names
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown validation options: {', '.join(unknown)}",
                context={"unknown": unknown, "known": sorted(known)},
            )
        return cls(**{key: bool(value) for key, value in data.items()})

    def merge(self, overrides: OptionsLike | None) -> ValidationOptions:
        """Return a copy with the given overrides applied.

        Args:
            overrides: Another ValidationOptions (replaces these entirely),
                a mapping of option names to values, or None

        Returns:
            The merged options
        """
        if overrides is None:
            return self
        if isinstance(overrides, ValidationOptions):
            return overrides
        # Validates the keys
        ValidationOptions.from_dict(overrides)
        return replace(self, **{key: bool(value) for key, value in overrides.items()})


OptionsLike = Union[ValidationOptions, Mapping[str, Any]]
