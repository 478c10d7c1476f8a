"""Type coercion shared by the built-in rules.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from .rule import NO_COERCION

logger = logging.getLogger(__name__)

TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})
FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off"})


class Coercer:
    """Type coercion with predictable results.

    Never raises on bad input: when a value cannot be converted, ``coerce``
    returns ``NO_COERCION`` so the calling rule reports its own failure.
    """

    def coerce(self, value: Any, target_type: type) -> Any:
        """Coerce a value to the target type.

        Args:
            value: Value to coerce
            target_type: One of int, float, bool, list, dict

        Returns:
            The coerced value, or ``NO_COERCION``
        """
        if value is None:
            return NO_COERCION

        if isinstance(value, target_type) and not (
            target_type in (int, float) and isinstance(value, bool)
        ):
            return value

        try:
            return self._coerce_value(value, target_type)
        except (ValueError, TypeError, OverflowError, RecursionError) as e:
            logger.debug(f"Cannot coerce {type(value).__name__} to {target_type.__name__}: {e!s}")
            return NO_COERCION

    def number(self, value: Any) -> Any:
        """Coerce to an int when the value is integral, else to a float."""
        if isinstance(value, str):
            coerced = self.coerce(value, int)
            if coerced is not NO_COERCION:
                return coerced
            coerced = self.coerce(value, float)
            if coerced is NO_COERCION or math.isnan(coerced) or math.isinf(coerced):
                return NO_COERCION
            return coerced
        return NO_COERCION

    def _coerce_value(self, value: Any, target_type: type) -> Any:
        """Perform the actual coercion.

        Raises:
            ValueError: If the value cannot be converted
        """
        if target_type is int:
            if isinstance(value, str):
                value = value.strip()
                # Handle hex, octal, binary
                if value.startswith(("0x", "0X")):
                    return int(value, 16)
                elif value.startswith(("0o", "0O")):
                    return int(value, 8)
                elif value.startswith(("0b", "0B")):
                    return int(value, 2)
                return int(value)
            elif isinstance(value, float):
                # Check for data loss
                if value != int(value):
                    raise ValueError(f"Float {value} cannot be losslessly converted to int")
                return int(value)
            raise TypeError(f"Unsupported source type {type(value).__name__}")

        elif target_type is float:
            if isinstance(value, str):
                return float(value.strip())
            elif isinstance(value, int) and not isinstance(value, bool):
                return float(value)
            raise TypeError(f"Unsupported source type {type(value).__name__}")

        elif target_type is bool:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in TRUE_STRINGS:
                    return True
                elif lowered in FALSE_STRINGS:
                    return False
                raise ValueError(f"String '{value}' is not a valid boolean")
            elif isinstance(value, (int, float)) and value in (0, 1):
                return bool(value)
            raise ValueError(f"Cannot interpret {value!r} as a boolean")

        elif target_type is dict:
            if isinstance(value, str):
                result = json.loads(value)
                if not isinstance(result, dict):
                    raise ValueError("JSON text is not an object")
                return result
            raise TypeError(f"Unsupported source type {type(value).__name__}")

        elif target_type is list:
            if isinstance(value, str):
                # Try parsing as JSON
                try:
                    result = json.loads(value)
                    if isinstance(result, list):
                        return result
                except (json.JSONDecodeError, RecursionError):
                    pass
                # Split comma-separated values
                if "," in value:
                    return [v.strip() for v in value.split(",")]
                raise ValueError(f"Cannot split '{value}' into a list")
            elif isinstance(value, tuple):
                return list(value)
            raise TypeError(f"Unsupported source type {type(value).__name__}")

        raise TypeError(f"Unsupported target type {target_type.__name__}")


default_coercer = Coercer()
