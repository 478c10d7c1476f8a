"""Boolean rule."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..coercer import default_coercer
from ..rule import SyncRule

if TYPE_CHECKING:
    from ..context import ValidationContext


class BooleanValidator(SyncRule):
    """The value must be True or False.

    With ``convert``, strings such as ``"yes"``/``"off"`` and the numbers
    0 and 1 are accepted.
    """

    rule_name = "boolean"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return isinstance(ctx.value, bool)

    def coerce(self, value: Any) -> Any:
        return default_coercer.coerce(value, bool)


RULES = [BooleanValidator]
